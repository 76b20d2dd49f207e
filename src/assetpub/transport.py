"""Transports: how one file reaches a destination directory.

A transport is picked once, from the configured base path, by
:func:`select_transport`.  Local paths get :class:`LocalTransport` (or
:class:`LinkTransport` when assets are symlinked); ``ftp://`` and
``ftps://`` addresses get :class:`FTPTransport`.  Everything above this
module talks to the :class:`Transport` interface only.
"""

from __future__ import annotations

import ftplib
import logging
import os
import posixpath
import shutil
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator
from urllib.parse import unquote, urlsplit

from .exceptions import (
    AuthenticationError,
    ConnectError,
    TransferError,
    UnsupportedSchemeError,
    UploadError,
)

log = logging.getLogger("assetpub")

FTP_SCHEMES = ("ftp", "ftps")
DEFAULT_FTP_PORT = 21
DEFAULT_TIMEOUT = 30.0


def is_remote_address(address: str) -> bool:
    """True if *address* looks like ``scheme://...`` rather than a path."""
    return "://" in address


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------

class Transport(ABC):
    """Copy single files into destination directories.

    Destination directories are addresses in the transport's own
    namespace: filesystem paths for local transports, full URIs for
    remote ones.
    """

    is_remote = False
    supports_links = False

    def join(self, dest_dir: str, name: str) -> str:
        return posixpath.join(dest_dir, name)

    @abstractmethod
    def copy_file(self, src_file: str, dest_dir: str, file_name: str) -> None:
        """Copy *src_file* to ``dest_dir/file_name``.

        Raises :class:`TransferError` if the destination cannot be written.
        """

    @abstractmethod
    def makedirs(self, dest_dir: str, mode: int | None = None) -> None:
        """Create *dest_dir* and any missing parents."""

    @abstractmethod
    def is_dir(self, dest_dir: str) -> bool:
        """True if *dest_dir* exists."""

    @abstractmethod
    def mtime(self, dest_file: str) -> float | None:
        """Modification time of *dest_file*, or ``None`` if it is missing."""

    def chmod(self, dest: str, mode: int) -> None:
        """Apply a permission mode.  No-op where modes do not apply."""

    def link_dir(self, src_dir: str, dest_dir: str) -> None:
        """Publish a whole directory as a link (``supports_links`` only)."""
        raise TransferError(f"{type(self).__name__} cannot link directories", dest_dir)


# ---------------------------------------------------------------------------
# Local filesystem
# ---------------------------------------------------------------------------

class LocalTransport(Transport):
    """Byte-for-byte copy on the local filesystem."""

    def join(self, dest_dir: str, name: str) -> str:
        return os.path.join(dest_dir, name)

    def copy_file(self, src_file: str, dest_dir: str, file_name: str) -> None:
        dest = os.path.join(dest_dir, file_name)
        try:
            shutil.copyfile(src_file, dest)
        except OSError as exc:
            raise TransferError(f"Cannot copy {src_file} to {dest}: {exc}", dest) from exc
        log.debug("[copy] %s -> %s", src_file, dest)

    def makedirs(self, dest_dir: str, mode: int | None = None) -> None:
        try:
            os.makedirs(dest_dir, exist_ok=True)
        except OSError as exc:
            raise TransferError(f"Cannot create directory {dest_dir}: {exc}", dest_dir) from exc
        if mode is not None:
            self.chmod(dest_dir, mode)

    def is_dir(self, dest_dir: str) -> bool:
        return os.path.isdir(dest_dir)

    def mtime(self, dest_file: str) -> float | None:
        try:
            return os.stat(dest_file).st_mtime
        except OSError:
            return None

    def chmod(self, dest: str, mode: int) -> None:
        try:
            os.chmod(dest, mode)
        except OSError as exc:
            log.debug("[chmod] %s %o failed: %s", dest, mode, exc)


class LinkTransport(LocalTransport):
    """Symlink published assets to their sources instead of copying.

    Only usable for local destinations.  Linked assets always reflect the
    current source, so freshness checks never trigger a recopy.
    """

    supports_links = True

    def copy_file(self, src_file: str, dest_dir: str, file_name: str) -> None:
        dest = os.path.join(dest_dir, file_name)
        try:
            if os.path.lexists(dest):
                os.unlink(dest)
            os.symlink(src_file, dest)
        except OSError as exc:
            raise TransferError(f"Cannot link {dest} -> {src_file}: {exc}", dest) from exc
        log.debug("[link] %s -> %s", dest, src_file)

    def link_dir(self, src_dir: str, dest_dir: str) -> None:
        """Link the whole *dest_dir* to *src_dir*."""
        try:
            os.makedirs(os.path.dirname(dest_dir) or ".", exist_ok=True)
            os.symlink(src_dir, dest_dir, target_is_directory=True)
        except OSError as exc:
            raise TransferError(f"Cannot link {dest_dir} -> {src_dir}: {exc}", dest_dir) from exc
        log.debug("[link] %s -> %s", dest_dir, src_dir)

    def chmod(self, dest: str, mode: int) -> None:
        # chmod would follow the link and change the source
        if not os.path.islink(dest):
            super().chmod(dest, mode)


# ---------------------------------------------------------------------------
# FTP / FTPS
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoteAddress:
    """A parsed ``scheme://[user[:password]@]host[:port]/path`` address."""
    scheme: str
    host: str
    path: str = ""
    port: int | None = None
    username: str | None = None
    password: str | None = None


def parse_address(address: str) -> RemoteAddress:
    """Split a remote destination into its parts.

    Raises :class:`UnsupportedSchemeError` for schemes other than
    ``ftp`` and ``ftps``, and :class:`TransferError` if there is no host.
    """
    parts = urlsplit(address)
    scheme = parts.scheme.lower()
    if scheme not in FTP_SCHEMES:
        raise UnsupportedSchemeError(
            f"Unsupported scheme {parts.scheme!r}: only FTP transfers are implemented",
            address,
        )
    if not parts.hostname:
        raise TransferError(f"No host in destination address {address!r}", address)
    return RemoteAddress(
        scheme=scheme,
        host=parts.hostname,
        path=parts.path.rstrip("/") if parts.path != "/" else "/",
        port=parts.port,
        username=unquote(parts.username) if parts.username else None,
        password=unquote(parts.password) if parts.password else None,
    )


def _parse_mdtm(reply: str) -> float:
    """Convert an ``213 YYYYMMDDHHMMSS[.sss]`` reply to an epoch time."""
    stamp = reply.split()[-1].split(".")[0]
    dt = datetime.strptime(stamp, "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    return dt.timestamp()


class FTPTransport(Transport):
    """Upload files over FTP or explicit FTPS.

    Each operation opens its own session: connect, log in (anonymously
    when the address carries no credentials), act, quit.
    """

    is_remote = True

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def join(self, dest_dir: str, name: str) -> str:
        return dest_dir.rstrip("/") + "/" + name

    @contextmanager
    def _session(self, address: RemoteAddress) -> Iterator[ftplib.FTP]:
        ftp_class = ftplib.FTP_TLS if address.scheme == "ftps" else ftplib.FTP
        ftp = ftp_class(timeout=self.timeout)
        try:
            ftp.connect(address.host, address.port or DEFAULT_FTP_PORT)
        except ftplib.all_errors as exc:
            ftp.close()
            raise ConnectError(
                f"FTP connection to {address.host} has failed: {exc}", address.host,
            ) from exc
        try:
            try:
                ftp.login(address.username or "anonymous", address.password or "")
                if address.scheme == "ftps":
                    ftp.prot_p()
            except ftplib.all_errors as exc:
                raise AuthenticationError(
                    f"FTP login to {address.host} has failed: {exc}", address.host,
                ) from exc
            yield ftp
        finally:
            try:
                ftp.quit()
            except ftplib.all_errors:
                ftp.close()

    def copy_file(self, src_file: str, dest_dir: str, file_name: str) -> None:
        address = parse_address(dest_dir)
        remote = posixpath.join(address.path, file_name)
        with self._session(address) as ftp:
            try:
                with open(src_file, "rb") as fh:
                    ftp.storbinary(f"STOR {remote}", fh)
            except ftplib.all_errors as exc:
                raise UploadError(f"FTP upload of {remote} has failed: {exc}", remote) from exc
        log.debug("[ftp] %s -> %s:%s", src_file, address.host, remote)

    def makedirs(self, dest_dir: str, mode: int | None = None) -> None:
        address = parse_address(dest_dir)
        with self._session(address) as ftp:
            current = "/" if address.path.startswith("/") else ""
            try:
                for part in address.path.strip("/").split("/"):
                    if not part:
                        continue
                    current = posixpath.join(current, part)
                    try:
                        ftp.cwd(current)
                    except ftplib.error_perm:
                        ftp.mkd(current)
            except ftplib.all_errors as exc:
                raise UploadError(
                    f"Cannot create remote directory {current}: {exc}", current,
                ) from exc

    def is_dir(self, dest_dir: str) -> bool:
        address = parse_address(dest_dir)
        path = address.path or "/"
        with self._session(address) as ftp:
            try:
                ftp.cwd(path)
            except ftplib.error_perm:
                return False
            except ftplib.all_errors as exc:
                raise TransferError(f"Cannot inspect remote directory {path}: {exc}", path) from exc
            return True

    def mtime(self, dest_file: str) -> float | None:
        """``MDTM`` of *dest_file*; ``None`` when missing or unsupported.

        Other failures raise :class:`TransferError`.
        """
        address = parse_address(dest_file)
        with self._session(address) as ftp:
            try:
                return _parse_mdtm(ftp.voidcmd(f"MDTM {address.path}"))
            except (ftplib.error_perm, ValueError):
                return None
            except ftplib.all_errors as exc:
                raise TransferError(
                    f"Cannot stat remote file {address.path}: {exc}", address.path,
                ) from exc


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def select_transport(
    base_path: str, *, link: bool = False, timeout: float = DEFAULT_TIMEOUT,
) -> Transport:
    """Pick the transport for a configured base destination.

    Scheme detection is a prefix check, not full parsing.  Symlinking
    is ignored for remote destinations.
    """
    if is_remote_address(base_path):
        scheme = base_path.split("://", 1)[0].lower()
        if scheme not in FTP_SCHEMES:
            raise UnsupportedSchemeError(
                f"Unsupported scheme {scheme!r}: only FTP transfers are implemented",
                base_path,
            )
        return FTPTransport(timeout=timeout)
    if link:
        return LinkTransport()
    return LocalTransport()
