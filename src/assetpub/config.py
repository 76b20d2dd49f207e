"""Publisher configuration.

:class:`AssetPublisher` only needs the four values of the
:class:`Deployment` protocol from its host environment.
:class:`PublisherConfig` is the stock implementation, filled in
directly or from ``ASSETPUB_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Protocol, runtime_checkable

from .copy import DEFAULT_DIR_MODE
from .exceptions import ConfigError
from .transport import DEFAULT_TIMEOUT, is_remote_address

DEFAULT_EXCLUDE = (".svn", ".gitignore", ".git")
ENV_PREFIX = "ASSETPUB_"


@runtime_checkable
class Deployment(Protocol):
    """What the publisher needs to know about where assets go."""

    def base_path(self) -> str:
        """Local directory or ``ftp(s)://`` address receiving assets."""
        ...

    def base_url(self) -> str:
        """Public URL prefix under which *base_path* is served."""
        ...

    def file_mode(self) -> int | None:
        ...

    def dir_mode(self) -> int:
        ...


def make_base_url(host: str, path: str = "", *, secure: bool = False) -> str:
    """Build ``http(s)://host/path`` for a deployment served from *host*."""
    scheme = "https" if secure else "http"
    url = f"{scheme}://{host.strip('/')}"
    path = path.strip("/")
    return f"{url}/{path}" if path else url


def resolve_base_path(value: str) -> str:
    """Validate a base path, returning its canonical form.

    Remote addresses are returned unchanged.  Local paths must be
    existing, writable directories.
    """
    if is_remote_address(value):
        return value
    real = os.path.realpath(value)
    if os.path.isdir(real) and os.access(real, os.W_OK):
        return real
    raise ConfigError(
        f"Base path {value!r} is invalid. Make sure the directory exists "
        "and is writable by the publishing process."
    )


def _parse_mode(raw: str | None, name: str) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(raw, 8)
    except ValueError:
        raise ConfigError(f"{name} must be an octal mode, got {raw!r}")


def _parse_list(raw: str | None) -> tuple[str, ...] | None:
    if raw is None:
        return None
    return tuple(p.strip() for p in raw.split(",") if p.strip())


def _parse_bool(raw: str | None) -> bool:
    return (raw or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class PublisherConfig:
    """Settings for an :class:`~assetpub.publisher.AssetPublisher`.

    Attributes:
        path: Destination root (local directory or ``ftp(s)://`` address).
        url: Public URL prefix for *path*.
        new_file_mode: Mode for copied files (``None``: process default).
        new_dir_mode: Mode for created directories.
        exclude: Exclusion tokens applied when publishing directories.
        file_types: Extensions to publish from directories (empty: all).
        ignore_patterns: Extra gitignore-style patterns.
        lock_path: Directory holding lock markers.  ``None`` disables
            locking.
        link_assets: Symlink instead of copy (local destinations only).
        hash_salt: Appended to every hashed path; change it to move all
            assets to fresh directories.
        ftp_timeout: Socket timeout for remote transfers, in seconds.
    """
    path: str
    url: str
    new_file_mode: int | None = None
    new_dir_mode: int = DEFAULT_DIR_MODE
    exclude: tuple[str, ...] = DEFAULT_EXCLUDE
    file_types: tuple[str, ...] = ()
    ignore_patterns: tuple[str, ...] = ()
    lock_path: str | None = None
    link_assets: bool = False
    hash_salt: str = ""
    ftp_timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.path:
            raise ConfigError("Base path must not be empty")
        if not self.url:
            raise ConfigError("Base URL must not be empty")

    # Deployment protocol

    def base_path(self) -> str:
        return self.path

    def base_url(self) -> str:
        return self.url.rstrip("/")

    def file_mode(self) -> int | None:
        return self.new_file_mode

    def dir_mode(self) -> int:
        return self.new_dir_mode

    @property
    def lock_assets(self) -> bool:
        return self.lock_path is not None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> PublisherConfig:
        """Build a config from ``ASSETPUB_*`` variables.

        ``ASSETPUB_BASE_PATH`` is required.  The URL comes from
        ``ASSETPUB_BASE_URL`` or else ``ASSETPUB_HOST`` (+
        ``ASSETPUB_URL_PATH``, ``ASSETPUB_SECURE``).  Keyword *overrides*
        win over the environment.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            return env.get(ENV_PREFIX + name)

        values: dict = {}
        if get("BASE_PATH"):
            values["path"] = get("BASE_PATH")
        if get("BASE_URL"):
            values["url"] = get("BASE_URL")
        elif get("HOST"):
            values["url"] = make_base_url(
                get("HOST"), get("URL_PATH") or "", secure=_parse_bool(get("SECURE")),
            )
        file_mode = _parse_mode(get("FILE_MODE"), "ASSETPUB_FILE_MODE")
        if file_mode is not None:
            values["new_file_mode"] = file_mode
        dir_mode = _parse_mode(get("DIR_MODE"), "ASSETPUB_DIR_MODE")
        if dir_mode is not None:
            values["new_dir_mode"] = dir_mode
        exclude = _parse_list(get("EXCLUDE"))
        if exclude is not None:
            values["exclude"] = exclude
        file_types = _parse_list(get("FILE_TYPES"))
        if file_types is not None:
            values["file_types"] = file_types
        if get("LOCK_PATH"):
            values["lock_path"] = get("LOCK_PATH")
        if get("LINK") is not None:
            values["link_assets"] = _parse_bool(get("LINK"))
        if get("HASH_SALT") is not None:
            values["hash_salt"] = get("HASH_SALT")
        if get("FTP_TIMEOUT"):
            try:
                values["ftp_timeout"] = float(get("FTP_TIMEOUT"))
            except ValueError:
                raise ConfigError(f"ASSETPUB_FTP_TIMEOUT must be a number, got {get('FTP_TIMEOUT')!r}")

        values.update({k: v for k, v in overrides.items() if v is not None})
        if "path" not in values:
            raise ConfigError("No base path. Set ASSETPUB_BASE_PATH or pass --base-path.")
        if "url" not in values:
            raise ConfigError("No base URL. Set ASSETPUB_BASE_URL or ASSETPUB_HOST.")
        return cls(**values)
