"""Publish local files and directories to a web-accessible location.

An :class:`AssetPublisher` copies an asset into a directory named after
a short hash of its source path and returns the public URL of the copy::

    config = PublisherConfig(path="/var/www/assets", url="https://cdn.example.com/assets")
    publisher = AssetPublisher.from_config(config)
    publisher.publish("/srv/app/static/app.css")
    # 'https://cdn.example.com/assets/1a2b3c4d/app.css'

Files are recopied only when the source is newer than the published
copy.  Directories are copied once, unless *force_copy* is given.  With
a lock path configured, a published asset gets a lock marker and is
never checked again until the marker is deleted.
"""

from __future__ import annotations

import logging
import os
import threading
import zlib
from dataclasses import dataclass
from typing import Sequence

from .config import DEFAULT_EXCLUDE, Deployment, PublisherConfig, resolve_base_path
from .copy import CopySpec, copy_directory
from .exceptions import (
    AssetDeployError,
    AssetNotFoundError,
    LockError,
    SyncError,
    TransferError,
)
from .lock import LockManager
from .transport import DEFAULT_TIMEOUT, Transport, select_transport

log = logging.getLogger("assetpub")


def asset_hash(value: str, salt: str = "") -> str:
    """Short, stable directory name for *value* (hex CRC32)."""
    return "%x" % (zlib.crc32((value + salt).encode("utf-8")) & 0xFFFFFFFF)


def _dest_dir_name(src: str, is_file: bool, hash_by_name: bool, salt: str) -> str:
    if hash_by_name:
        return asset_hash(os.path.basename(src), salt)
    # Files share a directory with their siblings; directories get
    # one of their own.
    return asset_hash(os.path.dirname(src) if is_file else src, salt)


def destination_name(path: str, hash_by_name: bool = False, salt: str = "") -> str:
    """Hashed directory name *path* is published under.

    Raises :class:`AssetNotFoundError` if *path* does not exist.
    """
    src = os.path.realpath(path)
    if os.path.isfile(src):
        return _dest_dir_name(src, True, hash_by_name, salt)
    if os.path.isdir(src):
        return _dest_dir_name(src, False, hash_by_name, salt)
    raise AssetNotFoundError(path)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AssetRequest:
    """Input of one publish call."""
    source_path: str
    hash_by_name: bool = False
    level: int = -1
    force_copy: bool = False


@dataclass(frozen=True)
class PublishedAsset:
    """Where a source path was published.

    Attributes:
        source_path: The path as given to :meth:`AssetPublisher.publish`.
        dest_dir: Hashed directory name under the base path.
        url: Public URL of the published file or directory.
        file_name: Published file name, ``None`` for directories.
    """
    source_path: str
    dest_dir: str
    url: str
    file_name: str | None = None


class PublishCache:
    """Thread-safe map of source path to :class:`PublishedAsset`."""

    def __init__(self) -> None:
        self._items: dict[str, PublishedAsset] = {}
        self._guard = threading.Lock()

    def get(self, source_path: str) -> PublishedAsset | None:
        with self._guard:
            return self._items.get(source_path)

    def put(self, asset: PublishedAsset) -> None:
        with self._guard:
            self._items[asset.source_path] = asset

    def clear(self) -> None:
        with self._guard:
            self._items.clear()

    def __contains__(self, source_path: str) -> bool:
        with self._guard:
            return source_path in self._items

    def __len__(self) -> int:
        with self._guard:
            return len(self._items)


# ---------------------------------------------------------------------------
# Publisher
# ---------------------------------------------------------------------------

class AssetPublisher:
    """Copy assets under a deployment's base path and hand out their URLs.

    Args:
        deployment: Supplies base path, base URL and permission modes.
        exclude: Exclusion tokens for directory publishing.
        file_types: Extensions to copy from directories (empty: all).
        ignore_patterns: Extra gitignore-style patterns for directories.
        lock_path: Directory for lock markers; ``None`` disables locking.
        link_assets: Symlink assets instead of copying them.  Ignored for
            remote destinations.
        hash_salt: Mixed into every hashed directory name.
        transport: Explicit transport; chosen from the base path if omitted.
        cache: Shared :class:`PublishCache`; a private one if omitted.
    """

    def __init__(
        self,
        deployment: Deployment,
        *,
        exclude: Sequence[str] = DEFAULT_EXCLUDE,
        file_types: Sequence[str] = (),
        ignore_patterns: Sequence[str] = (),
        lock_path: str | None = None,
        link_assets: bool = False,
        hash_salt: str = "",
        ftp_timeout: float = DEFAULT_TIMEOUT,
        transport: Transport | None = None,
        cache: PublishCache | None = None,
    ) -> None:
        self._base_path = resolve_base_path(deployment.base_path())
        self._base_url = deployment.base_url().rstrip("/")
        self._file_mode = deployment.file_mode()
        self._dir_mode = deployment.dir_mode()
        self._transport = transport or select_transport(
            self._base_path, link=link_assets, timeout=ftp_timeout,
        )
        self._exclude = frozenset(exclude)
        self._file_types = frozenset(file_types)
        self._ignore_patterns = tuple(ignore_patterns)
        self._hash_salt = hash_salt
        self._locks = LockManager(lock_path) if lock_path else None
        self.cache = cache if cache is not None else PublishCache()

    @classmethod
    def from_config(cls, config: PublisherConfig, **kwargs) -> AssetPublisher:
        """Create a publisher from a :class:`PublisherConfig`."""
        options = dict(
            exclude=config.exclude,
            file_types=config.file_types,
            ignore_patterns=config.ignore_patterns,
            lock_path=config.lock_path,
            link_assets=config.link_assets,
            hash_salt=config.hash_salt,
            ftp_timeout=config.ftp_timeout,
        )
        options.update(kwargs)
        return cls(config, **options)

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def locks(self) -> LockManager | None:
        return self._locks

    # ------------------------------------------------------------------
    def hash(self, value: str) -> str:
        return asset_hash(value, self._hash_salt)

    def _dest_dir(self, src: str, is_file: bool, hash_by_name: bool) -> str:
        return _dest_dir_name(src, is_file, hash_by_name, self._hash_salt)

    def _destination(self, path: str, hash_by_name: bool) -> tuple[str, str | None] | None:
        src = os.path.realpath(path)
        if os.path.isfile(src):
            return self._dest_dir(src, True, hash_by_name), os.path.basename(src)
        if os.path.isdir(src):
            return self._dest_dir(src, False, hash_by_name), None
        return None

    def published_path(self, path: str, hash_by_name: bool = False) -> str | None:
        """Where *path* would be published, without copying anything.

        Returns ``None`` if *path* does not exist.
        """
        dest = self._destination(path, hash_by_name)
        if dest is None:
            return None
        dest_dir, file_name = dest
        dst = self._transport.join(self._base_path, dest_dir)
        return self._transport.join(dst, file_name) if file_name else dst

    def published_url(self, path: str, hash_by_name: bool = False) -> str | None:
        """URL *path* would be published at, without copying anything."""
        dest = self._destination(path, hash_by_name)
        if dest is None:
            return None
        return self._url(*dest)

    def _url(self, dest_dir: str, file_name: str | None) -> str:
        if file_name is None:
            return f"{self._base_url}/{dest_dir}"
        return f"{self._base_url}/{dest_dir}/{file_name}"

    def get_published(self, path: str) -> PublishedAsset | None:
        """The cached result of an earlier :meth:`publish` of *path*."""
        return self.cache.get(path)

    # ------------------------------------------------------------------
    def publish(
        self,
        path: str,
        hash_by_name: bool = False,
        level: int = -1,
        force_copy: bool = False,
    ) -> str:
        """Publish a file or directory and return its public URL.

        Args:
            path: The asset to publish.
            hash_by_name: Name the published directory after the hashed
                basename instead of the hashed parent directory (files) or
                full path (directories).  Use it for assets shared between
                several source locations.
            level: Recursion depth for directories; ``-1`` copies all
                subdirectories, ``0`` only the files directly inside.
            force_copy: Copy a directory even if it was published before.
                Has no effect on single files, which are recopied whenever
                the source is newer.

        Raises:
            AssetNotFoundError: *path* does not exist.
            AssetDeployError: *path* exists but could not be copied.
        """
        request = AssetRequest(path, hash_by_name, level, force_copy)
        return self.publish_request(request).url

    def publish_request(self, request: AssetRequest) -> PublishedAsset:
        """Like :meth:`publish`, returning the full :class:`PublishedAsset`."""
        cached = self.cache.get(request.source_path)
        if cached is not None:
            return cached

        src = os.path.realpath(request.source_path)
        is_file = os.path.isfile(src)
        if not is_file and not os.path.isdir(src):
            raise AssetNotFoundError(request.source_path)

        if self._locks is not None:
            self._locks.ensure_dir()

        try:
            if is_file:
                asset = self._publish_file(request, src)
            else:
                asset = self._publish_dir(request, src)
        except (TransferError, SyncError) as exc:
            raise AssetDeployError(request.source_path, str(exc)) from exc

        self.cache.put(asset)
        log.info("[publish] %s -> %s", request.source_path, asset.url)
        return asset

    def _publish_file(self, request: AssetRequest, src: str) -> PublishedAsset:
        dest_dir = self._dest_dir(src, True, request.hash_by_name)
        file_name = os.path.basename(src)

        if self._is_locked(file_name):
            log.debug("[publish] %s is locked", file_name)
        else:
            t = self._transport
            dst_dir = t.join(self._base_path, dest_dir)
            dst_file = t.join(dst_dir, file_name)
            dst_mtime = t.mtime(dst_file)
            if dst_mtime is None or dst_mtime < os.path.getmtime(src):
                if not t.is_dir(dst_dir):
                    t.makedirs(dst_dir, None if t.is_remote else self._dir_mode)
                t.copy_file(src, dst_dir, file_name)
                if self._file_mode is not None and not t.is_remote:
                    t.chmod(dst_file, self._file_mode)
                log.info("[publish] copied %s -> %s", src, dst_file)
            self._lock(file_name)

        return PublishedAsset(
            request.source_path, dest_dir, self._url(dest_dir, file_name), file_name,
        )

    def _publish_dir(self, request: AssetRequest, src: str) -> PublishedAsset:
        dest_dir = self._dest_dir(src, False, request.hash_by_name)

        if self._is_locked(dest_dir):
            log.debug("[publish] %s is locked", dest_dir)
        else:
            t = self._transport
            dst_dir = t.join(self._base_path, dest_dir)
            if t.supports_links:
                if not t.is_dir(dst_dir):
                    t.link_dir(src, dst_dir)
            elif request.force_copy or not t.is_dir(dst_dir):
                copy_directory(src, dst_dir, self._copy_spec(request.level), t)
            self._lock(dest_dir)

        return PublishedAsset(request.source_path, dest_dir, self._url(dest_dir, None))

    def _copy_spec(self, level: int) -> CopySpec:
        return CopySpec(
            file_types=self._file_types,
            exclude=self._exclude,
            level=level,
            new_dir_mode=self._dir_mode,
            new_file_mode=self._file_mode,
            is_remote=self._transport.is_remote,
            ignore_patterns=self._ignore_patterns,
        )

    # ------------------------------------------------------------------
    def _is_locked(self, key: str) -> bool:
        return self._locks is not None and self._locks.is_locked(key)

    def _lock(self, key: str) -> None:
        if self._locks is None:
            return
        try:
            self._locks.lock(key)
        except LockError as exc:
            log.warning("[lock] %s", exc)
