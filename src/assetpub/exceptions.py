"""Exceptions for assetpub."""

from __future__ import annotations


class PublishError(Exception):
    """Base class for failures surfaced by :meth:`AssetPublisher.publish`.

    Catch :class:`AssetNotFoundError` to handle missing sources and
    :class:`AssetDeployError` to handle sources that exist but could not
    be copied to the destination.
    """


class AssetNotFoundError(PublishError):
    """Raised when the asset to be published does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"The asset {path!r} to be published does not exist")
        self.path = path


class AssetDeployError(PublishError):
    """Raised when an existing asset could not be deployed.

    The underlying :class:`TransferError` or :class:`SyncError` is
    available as ``__cause__``.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot publish {path!r}: {reason}")
        self.path = path


class TransferError(Exception):
    """A single file could not be copied or uploaded."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class UnsupportedSchemeError(TransferError):
    """The destination address uses a scheme with no transport."""


class ConnectError(TransferError):
    """The remote server could not be reached."""


class AuthenticationError(TransferError):
    """The remote server rejected the credentials."""


class UploadError(TransferError):
    """The remote server refused or aborted the upload."""


class SyncError(Exception):
    """A directory synchronization stopped at the first failing entry.

    *path* is the failing entry relative to the synchronized directory.
    Files copied before the failure are left in place.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Sync failed at {path}: {reason}")
        self.path = path


class LockError(Exception):
    """A lock marker could not be created or touched.

    Not fatal: the asset is still published, only the skip optimization
    is lost for the next call.
    """


class ConfigError(ValueError):
    """The publisher configuration is invalid."""
