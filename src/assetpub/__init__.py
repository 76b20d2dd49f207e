from .publisher import AssetPublisher, AssetRequest, PublishedAsset, PublishCache, asset_hash, destination_name
from .config import Deployment, PublisherConfig, make_base_url
from .copy import CopySpec, SyncReport, copy_directory
from .lock import LockManager
from .transport import Transport, LocalTransport, LinkTransport, FTPTransport, select_transport, parse_address
from ._exclude import ExcludeFilter, valid_path
from .exceptions import (
    PublishError, AssetNotFoundError, AssetDeployError,
    TransferError, UnsupportedSchemeError, ConnectError, AuthenticationError, UploadError,
    SyncError, LockError, ConfigError,
)

__all__ = [
    "AssetPublisher", "AssetRequest", "PublishedAsset", "PublishCache", "asset_hash", "destination_name",
    "Deployment", "PublisherConfig", "make_base_url",
    "CopySpec", "SyncReport", "copy_directory",
    "LockManager",
    "Transport", "LocalTransport", "LinkTransport", "FTPTransport", "select_transport", "parse_address",
    "ExcludeFilter", "valid_path",
    "PublishError", "AssetNotFoundError", "AssetDeployError",
    "TransferError", "UnsupportedSchemeError", "ConnectError", "AuthenticationError", "UploadError",
    "SyncError", "LockError", "ConfigError",
]
