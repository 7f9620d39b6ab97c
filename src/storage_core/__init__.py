"""Storage Core - backend-agnostic file storage."""

from storage_core.address import PathAddress, StoreRequest
from storage_core.config import Config
from storage_core.exceptions import (
    AlreadyExistsError,
    ConfigError,
    InvalidContentError,
    InvalidFilenameError,
    InvalidPathError,
    NotFoundError,
    StorageError,
    StorageIOError,
)
from storage_core.observability import (
    LogLevel,
    configure_logging,
    get_logger,
    register_metric_callback,
)
from storage_core.plugins import create_backend, create_storage
from storage_core.protocols import Purgeable, StorageBackend, StoredArtifact, StoredInfo
from storage_core.storage import Storage, StorageBatch
from storage_core.tracking import TrackingContext, tracking_scope

__version__ = "0.1.0"
__all__ = [
    # Core
    "Config",
    "PathAddress",
    "Storage",
    "StorageBatch",
    "StoreRequest",
    # Protocols
    "Purgeable",
    "StorageBackend",
    "StoredArtifact",
    "StoredInfo",
    # Tracking
    "TrackingContext",
    "tracking_scope",
    # Backends
    "create_backend",
    "create_storage",
    # Errors
    "AlreadyExistsError",
    "ConfigError",
    "InvalidContentError",
    "InvalidFilenameError",
    "InvalidPathError",
    "NotFoundError",
    "StorageError",
    "StorageIOError",
    # Observability
    "LogLevel",
    "configure_logging",
    "get_logger",
    "register_metric_callback",
]
