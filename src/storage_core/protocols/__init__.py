"""Protocol interfaces for pluggable backends."""

from storage_core.protocols.backend import StorageBackend, StoredArtifact, StoredInfo
from storage_core.protocols.purgeable import Purgeable

__all__ = [
    "Purgeable",
    "StorageBackend",
    "StoredArtifact",
    "StoredInfo",
]
