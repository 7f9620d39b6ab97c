"""In-memory storage backend."""

import threading
from dataclasses import dataclass
from typing import Any

from storage_core.address import PathAddress
from storage_core.exceptions import AlreadyExistsError, NotFoundError
from storage_core.protocols.backend import StoredArtifact, StoredInfo


@dataclass
class MemoryEntry:
    """Stored content with its content type."""

    content: bytes
    content_type: str | None = None


class MemoryBackend:
    """In-memory storage backend.

    Suitable for development and testing. Data is lost on restart.
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize memory backend.

        Args:
            **kwargs: Ignored (for compatibility with other backends)
        """
        self._data: dict[str, MemoryEntry] = {}
        self._lock = threading.Lock()

    def write(
        self,
        address: PathAddress,
        content: bytes,
        content_type: str | None = None,
    ) -> None:
        key = address.complete_path
        with self._lock:
            if key in self._data:
                raise AlreadyExistsError(address.filename, address.path)
            self._data[key] = MemoryEntry(content=bytes(content), content_type=content_type)

    def read(self, address: PathAddress) -> StoredArtifact | None:
        with self._lock:
            entry = self._data.get(address.complete_path)
        if entry is None:
            return None
        return StoredArtifact.for_address(address, entry.content, entry.content_type)

    def stat(self, address: PathAddress) -> StoredInfo | None:
        with self._lock:
            entry = self._data.get(address.complete_path)
        if entry is None:
            return None
        return StoredInfo.for_address(address, len(entry.content), entry.content_type)

    def exists(self, address: PathAddress) -> bool:
        with self._lock:
            return address.complete_path in self._data

    def delete(self, address: PathAddress) -> None:
        with self._lock:
            if self._data.pop(address.complete_path, None) is None:
                raise NotFoundError(address.filename, address.path)

    def keys(self) -> list[str]:
        """Complete paths currently stored, sorted."""
        with self._lock:
            return sorted(self._data)

    def clear(self) -> None:
        """Clear all data. Useful for testing."""
        with self._lock:
            self._data.clear()
