"""Built-in storage backends."""

from storage_core.backends.local import LocalFileBackend
from storage_core.backends.memory import MemoryBackend
from storage_core.backends.sqlite import SQLiteBackend

__all__ = ["LocalFileBackend", "MemoryBackend", "SQLiteBackend"]
