"""Pytest configuration and fixtures."""

import pytest

from storage_core.address import PathAddress
from storage_core.backends.memory import MemoryBackend
from storage_core.exceptions import StorageIOError
from storage_core.storage import Storage
from storage_core.tracking import TrackingContext


class FlakyBackend(MemoryBackend):
    """Memory backend that fails writes or deletes for chosen filenames."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_write_for: set[str] = set()
        self.fail_delete_for: set[str] = set()
        self.deleted: list[str] = []

    def write(self, address: PathAddress, content: bytes, content_type: str | None = None) -> None:
        if address.filename in self.fail_write_for:
            raise StorageIOError(f"disk full while writing {address.complete_path}")
        super().write(address, content, content_type)

    def delete(self, address: PathAddress) -> None:
        if address.filename in self.fail_delete_for:
            raise StorageIOError(f"cannot delete {address.complete_path}")
        super().delete(address)
        self.deleted.append(address.complete_path)


@pytest.fixture
def backend() -> FlakyBackend:
    """Memory backend with injectable failures."""
    return FlakyBackend()


@pytest.fixture
def storage(backend) -> Storage:
    """Storage facade over the flaky memory backend."""
    return Storage(backend, name="primary")


@pytest.fixture
def target_storage() -> Storage:
    """Second storage used as a transfer target."""
    return Storage(MemoryBackend(), name="secondary")


@pytest.fixture(autouse=True)
def reset_tracking():
    """Leave no tracking state behind between tests."""
    yield
    TrackingContext.end()


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary for testing."""
    return {
        "name": "uploads",
        "backend": {"backend": "sqlite", "path": ":memory:", "table": "files"},
        "logging": {"level": "DEBUG", "format": "text"},
    }
