"""Tests for the Storage facade."""

import logging
from dataclasses import dataclass, field

import pytest

from storage_core.address import StoreRequest
from storage_core.exceptions import (
    AlreadyExistsError,
    InvalidContentError,
    InvalidFilenameError,
    InvalidPathError,
    NotFoundError,
    StorageIOError,
)
from storage_core.observability import register_metric_callback, unregister_metric_callback
from storage_core.storage import StorageBatch
from storage_core.tracking import TrackingContext


@dataclass
class Document:
    """A purgeable entity owning stored files."""

    attachments: list[str] = field(default_factory=list)

    def files_full_paths(self) -> list[str]:
        return self.attachments


@pytest.fixture
def metrics():
    """Collect emitted metrics."""
    received: list[tuple[str, float, dict]] = []

    def callback(name: str, value: float, labels: dict) -> None:
        received.append((name, value, labels))

    register_metric_callback(callback)
    yield received
    unregister_metric_callback(callback)


class TestStore:
    """Tests for single-file store."""

    def test_report_scenario(self, storage):
        """Store, inspect and remove a PDF."""
        content = b"%PDF-1.7 fake"
        assert storage.store(content, "report.pdf", "2024/q1") == "2024/q1/report.pdf"
        assert storage.exists("2024/q1/report.pdf") is True

        info = storage.info("2024/q1/report.pdf")
        assert info is not None
        assert info.filename == "report.pdf"
        assert info.path == "2024/q1"
        assert info.content_type == "application/pdf"
        assert info.file_size == len(content)

        storage.remove("2024/q1/report.pdf")
        assert storage.exists("2024/q1/report.pdf") is False

    def test_store_at_root(self, storage):
        """Default path is the root."""
        assert storage.store(b"x", "a.txt") == "a.txt"
        assert storage.exists("a.txt", "/")

    def test_path_is_normalized(self, storage):
        """Leading and trailing separators do not change the address."""
        assert storage.store(b"x", "a.txt", "/docs/") == "docs/a.txt"
        assert storage.exists("a.txt", "docs")

    def test_duplicate_store_fails_and_keeps_content(self, storage):
        """Second store at the same address raises and writes nothing."""
        storage.store(b"first", "a.txt", "docs")
        with pytest.raises(AlreadyExistsError) as exc_info:
            storage.store(b"second", "a.txt", "/docs/")
        assert exc_info.value.filename == "a.txt"
        assert exc_info.value.path == "docs"
        assert storage.download("docs/a.txt").content == b"first"

    def test_explicit_content_type(self, storage):
        """An explicit content type is kept."""
        storage.store(b"{}", "data.bin", content_type="application/json")
        assert storage.info("data.bin").content_type == "application/json"

    def test_invalid_input_never_reaches_backend(self, storage, backend):
        """Validation errors are raised before any I/O."""
        with pytest.raises(InvalidFilenameError):
            storage.store(b"x", "a/b.txt")
        with pytest.raises(InvalidPathError):
            storage.store(b"x", "a.txt", "../up")
        with pytest.raises(InvalidContentError):
            storage.store(b"", "a.txt")
        assert backend.keys() == []

    def test_store_is_tracked(self, storage):
        """Stores inside an active tracking context are recorded."""
        TrackingContext.begin()
        storage.store(b"x", "a.txt", "docs")
        storage.store(b"y", "b.txt")
        assert TrackingContext.get_tracked() == ["docs/a.txt", "b.txt"]

    def test_store_without_tracking(self, storage):
        """Stores succeed when tracking was never started."""
        assert storage.store(b"x", "a.txt") == "a.txt"
        assert TrackingContext.get_tracked() == []

    def test_emits_metrics(self, storage, metrics):
        """Store emits a counter and a timer labelled with the backend."""
        storage.store(b"x", "a.txt")
        names = [name for name, _, _ in metrics]
        assert "storage.store" in names
        assert "storage.store.duration_ms" in names
        assert all(labels["backend"] == "primary" for _, _, labels in metrics)


class TestStoreBatch:
    """Tests for the multi-file store protocol."""

    def _requests(self):
        return [
            StoreRequest.create(b"A", "a.txt", "batch"),
            StoreRequest.create(b"B", "b.txt", "batch"),
            StoreRequest.create(b"C", "c.txt", "batch"),
        ]

    def test_all_written(self, storage):
        """A successful batch stores every file and returns their paths."""
        paths = storage.store_batch(self._requests())
        assert paths == ["batch/a.txt", "batch/b.txt", "batch/c.txt"]
        assert all(storage.exists(p) for p in paths)

    def test_existing_member_writes_nothing(self, storage, backend):
        """If any address is taken, no file of the batch is written."""
        storage.store(b"old", "b.txt", "batch")
        with pytest.raises(AlreadyExistsError):
            storage.store_batch(self._requests())
        assert backend.keys() == ["batch/b.txt"]
        assert storage.download("batch/b.txt").content == b"old"
        assert not storage.exists("batch/a.txt")

    def test_failed_write_compensates(self, storage, backend, metrics):
        """A mid-batch failure removes what was written and re-raises."""
        backend.fail_write_for.add("c.txt")
        with pytest.raises(StorageIOError, match="disk full"):
            storage.store_batch(self._requests())
        assert backend.deleted == ["batch/a.txt", "batch/b.txt"]
        assert not storage.exists("batch/a.txt")
        assert not storage.exists("batch/b.txt")
        assert ("storage.batch.compensated", 1.0) in [(n, v) for n, v, _ in metrics]

    def test_compensation_errors_are_logged_not_raised(self, storage, backend, caplog):
        """Cleanup failures never replace the original error."""
        backend.fail_write_for.add("c.txt")
        backend.fail_delete_for.add("a.txt")
        with caplog.at_level(logging.WARNING, logger="storage_core"):
            with pytest.raises(StorageIOError, match="disk full"):
                storage.store_batch(self._requests())
        assert storage.exists("batch/a.txt")
        assert not storage.exists("batch/b.txt")
        warnings = [r for r in caplog.records if r.levelname == "WARNING"]
        assert len(warnings) == 1
        assert warnings[0].context["complete_path"] == "batch/a.txt"

    def test_tracked_only_after_success(self, storage, backend):
        """Failed batches track nothing; successful ones track all."""
        TrackingContext.begin()
        backend.fail_write_for.add("b.txt")
        with pytest.raises(StorageIOError):
            storage.store_batch(self._requests())
        assert TrackingContext.get_tracked() == []

        backend.fail_write_for.clear()
        storage.store_batch(self._requests())
        assert TrackingContext.get_tracked() == ["batch/a.txt", "batch/b.txt", "batch/c.txt"]

    def test_empty_batch(self, storage):
        """An empty batch is a no-op."""
        assert storage.store_batch([]) == []


class TestLookups:
    """Tests for download, info and exists."""

    def test_download_both_forms(self, storage):
        """Full path and (filename, path) address the same file."""
        storage.store(b"hello", "a.txt", "x/y")
        by_full = storage.download("x/y/a.txt")
        by_parts = storage.download("a.txt", "x/y")
        assert by_full == by_parts
        assert by_full.content == b"hello"
        assert by_full.info.complete_path == "x/y/a.txt"

    def test_missing_returns_none(self, storage):
        """Absent files are not errors for lookups."""
        assert storage.download("missing.txt") is None
        assert storage.info("missing.txt", "docs") is None
        assert storage.exists("docs/missing.txt") is False

    def test_invalid_lookup_raises(self, storage):
        """Lookups still validate their address."""
        with pytest.raises(InvalidFilenameError):
            storage.download("docs/")


class TestRemove:
    """Tests for remove and purge."""

    def test_remove_missing_raises(self, storage):
        """Removing an absent file raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            storage.remove("a.txt", "/docs/")
        assert exc_info.value.path == "docs"
        assert storage.exists("a.txt", "docs") is False

    def test_remove_by_parts(self, storage):
        """Files can be removed by filename and path."""
        storage.store(b"x", "a.txt", "docs")
        storage.remove("a.txt", "docs")
        assert not storage.exists("docs/a.txt")

    def test_purge_single(self, storage):
        """Purging an entity removes all its files."""
        storage.store(b"1", "one.txt", "doc")
        storage.store(b"2", "two.txt", "doc")
        storage.purge(Document(["doc/one.txt", "doc/two.txt"]))
        assert not storage.exists("doc/one.txt")
        assert not storage.exists("doc/two.txt")

    def test_purge_many_stops_at_first_error(self, storage):
        """Purge is sequential and stops on the first missing file."""
        storage.store(b"1", "one.txt")
        storage.store(b"3", "three.txt")
        docs = [Document(["one.txt"]), Document(["two.txt", "three.txt"])]
        with pytest.raises(NotFoundError):
            storage.purge(docs)
        assert not storage.exists("one.txt")
        assert storage.exists("three.txt")


class TestTransfer:
    """Tests for transfer_to."""

    def test_copies_file(self, storage, target_storage):
        """The target receives the same bytes and the source keeps its file."""
        storage.store(b"payload", "b.txt", "a")
        assert storage.transfer_to(target_storage, "a/b.txt") == "a/b.txt"
        assert target_storage.download("a/b.txt").content == b"payload"
        assert storage.exists("a/b.txt")

    def test_by_parts(self, storage, target_storage):
        """Transfer accepts filename and path."""
        storage.store(b"payload", "b.txt", "a")
        storage.transfer_to(target_storage, "b.txt", "a")
        assert target_storage.exists("b.txt", "a")

    def test_missing_source(self, storage, target_storage):
        """Transferring an absent file raises NotFoundError."""
        with pytest.raises(NotFoundError):
            storage.transfer_to(target_storage, "a/b.txt")

    def test_target_collision_leaves_source(self, storage, target_storage):
        """Target failures propagate and the source is untouched."""
        storage.store(b"new", "b.txt", "a")
        target_storage.store(b"old", "b.txt", "a")
        with pytest.raises(AlreadyExistsError):
            storage.transfer_to(target_storage, "a/b.txt")
        assert storage.download("a/b.txt").content == b"new"
        assert target_storage.download("a/b.txt").content == b"old"

    def test_transfer_tracks_target_store(self, storage, target_storage):
        """The copy counts as a store in the current unit of work."""
        storage.store(b"payload", "b.txt", "a")
        TrackingContext.begin()
        storage.transfer_to(target_storage, "a/b.txt")
        assert TrackingContext.get_tracked() == ["a/b.txt"]


class TestApplyBatch:
    """Tests for StorageBatch and Storage.apply."""

    def test_apply_stores_then_removes(self, storage):
        """Queued stores are written as a batch, then removals run."""
        storage.store(b"old", "old.txt", "docs")
        batch = StorageBatch()
        assert batch.store(b"new", "new.txt", "docs") == "docs/new.txt"
        batch.remove("docs/old.txt")
        assert len(batch) == 2

        assert storage.apply(batch) == ["docs/new.txt"]
        assert storage.exists("docs/new.txt")
        assert not storage.exists("docs/old.txt")

    def test_failed_stores_skip_removals(self, storage, backend):
        """When the batch store fails, queued removals do not run."""
        storage.store(b"old", "old.txt")
        backend.fail_write_for.add("bad.txt")
        batch = StorageBatch()
        batch.store(b"ok", "ok.txt")
        batch.store(b"bad", "bad.txt")
        batch.remove("old.txt")
        with pytest.raises(StorageIOError):
            storage.apply(batch)
        assert storage.exists("old.txt")
        assert not storage.exists("ok.txt")

    def test_queued_requests_are_copies(self):
        """Reading requests does not expose the internal list."""
        batch = StorageBatch()
        batch.store(b"x", "a.txt")
        batch.requests.clear()
        assert len(batch.requests) == 1
