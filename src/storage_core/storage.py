"""Storage facade over a pluggable backend.

All addressing goes through PathAddress, so invalid filenames and paths are
rejected before any backend call. Operations that look a file up return None
when it is absent; operations that need it to exist raise NotFoundError.
"""

from collections.abc import Iterable, Sequence

from storage_core.address import PathAddress, StoreRequest
from storage_core.exceptions import AlreadyExistsError, NotFoundError
from storage_core.observability import Timer, emit_counter, emit_timer, get_logger
from storage_core.protocols import Purgeable, StorageBackend, StoredArtifact, StoredInfo
from storage_core.tracking import TrackingContext

logger = get_logger(__name__)


def _address(filename_or_full_path: str, path: str | None) -> PathAddress:
    """Resolve the (full_path) and (filename, path) call forms."""
    if path is None:
        return PathAddress.from_full_path(filename_or_full_path)
    return PathAddress.create(path, filename_or_full_path)


class Storage:
    """Backend-agnostic file storage.

    Example:
        storage = Storage(LocalFileBackend(path="./uploads"))
        full_path = storage.store(b"%PDF-...", "report.pdf", "2024/q1")
        artifact = storage.download(full_path)
    """

    def __init__(self, backend: StorageBackend, name: str | None = None) -> None:
        """Initialize the facade.

        Args:
            backend: Backend performing the physical I/O
            name: Label used in logs and metrics. Defaults to the backend class name
        """
        self.backend = backend
        self.name = name or type(backend).__name__

    def __repr__(self) -> str:
        return f"Storage(name={self.name!r})"

    @property
    def _labels(self) -> dict[str, str]:
        return {"backend": self.name}

    def _ensure_absent(self, address: PathAddress) -> None:
        if self.backend.exists(address):
            raise AlreadyExistsError(address.filename, address.path)

    # Store

    def store(
        self,
        content: bytes,
        filename: str,
        path: str = "",
        content_type: str | None = None,
    ) -> str:
        """Store a single file.

        Args:
            content: File content, must not be empty
            filename: Filename without separators
            path: Directory path, root when empty
            content_type: Explicit content type, guessed by the backend when omitted

        Returns:
            The complete path of the stored file

        Raises:
            InvalidFilenameError, InvalidPathError, InvalidContentError: On bad input
            AlreadyExistsError: If a file already exists at the address
        """
        return self.store_request(StoreRequest.create(content, filename, path, content_type))

    def store_request(self, request: StoreRequest) -> str:
        """Store a prepared request. See store()."""
        address = request.address
        logger.debug(
            "Storing file",
            context={"complete_path": address.complete_path, "backend": self.name},
        )
        self._ensure_absent(address)

        with Timer() as timer:
            self.backend.write(address, request.content, request.content_type)

        complete_path = address.complete_path
        TrackingContext.track(complete_path)
        emit_counter("storage.store", self._labels)
        emit_timer("storage.store.duration_ms", timer.duration_ms, self._labels)
        logger.debug("Stored file", context={"complete_path": complete_path}, duration_ms=timer.duration_ms)
        return complete_path

    def store_batch(self, requests: Sequence[StoreRequest]) -> list[str]:
        """Store several files with best-effort all-or-nothing visibility.

        Every address is checked before anything is written. If a write fails,
        the files already written by this batch are deleted in write order;
        errors during that cleanup are logged and suppressed, and the original
        error is re-raised. Paths are tracked only once the whole batch is
        written.

        Returns:
            Complete paths of the stored files, in request order

        Raises:
            AlreadyExistsError: If any address is already taken (nothing is written)
        """
        requests = list(requests)
        for request in requests:
            self._ensure_absent(request.address)

        written: list[StoreRequest] = []
        try:
            for request in requests:
                self.backend.write(request.address, request.content, request.content_type)
                written.append(request)
                logger.debug("Stored file", context={"complete_path": request.complete_path})
        except Exception:
            self._compensate(written)
            raise

        complete_paths = [request.complete_path for request in written]
        TrackingContext.track_all(complete_paths)
        emit_counter("storage.store_batch", self._labels)
        logger.info(
            "Stored batch",
            context={"count": len(complete_paths), "backend": self.name},
        )
        return complete_paths

    def _compensate(self, written: list[StoreRequest]) -> None:
        if not written:
            return
        emit_counter("storage.batch.compensated", self._labels)
        for request in written:
            try:
                self.backend.delete(request.address)
                logger.debug("Removed partially stored file", context={"complete_path": request.complete_path})
            except Exception as e:
                logger.warning(
                    "Failed to remove partially stored file",
                    context={"complete_path": request.complete_path, "backend": self.name},
                    error=e,
                )

    def apply(self, batch: "StorageBatch") -> list[str]:
        """Store a batch's queued files, then remove its queued paths in order."""
        stored = self.store_batch(batch.requests) if batch.requests else []
        for full_path in batch.removals:
            self.remove(full_path)
        return stored

    # Lookups

    def download(self, filename_or_full_path: str, path: str | None = None) -> StoredArtifact | None:
        """Download a file by full path, or by filename and path.

        Returns:
            The stored artifact, or None if not found
        """
        return self.backend.read(_address(filename_or_full_path, path))

    def info(self, filename_or_full_path: str, path: str | None = None) -> StoredInfo | None:
        """Get file metadata by full path, or by filename and path. None if not found."""
        return self.backend.stat(_address(filename_or_full_path, path))

    def exists(self, filename_or_full_path: str, path: str | None = None) -> bool:
        """Check whether a file exists, by full path or by filename and path."""
        return self.backend.exists(_address(filename_or_full_path, path))

    # Removal

    def remove(self, filename_or_full_path: str, path: str | None = None) -> None:
        """Remove a file by full path, or by filename and path.

        Raises:
            NotFoundError: If no file exists at the address
        """
        address = _address(filename_or_full_path, path)
        if not self.backend.exists(address):
            raise NotFoundError(address.filename, address.path)
        self.backend.delete(address)
        emit_counter("storage.remove", self._labels)
        logger.debug("Removed file", context={"complete_path": address.complete_path})

    def purge(self, refs: Purgeable | Iterable[Purgeable]) -> None:
        """Remove every file referenced by one or more purgeable entities.

        Removal is sequential and stops at the first error; files removed
        before it stay removed.
        """
        purgeables = [refs] if isinstance(refs, Purgeable) else list(refs)
        for purgeable in purgeables:
            for full_path in purgeable.files_full_paths():
                self.remove(full_path)

    # Transfer

    def transfer_to(self, target: "Storage", filename_or_full_path: str, path: str | None = None) -> str:
        """Copy a file into another storage at the same address.

        The source file is left in place.

        Returns:
            The complete path in the target storage

        Raises:
            NotFoundError: If the source file does not exist
            AlreadyExistsError: If the target already holds the address
        """
        address = _address(filename_or_full_path, path)
        artifact = self.backend.read(address)
        if artifact is None:
            raise NotFoundError(address.filename, address.path)

        logger.debug(
            "Transferring file",
            context={"complete_path": address.complete_path, "source": self.name, "target": target.name},
        )
        return target.store_request(
            StoreRequest(address, artifact.content, artifact.info.content_type)
        )


class StorageBatch:
    """Collects stores and removals to apply together with Storage.apply().

    Store requests are validated when queued.
    """

    def __init__(self) -> None:
        self._requests: list[StoreRequest] = []
        self._removals: list[str] = []

    def store(
        self,
        content: bytes,
        filename: str,
        path: str = "",
        content_type: str | None = None,
    ) -> str:
        """Queue a file and return the complete path it will be stored at."""
        request = StoreRequest.create(content, filename, path, content_type)
        self._requests.append(request)
        return request.complete_path

    def add(self, request: StoreRequest) -> str:
        self._requests.append(request)
        return request.complete_path

    def remove(self, full_path: str) -> None:
        self._removals.append(full_path)

    @property
    def requests(self) -> list[StoreRequest]:
        return list(self._requests)

    @property
    def removals(self) -> list[str]:
        return list(self._removals)

    def __len__(self) -> int:
        return len(self._requests) + len(self._removals)
