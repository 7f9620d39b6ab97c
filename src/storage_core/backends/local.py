"""Local filesystem-based storage backend."""

import os
from pathlib import Path
from typing import Any

from storage_core.address import PathAddress
from storage_core.exceptions import AlreadyExistsError, NotFoundError, StorageIOError
from storage_core.observability import get_logger
from storage_core.protocols.backend import StoredArtifact, StoredInfo

logger = get_logger(__name__)

USER_DIR_PLACEHOLDER = "{user.dir}"
USER_HOME_PLACEHOLDER = "{user.home}"
DEFAULT_STORAGE_PATH = f"{USER_DIR_PLACEHOLDER}/uploads"


def resolve_storage_path(path: str) -> Path:
    """Expand {user.dir} and {user.home} placeholders in a base directory."""
    path = path.replace(USER_DIR_PLACEHOLDER, os.getcwd())
    path = path.replace(USER_HOME_PLACEHOLDER, str(Path.home()))
    return Path(path)


class LocalFileBackend:
    """Storage backend using the local filesystem.

    Files live at <base_path>/<complete_path>. Content types are not
    persisted: the content_type passed to write() is dropped and the type is
    guessed from the filename on read, so a file transferred in from another
    backend reports the guessed type here.
    Suitable for development and single-server deployments.
    """

    def __init__(self, path: str | Path | None = None, **kwargs: Any) -> None:
        """Initialize local storage backend.

        Args:
            path: Base directory for file storage. Defaults to {user.dir}/uploads
            **kwargs: Ignored (for compatibility with other backends)
        """
        self.base_path = resolve_storage_path(str(path) if path else DEFAULT_STORAGE_PATH)
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.debug("Storage path", context={"base_path": str(self.base_path)})

    def _resolve(self, address: PathAddress) -> Path | None:
        """Filesystem path for an address, None if it escapes the base directory.

        Filenames such as ".." pass validation, so the resolved path is
        checked against the base directory.
        """
        target_path = (self.base_path / address.complete_path).resolve()
        try:
            target_path.relative_to(self.base_path.resolve())
        except ValueError:
            return None
        return target_path

    def _get_path(self, address: PathAddress) -> Path:
        target_path = self._resolve(address)
        if target_path is None:
            raise StorageIOError(f"Path traversal detected: {address.complete_path}")
        return target_path

    def write(
        self,
        address: PathAddress,
        content: bytes,
        content_type: str | None = None,
    ) -> None:
        """Create the file exclusively; an existing file is never overwritten.

        A write that fails after the file was created removes it again.
        """
        path = self._get_path(address)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except FileExistsError:
            raise StorageIOError(
                f"Failed to write {address.complete_path}: a file exists at {address.path}"
            )
        except OSError as e:
            raise StorageIOError(f"Failed to write {address.complete_path}: {e}") from e

        try:
            f = path.open("xb")
        except FileExistsError:
            if path.is_file():
                raise AlreadyExistsError(address.filename, address.path)
            raise StorageIOError(
                f"Failed to write {address.complete_path}: a directory exists at that path"
            )
        except OSError as e:
            raise StorageIOError(f"Failed to write {address.complete_path}: {e}") from e

        try:
            with f:
                f.write(content)
        except OSError as e:
            self._discard(path, address)
            raise StorageIOError(f"Failed to write {address.complete_path}: {e}") from e

    def _discard(self, path: Path, address: PathAddress) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(
                "Failed to remove partially written file",
                context={"complete_path": address.complete_path},
                error=e,
            )

    def read(self, address: PathAddress) -> StoredArtifact | None:
        path = self._resolve(address)
        if path is None or not path.is_file():
            return None
        try:
            content = path.read_bytes()
        except OSError as e:
            raise StorageIOError(f"Failed to read {address.complete_path}: {e}") from e
        return StoredArtifact.for_address(address, content)

    def stat(self, address: PathAddress) -> StoredInfo | None:
        path = self._resolve(address)
        if path is None or not path.is_file():
            return None
        try:
            size = path.stat().st_size
        except OSError as e:
            raise StorageIOError(f"Failed to stat {address.complete_path}: {e}") from e
        return StoredInfo.for_address(address, size)

    def exists(self, address: PathAddress) -> bool:
        path = self._resolve(address)
        return path is not None and path.is_file()

    def delete(self, address: PathAddress) -> None:
        path = self._get_path(address)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFoundError(address.filename, address.path)
        except OSError as e:
            raise StorageIOError(f"Failed to delete {address.complete_path}: {e}") from e
