"""StorageBackend protocol for physical storage providers."""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from storage_core.address import PathAddress
from storage_core.utils.content_type import guess_content_type
from storage_core.utils.paths import join_path


@dataclass(frozen=True)
class StoredInfo:
    """Metadata of a stored file."""

    filename: str
    path: str
    content_type: str
    file_size: int

    @classmethod
    def for_address(
        cls,
        address: PathAddress,
        file_size: int,
        content_type: str | None = None,
    ) -> "StoredInfo":
        """Build info for an address, guessing the content type when not given."""
        return cls(
            filename=address.filename,
            path=address.path,
            content_type=content_type or guess_content_type(address.filename),
            file_size=file_size,
        )

    @property
    def complete_path(self) -> str:
        return join_path(self.path, self.filename)


@dataclass(frozen=True)
class StoredArtifact:
    """A downloaded file: content plus metadata."""

    content: bytes = field(repr=False)
    info: StoredInfo

    @classmethod
    def for_address(
        cls,
        address: PathAddress,
        content: bytes,
        content_type: str | None = None,
    ) -> "StoredArtifact":
        return cls(content=content, info=StoredInfo.for_address(address, len(content), content_type))


@runtime_checkable
class StorageBackend(Protocol):
    """Protocol for storage backends (local disk, object storage, blob tables).

    Backends receive already-validated addresses. The facade checks
    existence before writing, but write() must still refuse to overwrite.
    """

    def write(
        self,
        address: PathAddress,
        content: bytes,
        content_type: str | None = None,
    ) -> None:
        """Store content. Raises AlreadyExistsError if the address is taken."""
        ...

    def read(self, address: PathAddress) -> StoredArtifact | None:
        """Retrieve a file and its metadata. Returns None if not found."""
        ...

    def stat(self, address: PathAddress) -> StoredInfo | None:
        """Get file metadata without content. Returns None if not found."""
        ...

    def exists(self, address: PathAddress) -> bool:
        """Check whether a file exists at the address."""
        ...

    def delete(self, address: PathAddress) -> None:
        """Delete a file. Raises NotFoundError if absent."""
        ...
