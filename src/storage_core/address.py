"""Validated storage addresses."""

from dataclasses import dataclass, field

from storage_core.exceptions import InvalidContentError
from storage_core.utils.paths import join_path, normalize_path, split_full_path
from storage_core.utils.validation import validate_filename, validate_path


@dataclass(frozen=True)
class PathAddress:
    """A normalized (path, filename) pair.

    Build instances with create() or from_full_path(); both validate the
    filename first, then the path, and store the normalized path.
    """

    path: str
    filename: str

    @classmethod
    def create(cls, path: str | None, filename: str | None) -> "PathAddress":
        """Validate and normalize a path and filename.

        Raises:
            InvalidFilenameError: If the filename is invalid
            InvalidPathError: If the path is invalid
        """
        validate_filename(filename)
        validate_path(path)
        return cls(path=normalize_path(path), filename=filename)  # type: ignore[arg-type]

    @classmethod
    def from_full_path(cls, full_path: str) -> "PathAddress":
        """Build an address from a complete path such as "a/b/c.txt"."""
        path, filename = split_full_path(full_path)
        return cls.create(path, filename)

    @property
    def complete_path(self) -> str:
        return join_path(self.path, self.filename)

    def __str__(self) -> str:
        return self.complete_path


@dataclass(frozen=True)
class StoreRequest:
    """Content to store at an address."""

    address: PathAddress
    content: bytes = field(repr=False)
    content_type: str | None = None

    def __post_init__(self) -> None:
        if not self.content:
            raise InvalidContentError("Content is required")

    @classmethod
    def create(
        cls,
        content: bytes,
        filename: str,
        path: str = "",
        content_type: str | None = None,
    ) -> "StoreRequest":
        """Validate the address and content of a file to store."""
        return cls(PathAddress.create(path, filename), content, content_type)

    @property
    def filename(self) -> str:
        return self.address.filename

    @property
    def path(self) -> str:
        return self.address.path

    @property
    def complete_path(self) -> str:
        return self.address.complete_path
