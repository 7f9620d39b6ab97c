"""Filename and path validation."""

import re
from dataclasses import dataclass

from storage_core.exceptions import InvalidFilenameError, InvalidPathError, StorageError

MAX_FILENAME_LENGTH = 255

INVALID_FILENAME_CHARS_RE = re.compile(r'[\\/:*?"<>|]')
INVALID_PATH_CHARS_RE = re.compile(r'[<>:"|?*\\]')


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a filename or path check."""

    valid: bool
    error: StorageError | None = None

    @property
    def reason(self) -> str | None:
        return getattr(self.error, "reason", None)

    def raise_for_error(self) -> None:
        """Raise the captured error, if any."""
        if self.error is not None:
            raise self.error

    def __bool__(self) -> bool:
        return self.valid


_OK = ValidationResult(valid=True)


def _distinct_matches(value: str, pattern: re.Pattern[str]) -> list[str]:
    """Offending characters in first-seen order, each listed once."""
    found: list[str] = []
    for char in value:
        if pattern.match(char) and char not in found:
            found.append(char)
    return found


def check_filename(filename: str | None) -> ValidationResult:
    """Check a filename without raising.

    Args:
        filename: The filename to check

    Returns:
        A ValidationResult carrying the InvalidFilenameError on failure
    """
    if not filename:
        return ValidationResult(False, InvalidFilenameError(filename, "the filename is required"))

    if len(filename) > MAX_FILENAME_LENGTH:
        return ValidationResult(
            False,
            InvalidFilenameError(
                filename,
                f"the filename is too long, it must be at most {MAX_FILENAME_LENGTH} characters",
            ),
        )

    invalid = _distinct_matches(filename, INVALID_FILENAME_CHARS_RE)
    if invalid:
        return ValidationResult(
            False,
            InvalidFilenameError(
                filename,
                "the filename contains invalid characters: " + " ".join(invalid),
            ),
        )

    return _OK


def _check_segments(path: str) -> ValidationResult:
    trimmed = path[1:] if path.startswith("/") else path
    if trimmed.endswith("/"):
        trimmed = trimmed[:-1]

    for segment in trimmed.split("/"):
        if not segment:
            reason = "the path cannot contain empty segments"
        elif segment.startswith(" "):
            reason = "the path cannot contain segments starting with spaces"
        elif segment.endswith(" "):
            reason = "the path cannot contain segments ending with spaces"
        elif set(segment) == {"."}:
            reason = "the path cannot contain segments with only dots"
        elif segment.endswith("."):
            reason = "the path cannot contain segments ending with a dot"
        else:
            continue
        return ValidationResult(False, InvalidPathError(path, reason))

    return _OK


def check_path(path: str | None) -> ValidationResult:
    """Check a directory path without raising.

    Empty, blank and "/" paths denote the root and are valid.
    """
    if path is None:
        return ValidationResult(False, InvalidPathError(None, "the path is required"))

    if not path.strip() or path == "/":
        return _OK

    invalid = _distinct_matches(path, INVALID_PATH_CHARS_RE)
    if invalid:
        return ValidationResult(
            False,
            InvalidPathError(path, "the path contains invalid characters: " + " ".join(invalid)),
        )

    return _check_segments(path)


def validate_filename(filename: str | None) -> str:
    """Validate a filename.

    Args:
        filename: The filename to validate

    Returns:
        The validated filename

    Raises:
        InvalidFilenameError: If the filename is invalid
    """
    check_filename(filename).raise_for_error()
    return filename  # type: ignore[return-value]


def validate_path(path: str | None) -> str:
    """Validate a directory path.

    Raises:
        InvalidPathError: If the path is invalid
    """
    check_path(path).raise_for_error()
    return path  # type: ignore[return-value]
