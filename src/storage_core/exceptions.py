"""Storage Core exceptions."""


class StorageError(Exception):
    """Base exception for storage-core."""

    pass


class ConfigError(StorageError):
    """Configuration error."""

    pass


class InvalidFilenameError(StorageError, ValueError):
    """Filename failed validation."""

    def __init__(self, filename: str | None, reason: str) -> None:
        super().__init__(f"Invalid filename: {filename} because {reason}")
        self.filename = filename
        self.reason = reason


class InvalidPathError(StorageError, ValueError):
    """Path failed validation."""

    def __init__(self, path: str | None, reason: str) -> None:
        super().__init__(f"Invalid path: {path} because {reason}")
        self.path = path
        self.reason = reason


class InvalidContentError(StorageError, ValueError):
    """Content to store is missing or empty."""

    pass


class AlreadyExistsError(StorageError):
    """A file already exists at the target address."""

    def __init__(self, filename: str, path: str) -> None:
        location = path if path else "root path"
        super().__init__(f"File already exists: {filename} in {location}")
        self.filename = filename
        self.path = path


class NotFoundError(StorageError):
    """No file exists at the target address."""

    def __init__(self, filename: str, path: str) -> None:
        location = path if path else "root path"
        super().__init__(f"File not found: {filename} in {location}")
        self.filename = filename
        self.path = path


class StorageIOError(StorageError):
    """Backend failed to read, write or delete."""

    pass
