"""Complete path helpers."""

from storage_core.observability import get_logger

logger = get_logger(__name__)

ROOT = ""
SEPARATOR = "/"


def normalize_path(path: str | None) -> str:
    """Normalize a directory path for storage.

    None, blank and "/" map to the root (""). Otherwise a single leading and
    a single trailing separator are stripped.
    """
    if path is None or not path.strip() or path == SEPARATOR:
        return ROOT
    if path.startswith(SEPARATOR):
        path = path[1:]
    if path.endswith(SEPARATOR):
        path = path[:-1]
    return path


def join_path(path: str, filename: str) -> str:
    """Join a normalized path and a filename into a complete path."""
    return filename if not path else f"{path}{SEPARATOR}{filename}"


def split_full_path(full_path: str) -> tuple[str, str]:
    """Split a complete path into (path, filename).

    The path keeps its trailing separator, and is "/" when the full path has
    no directory part. Both forms normalize back to the original address.
    """
    index = full_path.rfind(SEPARATOR)
    if index == -1:
        path, filename = SEPARATOR, full_path
    else:
        path, filename = full_path[: index + 1], full_path[index + 1 :]
    logger.debug("Split path", context={"path": path, "filename": filename})
    return path, filename
