"""Per unit-of-work tracking of stored complete paths.

Each execution context (thread or asyncio task) sees its own tracked list,
held in a ContextVar. Tracking must be started explicitly with begin() and
cleared with end(); while it is not started, track() is a no-op.

Example:
    with tracking_scope() as scope:
        storage.store(b"...", "a.txt", "docs")
        try:
            handle_request()
        except Exception:
            for full_path in scope.tracked:
                storage.remove(full_path)
            raise
"""

import uuid
from collections.abc import Iterable
from contextvars import ContextVar, Token
from typing import Any

from storage_core.observability import get_logger, request_id_var, unit_of_work_var

logger = get_logger(__name__)

_tracked_var: ContextVar[list[str] | None] = ContextVar("storage_tracked", default=None)


class TrackingContext:
    """Accessors for the tracking state of the current execution context."""

    @staticmethod
    def begin() -> None:
        """Start tracking for the current context, discarding prior state."""
        _tracked_var.set([])
        logger.debug("Started store tracking")

    @staticmethod
    def track(complete_path: str) -> None:
        """Record one stored complete path."""
        tracked = _tracked_var.get()
        if tracked is None:
            logger.debug("Tracking not started, skipping path", context={"path": complete_path})
            return
        tracked.append(complete_path)
        logger.debug("Tracked stored path", context={"path": complete_path})

    @staticmethod
    def track_all(complete_paths: Iterable[str]) -> None:
        """Record a batch of stored complete paths in order."""
        paths = list(complete_paths)
        tracked = _tracked_var.get()
        if tracked is None:
            logger.debug("Tracking not started, skipping paths", context={"paths": paths})
            return
        tracked.extend(paths)
        logger.debug("Tracked stored paths", context={"paths": paths})

    @staticmethod
    def get_tracked() -> list[str]:
        """Paths tracked so far in this context (a copy; empty if not started)."""
        tracked = _tracked_var.get()
        return list(tracked) if tracked is not None else []

    @staticmethod
    def is_tracking() -> bool:
        return _tracked_var.get() is not None

    @staticmethod
    def end() -> None:
        """Stop tracking and drop the accumulated paths."""
        _tracked_var.set(None)
        logger.debug("Cleared store tracking")


class tracking_scope:
    """Context manager bracketing a unit of work with begin/end.

    Also binds request_id and a unit-of-work id into the logging context.
    State set on entry is restored on exit, so scopes nest.
    """

    def __init__(self, request_id: str | None = None) -> None:
        self.request_id = request_id
        self.unit_of_work = str(uuid.uuid4())
        self._tokens: list[tuple[ContextVar[Any], Token[Any]]] = []
        self._final: list[str] = []

    @property
    def tracked(self) -> list[str]:
        """Paths tracked in this scope; still readable after exit."""
        if self._tokens:
            return TrackingContext.get_tracked()
        return list(self._final)

    def __enter__(self) -> "tracking_scope":
        self._tokens.append((_tracked_var, _tracked_var.set([])))
        self._tokens.append((unit_of_work_var, unit_of_work_var.set(self.unit_of_work)))
        if self.request_id:
            self._tokens.append((request_id_var, request_id_var.set(self.request_id)))
        logger.debug("Started store tracking")
        return self

    def __exit__(self, *args: Any) -> None:
        self._final = TrackingContext.get_tracked()
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()
        logger.debug("Cleared store tracking", context={"tracked": len(self._final)})

    async def __aenter__(self) -> "tracking_scope":
        return self.__enter__()

    async def __aexit__(self, *args: Any) -> None:
        self.__exit__(*args)
