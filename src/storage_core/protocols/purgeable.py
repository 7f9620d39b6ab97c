"""Purgeable protocol for entities that own stored files."""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable


@runtime_checkable
class Purgeable(Protocol):
    """An entity that can enumerate the complete paths of its stored files."""

    def files_full_paths(self) -> Iterable[str]:
        """Complete paths to remove when the entity is purged."""
        ...
