"""Tracks which mail items already live in a custom thread.

The primary mail list hides these items so a merged email is not shown twice.
The set only grows through add_ids(); removing ids (for example after a
thread is deleted) is done by the caller through replace_ids().
"""

from collections.abc import Callable, Iterable, Iterator
from typing import TypeVar

T = TypeVar("T")


class ThreadAssociationTracker:
    """Set of mail identifiers that belong to any custom thread."""

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: set[str] = set(ids)

    def add_ids(self, ids: Iterable[str]) -> None:
        """Union ``ids`` into the tracked set. Idempotent."""
        self._ids.update(ids)

    def replace_ids(self, ids: Iterable[str]) -> None:
        """Replace the tracked set wholesale."""
        self._ids = set(ids)

    def is_tracked(self, item_id: str) -> bool:
        return item_id in self._ids

    def filter_untracked(self, items: Iterable[T], key: Callable[[T], str]) -> list[T]:
        """Drop items whose identifier (via ``key``) is tracked, keeping order."""
        return [item for item in items if key(item) not in self._ids]

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids
