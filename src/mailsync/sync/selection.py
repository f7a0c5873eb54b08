"""Multi-item selection over the caller's visible mail list.

The engine is index based. Every operation receives the list of identifiers
currently on screen, and the anchor is the index last acted on by a single or
toggle selection. The anchor is not rebased when the list changes, so the
caller must re-prime it (single/toggle, or clear) after a reorder.

A range selection with no anchor is a no-op.

Usage:
    from mailsync.sync.selection import SelectionEngine, SelectionMode

    engine = SelectionEngine()
    engine.single(ids, 2)
    engine.select(ids, 5, SelectionMode.RANGE)   # shift-click
    engine.is_selected(ids[3])                   # True
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from mailsync.core.logging import get_logger

logger = get_logger(__name__)


class SelectionMode(Enum):
    """How a click on an item changes the selection."""

    SINGLE = "single"
    TOGGLE = "toggle"
    RANGE = "range"


@dataclass
class SelectionState:
    """Selected identifiers plus the anchor index.

    Attributes:
        selected: Membership set of selected identifiers (unordered)
        anchor: Index last acted on by single/toggle, or None
    """

    selected: set[str] = field(default_factory=set)
    anchor: int | None = None


class SelectionEngine:
    """Single, toggle and range selection over an ordered item list.

    The state object is owned by the caller and may be shared with other
    code that reads it; the engine only mutates it through the operations
    below.

    Attributes:
        state: The selection state this engine operates on
    """

    def __init__(self, state: SelectionState | None = None):
        self.state = state if state is not None else SelectionState()

    @staticmethod
    def _check_index(items: Sequence[str], index: int) -> None:
        if not 0 <= index < len(items):
            raise IndexError(f"Selection index {index} out of range for {len(items)} items")

    def select(self, items: Sequence[str], index: int, mode: SelectionMode) -> None:
        """Apply a selection gesture in the given mode."""
        if mode is SelectionMode.SINGLE:
            self.single(items, index)
        elif mode is SelectionMode.TOGGLE:
            self.toggle(items, index)
        else:
            self.range(items, index)

    def single(self, items: Sequence[str], index: int) -> None:
        """Select only ``items[index]`` and anchor there.

        Raises:
            IndexError: If index is outside the list (state is unchanged)
        """
        self._check_index(items, index)
        self.state.selected = {items[index]}
        self.state.anchor = index

    def toggle(self, items: Sequence[str], index: int) -> None:
        """Flip membership of ``items[index]`` and move the anchor to it.

        Raises:
            IndexError: If index is outside the list (state is unchanged)
        """
        self._check_index(items, index)
        item_id = items[index]
        if item_id in self.state.selected:
            self.state.selected.discard(item_id)
        else:
            self.state.selected.add(item_id)
        self.state.anchor = index

    def range(self, items: Sequence[str], index: int) -> None:
        """Add the inclusive span between the anchor and ``index``.

        Items already selected outside the span stay selected, and the anchor
        does not move. Without an anchor nothing happens. The span is clamped
        to the list, so a stale anchor past the end of a shrunken list only
        selects what still exists.

        Raises:
            IndexError: If an anchor is set and index is outside the list
                (state is unchanged)
        """
        anchor = self.state.anchor
        if anchor is None:
            logger.debug("Range selection ignored, no anchor", index=index)
            return
        if not items:
            return
        self._check_index(items, index)

        start = min(anchor, index)
        end = min(max(anchor, index), len(items) - 1)
        self.state.selected.update(items[start : end + 1])

    def clear(self) -> None:
        """Deselect everything and drop the anchor."""
        self.state.selected = set()
        self.state.anchor = None

    def select_all(self, items: Iterable[str]) -> None:
        """Make the selection exactly ``items``; the anchor is kept."""
        self.state.selected = set(items)

    def is_selected(self, item_id: str) -> bool:
        return item_id in self.state.selected

    def selected_ids(self, items: Sequence[str]) -> list[str]:
        """Selected identifiers in the order they appear in ``items``."""
        return [item_id for item_id in items if item_id in self.state.selected]

    @property
    def count(self) -> int:
        """Number of selected items."""
        return len(self.state.selected)
