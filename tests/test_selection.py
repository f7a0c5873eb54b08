"""Tests for sync/selection.py."""

import pytest

from mailsync.sync.selection import SelectionEngine, SelectionMode, SelectionState

ITEMS = ["a", "b", "c", "d", "e", "f"]


@pytest.fixture
def engine() -> SelectionEngine:
    """Return an engine with empty state."""
    return SelectionEngine()


class TestSingle:
    """Tests for single()."""

    def test_selects_only_target(self, engine: SelectionEngine) -> None:
        """single should replace the selection and anchor at the index."""
        engine.toggle(ITEMS, 0)
        engine.toggle(ITEMS, 4)

        engine.single(ITEMS, 2)

        assert engine.state.selected == {"c"}
        assert engine.state.anchor == 2

    def test_out_of_range_raises_and_keeps_state(self, engine: SelectionEngine) -> None:
        """A bad index should raise IndexError without touching the state."""
        engine.single(ITEMS, 1)

        with pytest.raises(IndexError):
            engine.single(ITEMS, len(ITEMS))
        with pytest.raises(IndexError):
            engine.single(ITEMS, -1)

        assert engine.state.selected == {"b"}
        assert engine.state.anchor == 1


class TestToggle:
    """Tests for toggle()."""

    def test_flips_membership(self, engine: SelectionEngine) -> None:
        """toggle twice on the same index should add then remove."""
        engine.toggle(ITEMS, 3)
        assert engine.is_selected("d")

        engine.toggle(ITEMS, 3)
        assert not engine.is_selected("d")
        assert engine.state.anchor == 3

    def test_keeps_other_selections(self, engine: SelectionEngine) -> None:
        """toggle should not clear other selected items."""
        engine.single(ITEMS, 0)
        engine.toggle(ITEMS, 2)

        assert engine.state.selected == {"a", "c"}

    def test_anchor_moves_to_latest_toggle(self, engine: SelectionEngine) -> None:
        """The anchor should follow the most recent toggle, not the first."""
        engine.toggle(ITEMS, 0)
        engine.toggle(ITEMS, 4)

        assert engine.state.anchor == 4


class TestRange:
    """Tests for range()."""

    def test_toggle_then_range_selects_closed_interval(self, engine: SelectionEngine) -> None:
        """toggle(i) then range(j) should select exactly [min, max] plus priors."""
        engine.toggle(ITEMS, 1)
        engine.range(ITEMS, 4)

        assert engine.state.selected == {"b", "c", "d", "e"}

    def test_range_backwards(self, engine: SelectionEngine) -> None:
        """A range towards a lower index should use the same interval."""
        engine.single(ITEMS, 4)
        engine.range(ITEMS, 1)

        assert engine.state.selected == {"b", "c", "d", "e"}

    def test_prior_selection_outside_interval_is_kept(self, engine: SelectionEngine) -> None:
        """Items selected outside the interval stay selected."""
        engine.toggle(ITEMS, 5)
        engine.toggle(ITEMS, 1)
        engine.range(ITEMS, 2)

        assert engine.state.selected == {"b", "c", "f"}

    def test_anchor_unchanged_after_range(self, engine: SelectionEngine) -> None:
        """range should leave the anchor where it was."""
        engine.single(ITEMS, 2)
        engine.range(ITEMS, 5)
        engine.range(ITEMS, 0)

        assert engine.state.anchor == 2
        assert engine.state.selected == set(ITEMS)

    def test_range_on_anchor_selects_single_item(self, engine: SelectionEngine) -> None:
        """range to the anchor itself should select just that item."""
        engine.toggle(ITEMS, 3)
        engine.toggle(ITEMS, 3)
        engine.range(ITEMS, 3)

        assert engine.state.selected == {"d"}

    def test_range_without_anchor_is_noop(self, engine: SelectionEngine) -> None:
        """With no anchor, range should change nothing."""
        engine.range(ITEMS, 3)

        assert engine.state.selected == set()
        assert engine.state.anchor is None

    def test_clear_then_range_is_noop(self, engine: SelectionEngine) -> None:
        """clear() removes the anchor, so a following range does nothing."""
        engine.single(ITEMS, 1)
        engine.clear()

        engine.range(ITEMS, 4)

        assert engine.state.selected == set()

    def test_range_uses_list_passed_to_the_call(self, engine: SelectionEngine) -> None:
        """The interval is taken from the list given to range(), not an older one."""
        engine.toggle(ITEMS, 1)
        reordered = ["f", "e", "d", "c", "b", "a"]

        engine.range(reordered, 3)

        assert engine.state.selected == {"b", "e", "d", "c"}

    def test_stale_anchor_is_clamped_to_shorter_list(self, engine: SelectionEngine) -> None:
        """An anchor beyond a shrunken list only selects existing items."""
        engine.single(ITEMS, 5)
        shorter = ["a", "b", "c"]

        engine.range(shorter, 1)

        assert engine.state.selected == {"f", "b", "c"}

    @pytest.mark.parametrize("index", [-1, len(ITEMS)])
    def test_out_of_range_index_raises_and_keeps_state(
        self, engine: SelectionEngine, index: int
    ) -> None:
        """A bad target index is rejected like single/toggle, not clamped."""
        engine.single(ITEMS, 3)

        with pytest.raises(IndexError):
            engine.range(ITEMS, index)

        assert engine.state.selected == {"d"}
        assert engine.state.anchor == 3

    def test_range_on_empty_list_is_noop(self, engine: SelectionEngine) -> None:
        """An empty list leaves the selection alone."""
        engine.single(ITEMS, 0)
        engine.range([], 3)

        assert engine.state.selected == {"a"}


class TestSelectAllAndClear:
    """Tests for select_all(), clear() and read helpers."""

    def test_select_all_sets_exact_membership(self, engine: SelectionEngine) -> None:
        """select_all should replace membership and keep the anchor."""
        engine.single(ITEMS, 2)
        engine.select_all(["x", "y"])

        assert engine.state.selected == {"x", "y"}
        assert engine.state.anchor == 2

    def test_clear_resets_everything(self, engine: SelectionEngine) -> None:
        """clear should empty the set and drop the anchor."""
        engine.select_all(ITEMS)
        engine.clear()

        assert engine.count == 0
        assert engine.state.anchor is None

    def test_selected_ids_follow_list_order(self, engine: SelectionEngine) -> None:
        """selected_ids should return ids in the order of the given list."""
        engine.toggle(ITEMS, 4)
        engine.toggle(ITEMS, 0)
        engine.toggle(ITEMS, 2)

        assert engine.selected_ids(ITEMS) == ["a", "c", "e"]


class TestSelectDispatch:
    """Tests for select() with a SelectionMode."""

    def test_click_shift_click_ctrl_click(self, engine: SelectionEngine) -> None:
        """A typical gesture sequence should compose as expected."""
        engine.select(ITEMS, 1, SelectionMode.SINGLE)
        engine.select(ITEMS, 3, SelectionMode.RANGE)
        engine.select(ITEMS, 2, SelectionMode.TOGGLE)

        assert engine.state.selected == {"b", "d"}
        assert engine.state.anchor == 2

    def test_shared_state_object(self) -> None:
        """An injected state object is the one mutated."""
        state = SelectionState()
        engine = SelectionEngine(state)

        engine.single(ITEMS, 0)

        assert state.selected == {"a"}


class TestNoDanglingIds:
    """The selection only ever holds ids from some passed item list."""

    def test_sequence_of_gestures(self, engine: SelectionEngine) -> None:
        """Mixed gestures over two lists never introduce foreign ids."""
        first = ["a", "b", "c", "d"]
        second = ["c", "d", "e"]
        seen = set(first) | set(second)

        engine.single(first, 0)
        engine.range(second, 2)
        engine.toggle(second, 1)
        engine.range(first, 3)
        engine.toggle(first, 2)

        assert engine.state.selected <= seen
