"""Tests for selection state and strategy toggles."""

from prism.document.models import StrategyAxis
from prism.engine.selection import ActiveStrategies, SelectionState


class TestSelectionState:
    """Tests for SelectionState."""

    def test_starts_empty(self):
        state = SelectionState()
        assert len(state) == 0
        assert state.get(0) is None

    def test_unset_line_uses_default(self, three_line_document):
        choice = three_line_document.choice_for_line(1)
        assert SelectionState().effective_index(choice) == 1

    def test_override(self, three_line_document):
        choice = three_line_document.choice_for_line(1)
        assert SelectionState({1: 2}).effective_index(choice) == 2

    def test_out_of_range_falls_back_to_default(self, three_line_document):
        choice = three_line_document.choice_for_line(1)
        assert SelectionState({1: 3}).effective_index(choice) == 1
        assert SelectionState({1: -1}).effective_index(choice) == 1

    def test_out_of_range_is_kept(self):
        """Clamping happens on read; the stored value is untouched."""
        state = SelectionState()
        state.set(1, 40)
        assert state.get(1) == 40

    def test_effective_alternative(self, three_line_document):
        choice = three_line_document.choice_for_line(0)
        assert SelectionState({0: 1}).effective_alternative(choice).text == "zero-b"

    def test_does_not_mutate_document(self, three_line_document):
        state = SelectionState()
        state.set(1, 0)
        assert three_line_document.choice_for_line(1).selected == 1

    def test_merge_other_wins(self):
        persisted = SelectionState({0: 1, 1: 1})
        shared = SelectionState({1: 2, 2: 0})
        merged = persisted.merge(shared)
        assert merged.to_dict() == {0: 1, 1: 2, 2: 0}
        assert persisted.to_dict() == {0: 1, 1: 1}

    def test_clear_and_remove(self):
        state = SelectionState({0: 1, 1: 1})
        state.remove(0)
        assert not state.has_pick(0)
        state.remove(5)
        state.clear()
        assert len(state) == 0

    def test_from_mapping_string_keys(self):
        state = SelectionState.from_mapping({"0": 2, "3": 1})
        assert state.to_dict() == {0: 2, 3: 1}

    def test_from_mapping_skips_garbage(self):
        state = SelectionState.from_mapping({"x": 1, "1": "2", "2": True, "4": 0})
        assert state.to_dict() == {4: 0}

    def test_equality(self):
        assert SelectionState({0: 1}) == SelectionState({0: 1})
        assert SelectionState({0: 1}) == {0: 1}
        assert SelectionState({0: 1}) != SelectionState({0: 2})

    def test_copy_is_independent(self):
        state = SelectionState({0: 1})
        copy = state.copy()
        copy.set(0, 2)
        assert state.get(0) == 1


class TestActiveStrategies:
    """Tests for ActiveStrategies."""

    def test_none(self):
        assert ActiveStrategies.none().active_axes() == []

    def test_only(self):
        active = ActiveStrategies.only(StrategyAxis.NATURAL)
        assert active.active_axes() == [StrategyAxis.NATURAL]
        assert active.is_active(StrategyAxis.NATURAL)
        assert not active.is_active(StrategyAxis.LITERAL)

    def test_toggle_returns_new_value(self):
        active = ActiveStrategies.none()
        toggled = active.toggle(StrategyAxis.LITERAL)
        assert toggled.literal
        assert not active.literal
        assert not toggled.toggle(StrategyAxis.LITERAL).literal

    def test_from_mapping(self):
        active = ActiveStrategies.from_mapping({"literal": True, "bogus": True})
        assert active.to_dict() == {
            "literal": True,
            "natural": False,
            "foreignizing": False,
        }
