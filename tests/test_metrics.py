"""Tests for axis balance and reader preference."""

import pytest

from prism.document.models import Alternative
from prism.engine.metrics import AxisPair, axis_balance, reader_preference
from prism.engine.selection import SelectionState

from conftest import make_document


class TestAxisBalance:
    """Tests for axis_balance()."""

    def test_defaults(self, three_line_document):
        """Defaults: zero-a, one-b, two-a."""
        balance = axis_balance(three_line_document, SelectionState())
        # literal: (1.0 + 0 + 0.5) / 3, natural: (0 + 0.5 + 0.5) / 3
        assert balance.literal_natural.left == 50
        assert balance.literal_natural.right == 33
        # foreignizing: (0.5 + 0 + 0) / 3, domesticating: (0.5 + 1 + 1) / 3
        assert balance.foreignizing_domesticating.left == 17
        assert balance.foreignizing_domesticating.right == 83
        assert balance.line_count == 3

    def test_follows_selection(self, three_line_document):
        state = SelectionState({0: 1, 1: 0, 2: 1})
        balance = axis_balance(three_line_document, state)
        # literal: (0 + 0.5 + 0) / 3, natural: (1 + 0 + 0) / 3
        assert balance.literal_natural.left == 17
        assert balance.literal_natural.right == 33
        assert balance.foreignizing_domesticating.left == 33
        assert balance.foreignizing_domesticating.right == 67

    def test_out_of_range_pick_uses_default(self, three_line_document):
        assert axis_balance(three_line_document, SelectionState({0: 9})) == axis_balance(
            three_line_document, SelectionState()
        )

    def test_no_choices(self):
        doc = make_document([], surface_count=2)
        balance = axis_balance(doc, SelectionState())
        assert balance.literal_natural.left == 0
        assert balance.literal_natural.right == 0
        assert balance.foreignizing_domesticating.left == 0
        assert balance.foreignizing_domesticating.right == 0
        assert balance.line_count == 0

    def test_undefined_weights(self):
        """No weights anywhere: literal/natural/foreignizing all 0%.

        Domesticating is derived as 1 - foreignizing per line, so it reads
        100% here; the all-zero result applies only when there are no choices
        (see test_no_choices).
        """
        doc = make_document(
            [
                {"line": 0, "alternatives": [{"text": "a"}]},
                {"line": 1, "alternatives": [{"text": "b"}]},
            ]
        )
        balance = axis_balance(doc, SelectionState())
        assert balance.literal_natural.left == 0
        assert balance.literal_natural.right == 0
        assert balance.foreignizing_domesticating.left == 0
        # Domesticating is the 1 - foreignizing proxy
        assert balance.foreignizing_domesticating.right == 100

    def test_format(self):
        assert AxisPair("literal", 62, "natural", 38).format() == "62% ← 38%"

    def test_to_dict(self, scenario_document):
        d = axis_balance(scenario_document, SelectionState()).to_dict()
        assert d["literal_natural"]["literal"] == 90
        assert d["literal_natural"]["natural"] == 10
        assert d["literal_natural"]["display"] == "90% ← 10%"


class TestReaderPreference:
    """Tests for reader_preference()."""

    def test_default_total(self):
        pref = reader_preference(Alternative(text="x", reader_count=250))
        assert pref.ratio == 0.25
        assert pref.percent == 25
        assert pref.label == "25% chose this"

    def test_configurable_total(self):
        pref = reader_preference(Alternative(text="x", reader_count=250), total_readers=500)
        assert pref.percent == 50

    def test_missing_count(self):
        assert reader_preference(Alternative(text="x")) is None

    def test_non_positive_total(self):
        with pytest.raises(ValueError):
            reader_preference(Alternative(text="x", reader_count=1), total_readers=0)
