"""Tests for emphasis diffs, ripple propagation and impact labels."""

import itertools

import pytest

from prism.document.models import Alternative, SemanticDistance
from prism.engine.consequences import (
    EmphasisDiff,
    RippleDirection,
    consequences,
    diff_emphasis,
    impact_label,
    propagate,
    ripple_targets,
)

from conftest import make_document


class TestDiffEmphasis:
    """Tests for diff_emphasis()."""

    def test_scenario_gained_and_lost(self, scenario_document):
        choice = scenario_document.choice_for_line(0)
        diff = diff_emphasis(choice, 0, 1)
        assert list(diff.gained) == ["plain"]
        assert list(diff.lost) == ["formal"]

    def test_shared_chips_are_not_reported(self, three_line_document):
        choice = three_line_document.choice_for_line(0)
        diff = diff_emphasis(choice, 0, 1)
        assert diff.gained == ("lyrical",)
        assert diff.lost == ("concrete",)

    def test_same_index_is_empty(self, three_line_document):
        choice = three_line_document.choice_for_line(0)
        assert diff_emphasis(choice, 1, 1).is_empty

    def test_preserves_authored_order(self):
        doc = make_document(
            [
                {
                    "line": 0,
                    "alternatives": [
                        {"text": "a", "chips": ["x"]},
                        {"text": "b", "chips": ["z", "x", "y", "w"]},
                    ],
                }
            ]
        )
        diff = diff_emphasis(doc.choices[0], 0, 1)
        assert diff.gained == ("z", "y", "w")

    def test_symmetry(self, demo_document):
        """gained(a->b) == lost(b->a) for every pair."""
        for choice in demo_document.choices:
            indices = range(len(choice.alternatives))
            for a, b in itertools.product(indices, indices):
                forward = diff_emphasis(choice, a, b)
                backward = diff_emphasis(choice, b, a)
                assert set(forward.gained) == set(backward.lost)
                assert set(forward.lost) == set(backward.gained)

    def test_out_of_range_index_uses_default(self, scenario_document):
        choice = scenario_document.choice_for_line(0)
        assert diff_emphasis(choice, 7, 1) == diff_emphasis(choice, 0, 1)

    def test_to_dict(self):
        diff = EmphasisDiff(gained=("a",), lost=())
        assert diff.to_dict() == {"gained": ["a"], "lost": []}


class TestPropagate:
    """Tests for propagate()."""

    def test_negative_delta_weakens(self, three_line_document):
        ripples = propagate(three_line_document, 0, 1)
        assert ripples[0].affects_line == 2
        assert ripples[0].direction is RippleDirection.WEAKEN
        assert ripples[0].magnitude == 2

    def test_positive_delta_strengthens(self, three_line_document):
        ripples = propagate(three_line_document, 0, 1)
        assert ripples[1].affects_line == 1
        assert ripples[1].direction is RippleDirection.STRENGTHEN
        assert ripples[1].magnitude == 0.5

    @pytest.mark.parametrize("to_index", [0, 1, 99])
    def test_independent_of_chosen_alternative(self, three_line_document, to_index):
        ripples = propagate(three_line_document, 0, to_index)
        assert [(r.affects_line, r.direction, r.magnitude) for r in ripples] == [
            (2, RippleDirection.WEAKEN, 2),
            (1, RippleDirection.STRENGTHEN, 0.5),
        ]

    def test_zero_delta_strengthens(self):
        doc = make_document(
            [
                {
                    "line": 0,
                    "alternatives": [{"text": "a"}],
                    "dependencies": [{"affectsLine": 1, "delta": 0}],
                },
                {"line": 1, "alternatives": [{"text": "b"}]},
            ]
        )
        assert propagate(doc, 0, 0)[0].direction is RippleDirection.STRENGTHEN

    def test_no_dependencies(self, three_line_document):
        assert propagate(three_line_document, 1, 0) == []

    def test_unknown_line(self, three_line_document):
        assert propagate(three_line_document, 42, 0) == []

    def test_message(self, demo_document):
        ripple = propagate(demo_document, 2, 1)[0]
        assert ripple.message == "Parallelism weakened by line 3 choice"
        assert ripple.to_dict()["direction"] == "weaken"

    def test_ripple_targets_skips_missing_lines(self):
        doc = make_document(
            [
                {
                    "line": 0,
                    "alternatives": [{"text": "a"}],
                    "dependencies": [
                        {"affectsLine": 9, "delta": 1},
                        {"affectsLine": 1, "delta": -1},
                    ],
                },
                {"line": 1, "alternatives": [{"text": "b"}]},
            ]
        )
        assert len(propagate(doc, 0, 0)) == 2
        targets = ripple_targets(doc, 0, 0)
        assert [r.affects_line for r in targets] == [1]


class TestImpactLabel:
    """Tests for impact_label()."""

    @pytest.mark.parametrize(
        "distance,label",
        [
            (SemanticDistance.HIGH, "Major shift"),
            (SemanticDistance.LOW, "Subtle change"),
            (SemanticDistance.MEDIUM, "Moderate change"),
        ],
    )
    def test_labels(self, distance, label):
        assert impact_label(Alternative(text="x", semantic_distance=distance)) == label

    def test_default_distance_is_moderate(self):
        assert impact_label(Alternative(text="x")) == "Moderate change"


class TestConsequenceReport:
    """Tests for the combined report."""

    def test_report_fields(self, three_line_document):
        choice = three_line_document.choice_for_line(0)
        report = consequences(three_line_document, choice, 0, 1)
        assert report.line == 0
        assert report.from_index == 0
        assert report.to_index == 1
        assert report.impact == "Major shift"
        assert report.stakes == "Sets the tone."
        assert len(report.ripples) == 2

    def test_to_dict(self, scenario_document):
        choice = scenario_document.choice_for_line(0)
        d = consequences(scenario_document, choice, 0, 1).to_dict()
        assert d["diff"] == {"gained": ["plain"], "lost": ["formal"]}
        assert d["ripples"] == []
        assert d["impact"] == "Moderate change"
