"""Shared fixtures for Prism tests."""

import json

import pytest

from prism.config import DEMO_DOCUMENT
from prism.document.loader import load_document, parse_document


def make_document(choices, surface_count=None, doc_id="test"):
    """Build a Document from raw choice dicts."""
    if surface_count is None:
        surface_count = max((c["line"] for c in choices), default=-1) + 1
    data = {
        "id": doc_id,
        "source": {"lines": [{"text": f"src {i}"} for i in range(surface_count)]},
        "target": {
            "surfaceLines": [f"surface {i}" for i in range(surface_count)],
            "choices": choices,
        },
    }
    document, _ = parse_document(data)
    return document


@pytest.fixture
def scenario_document():
    """One choice at line 0: formal/literal A versus plain/natural B."""
    return make_document(
        [
            {
                "line": 0,
                "selected": 0,
                "alternatives": [
                    {
                        "text": "A",
                        "weights": {"literal": 0.9, "natural": 0.1},
                        "chips": ["formal"],
                    },
                    {
                        "text": "B",
                        "weights": {"literal": 0.1, "natural": 0.9},
                        "chips": ["plain"],
                    },
                ],
            }
        ]
    )


@pytest.fixture
def three_line_document():
    """Three choices with exact binary weights and a ripple from line 0."""
    return make_document(
        [
            {
                "line": 0,
                "selected": 0,
                "alternatives": [
                    {
                        "text": "zero-a",
                        "weights": {"literal": 1.0, "foreignizing": 0.5},
                        "chips": ["concrete", "spatial"],
                        "semanticDistance": "low",
                    },
                    {
                        "text": "zero-b",
                        "weights": {"natural": 1.0},
                        "chips": ["lyrical", "spatial"],
                        "semanticDistance": "high",
                        "bucket": "Poetic",
                        "readerCount": 250,
                    },
                ],
                "dependencies": [
                    {"affectsLine": 2, "delta": -2},
                    {"affectsLine": 1, "delta": 0.5},
                ],
                "stakes": "Sets the tone.",
            },
            {
                "line": 1,
                "selected": 1,
                "alternatives": [
                    {"text": "one-a", "weights": {"literal": 0.5}},
                    {"text": "one-b", "weights": {"natural": 0.5}},
                    {"text": "one-c", "weights": {"natural": 0.5, "literal": 0.25}},
                ],
            },
            {
                "line": 2,
                "selected": 0,
                "alternatives": [
                    {"text": "two-a", "weights": {"literal": 0.5, "natural": 0.5}},
                    {"text": "two-b", "weights": {"foreignizing": 1.0}},
                ],
            },
        ]
    )


@pytest.fixture
def demo_document():
    document, _ = load_document(DEMO_DOCUMENT)
    return document


@pytest.fixture
def document_file(tmp_path):
    """Write a document dict to a JSON file and return its path."""

    def _write(data, name="doc.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        return path

    return _write
