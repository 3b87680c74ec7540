"""Document data models.

A document is a source text plus, per target line, a fixed surface
rendering and a finite set of pre-authored alternatives. Documents are
immutable once loaded; reader choices live in SelectionState.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class StrategyAxis(Enum):
    """Translation strategy axes with per-alternative weights."""

    LITERAL = "literal"
    """Close to source form and word order."""

    NATURAL = "natural"
    """Idiomatic in the target language."""

    FOREIGNIZING = "foreignizing"
    """Keeps source-culture strangeness visible."""


class Philosophy(Enum):
    """Display-only classification, independent of the numeric weights."""

    FOREIGNIZING = "foreignizing"
    DOMESTICATING = "domesticating"

    @property
    def badge(self) -> str:
        """Short direction badge shown next to an alternative."""
        return "→ CN" if self is Philosophy.FOREIGNIZING else "EN ←"


class SemanticDistance(Enum):
    """How far an alternative departs from the default rendering."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class SourceLine:
    """A single line of the source text."""

    text: str
    transliteration: str = ""

    def to_dict(self) -> dict:
        return {"text": self.text, "transliteration": self.transliteration}


@dataclass(frozen=True)
class Alternative:
    """One candidate rendering for a target line."""

    text: str
    """Rendered text (non-empty)."""

    weights: Mapping[StrategyAxis, float] = field(default_factory=dict)
    """Strategy weights in [0, 1]; a missing axis counts as 0."""

    chips: tuple[str, ...] = ()
    """Emphasis tags in authored order."""

    note: str | None = None
    bucket: str | None = None
    philosophy: Philosophy | None = None
    semantic_distance: SemanticDistance = SemanticDistance.MEDIUM
    reader_count: int | None = None

    def weight(self, axis: StrategyAxis) -> float:
        """Weight for an axis, 0.0 when not authored."""
        return self.weights.get(axis, 0.0)

    def visible_bucket(self, has_picked: bool) -> str | None:
        """Bucket label, revealed only after the reader picked on this line."""
        return self.bucket if has_picked else None

    def to_dict(self) -> dict:
        """Serialize using the document file's key names."""
        result: dict = {
            "text": self.text,
            "weights": {axis.value: w for axis, w in self.weights.items()},
            "chips": list(self.chips),
            "semanticDistance": self.semantic_distance.value,
        }
        if self.note is not None:
            result["note"] = self.note
        if self.bucket is not None:
            result["bucket"] = self.bucket
        if self.philosophy is not None:
            result["philosophy"] = self.philosophy.value
        if self.reader_count is not None:
            result["readerCount"] = self.reader_count
        return result


@dataclass(frozen=True)
class Dependency:
    """Declared effect of this line's choice on another line.

    The sign of delta says whether the effect strengthens (>= 0) or
    weakens (< 0) the affected line.
    """

    affects_line: int
    delta: float

    def to_dict(self) -> dict:
        return {"affectsLine": self.affects_line, "delta": self.delta}


@dataclass(frozen=True)
class Choice:
    """The candidate set for one target line."""

    line: int
    """Index into the target surface lines (unique per document)."""

    alternatives: tuple[Alternative, ...]
    """At least one; authored order is the ranking tie-break order."""

    selected: int = 0
    """Document-default alternative index."""

    dependencies: tuple[Dependency, ...] = ()
    stakes: str | None = None

    @property
    def default_alternative(self) -> Alternative:
        return self.alternatives[self.selected]

    def in_range(self, index: int) -> bool:
        return 0 <= index < len(self.alternatives)

    def get_alternative(self, index: int) -> Alternative | None:
        """Get alternative by index, None when out of range."""
        if self.in_range(index):
            return self.alternatives[index]
        return None

    def to_dict(self) -> dict:
        result: dict = {
            "line": self.line,
            "alternatives": [a.to_dict() for a in self.alternatives],
            "selected": self.selected,
            "dependencies": [d.to_dict() for d in self.dependencies],
        }
        if self.stakes is not None:
            result["stakes"] = self.stakes
        return result


@dataclass(frozen=True)
class Document:
    """Source text, default target rendering and per-line choices."""

    doc_id: str
    source_lines: tuple[SourceLine, ...]
    surface_lines: tuple[str, ...]
    choices: tuple[Choice, ...]
    title: str | None = None

    def choice_for_line(self, line: int) -> Choice | None:
        """Find the choice for a target line."""
        for choice in self.choices:
            if choice.line == line:
                return choice
        return None

    @property
    def line_count(self) -> int:
        return len(self.surface_lines)

    def to_dict(self) -> dict:
        """Serialize back to the document file layout."""
        return {
            "id": self.doc_id,
            "title": self.title,
            "source": {"lines": [s.to_dict() for s in self.source_lines]},
            "target": {
                "surfaceLines": list(self.surface_lines),
                "choices": [c.to_dict() for c in self.choices],
            },
        }
