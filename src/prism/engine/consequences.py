"""Consequences of changing a line's choice.

Describes what a substitution changes (emphasis gained and lost, ripple
effects declared on other lines) without judging which rendering is
better.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from prism.document.models import Alternative, Choice, Document, SemanticDistance

logger = logging.getLogger(__name__)

IMPACT_LABELS = {
    SemanticDistance.HIGH: "Major shift",
    SemanticDistance.LOW: "Subtle change",
}
DEFAULT_IMPACT_LABEL = "Moderate change"


class RippleDirection(Enum):
    """Whether a dependency strengthens or weakens the affected line."""

    STRENGTHEN = "strengthen"
    WEAKEN = "weaken"


@dataclass(frozen=True)
class EmphasisDiff:
    """Chips gained and lost between two alternatives."""

    gained: tuple[str, ...] = ()
    lost: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.gained and not self.lost

    def to_dict(self) -> dict:
        return {"gained": list(self.gained), "lost": list(self.lost)}


@dataclass(frozen=True)
class RippleEffect:
    """Effect of a choice on another line."""

    source_line: int
    affects_line: int
    direction: RippleDirection
    magnitude: float

    @property
    def message(self) -> str:
        """Tooltip text for the affected line (1-based line numbers)."""
        verb = "weakened" if self.direction is RippleDirection.WEAKEN else "strengthened"
        return f"Parallelism {verb} by line {self.source_line + 1} choice"

    def to_dict(self) -> dict:
        return {
            "source_line": self.source_line,
            "affects_line": self.affects_line,
            "direction": self.direction.value,
            "magnitude": self.magnitude,
            "message": self.message,
        }


@dataclass
class ConsequenceReport:
    """Everything a single pick changes."""

    line: int
    from_index: int
    to_index: int
    diff: EmphasisDiff
    ripples: list[RippleEffect] = field(default_factory=list)
    impact: str = DEFAULT_IMPACT_LABEL
    stakes: str | None = None

    def to_dict(self) -> dict:
        return {
            "line": self.line,
            "from_index": self.from_index,
            "to_index": self.to_index,
            "diff": self.diff.to_dict(),
            "ripples": [r.to_dict() for r in self.ripples],
            "impact": self.impact,
            "stakes": self.stakes,
        }


def _chips_at(choice: Choice, index: int) -> tuple[str, ...]:
    alt = choice.get_alternative(index)
    if alt is None:
        logger.debug(
            f"Index {index} out of range for line {choice.line}; using default"
        )
        alt = choice.default_alternative
    return alt.chips


def diff_emphasis(choice: Choice, from_index: int, to_index: int) -> EmphasisDiff:
    """Chips gained and lost when moving from one alternative to another.

    gained keeps the target's authored chip order, lost keeps the source's.
    """
    before = _chips_at(choice, from_index)
    after = _chips_at(choice, to_index)
    before_set, after_set = set(before), set(after)
    return EmphasisDiff(
        gained=tuple(c for c in after if c not in before_set),
        lost=tuple(c for c in before if c not in after_set),
    )


def propagate(document: Document, from_line: int, to_index: int) -> list[RippleEffect]:
    """Ripple effects of a choice on from_line, in declared order.

    Dependencies are declared per choice, not per alternative, so to_index
    does not change the result.
    """
    choice = document.choice_for_line(from_line)
    if choice is None:
        return []
    return [
        RippleEffect(
            source_line=from_line,
            affects_line=dep.affects_line,
            direction=RippleDirection.WEAKEN if dep.delta < 0 else RippleDirection.STRENGTHEN,
            magnitude=abs(dep.delta),
        )
        for dep in choice.dependencies
    ]


def ripple_targets(
    document: Document, from_line: int, to_index: int
) -> list[RippleEffect]:
    """Ripples whose affected line exists in the target text."""
    effects = []
    for effect in propagate(document, from_line, to_index):
        if 0 <= effect.affects_line < document.line_count:
            effects.append(effect)
        else:
            logger.warning(
                f"Line {from_line} declares a dependency on missing line "
                f"{effect.affects_line}; skipped"
            )
    return effects


def impact_label(alternative: Alternative) -> str:
    """Categorical label for how far an alternative departs from the default."""
    return IMPACT_LABELS.get(alternative.semantic_distance, DEFAULT_IMPACT_LABEL)


def consequences(
    document: Document, choice: Choice, from_index: int, to_index: int
) -> ConsequenceReport:
    """Build the full report for moving a choice from one index to another."""
    target = choice.get_alternative(to_index) or choice.default_alternative
    return ConsequenceReport(
        line=choice.line,
        from_index=from_index,
        to_index=to_index,
        diff=diff_emphasis(choice, from_index, to_index),
        ripples=ripple_targets(document, choice.line, to_index),
        impact=impact_label(target),
        stakes=choice.stakes,
    )
