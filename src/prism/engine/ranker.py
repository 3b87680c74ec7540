"""Deterministic strategy ranking for a line's alternatives."""

from __future__ import annotations

from dataclasses import dataclass

from prism.config import Settings
from prism.document.models import Alternative, Choice, Document, StrategyAxis
from prism.engine.selection import ActiveStrategies, SelectionState


@dataclass(frozen=True)
class RankedAlternative:
    """An alternative with its authored index and strategy score."""

    alternative: Alternative
    index: int
    score: float


def score(alternative: Alternative, active: ActiveStrategies) -> float:
    """Sum of the alternative's weights over the active axes."""
    return sum(alternative.weight(axis) for axis in active.active_axes())


def rank(choice: Choice, active: ActiveStrategies) -> list[RankedAlternative]:
    """Order alternatives by score, highest first.

    Ties keep authored order. With no active axis every score is 0 and the
    result is the authored order unchanged.
    """
    ranked = [
        RankedAlternative(alternative=alt, index=i, score=score(alt, active))
        for i, alt in enumerate(choice.alternatives)
    ]
    ranked.sort(key=lambda r: (-r.score, r.index))
    return ranked


def best_index(choice: Choice, active: ActiveStrategies) -> int:
    """Index of the highest-scoring alternative; first max wins."""
    best, best_score = 0, float("-inf")
    for i, alt in enumerate(choice.alternatives):
        s = score(alt, active)
        if s > best_score:
            best, best_score = i, s
    return best


def resolve_all(document: Document, active: ActiveStrategies) -> SelectionState:
    """Best alternative for every choice as a full SelectionState.

    Independent of any prior selection: the result replaces it.
    """
    return SelectionState({c.line: best_index(c, active) for c in document.choices})


class StrategyRanker:
    """
    Ranks a line's alternatives under the active strategy axes.

    Score formula:
        score = sum(weight[axis] for axis in active axes)

    Weights are pre-authored per alternative; nothing is inferred.
    Reported scores are rounded to Settings.score_precision places.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    def rank(self, choice: Choice, active: ActiveStrategies) -> list[dict]:
        """
        Rank a choice and return display-ready dicts, highest first.

        Args:
            choice: The line's candidate set
            active: Strategy toggles

        Returns:
            List of dicts with index, text, score and per-axis breakdown
        """
        results = []
        for r in rank(choice, active):
            results.append(
                {
                    "index": r.index,
                    "text": r.alternative.text,
                    "score": round(r.score, self.settings.score_precision),
                    "score_breakdown": self._breakdown(r.alternative, active),
                }
            )
        return results

    def resolve_all(
        self, document: Document, active: ActiveStrategies
    ) -> SelectionState:
        return resolve_all(document, active)

    def _breakdown(self, alternative: Alternative, active: ActiveStrategies) -> dict:
        return {
            axis.value: round(alternative.weight(axis), self.settings.score_precision)
            for axis in StrategyAxis
            if active.is_active(axis)
        }
