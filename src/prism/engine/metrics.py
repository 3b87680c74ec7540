"""Document-wide strategy balance and popularity metrics."""

from __future__ import annotations

from dataclasses import dataclass

from prism.document.models import Alternative, Document, StrategyAxis
from prism.engine.selection import SelectionState

DEFAULT_TOTAL_READERS = 1000


@dataclass(frozen=True)
class AxisPair:
    """Two opposing axis percentages (0-100, rounded)."""

    left_name: str
    left: int
    right_name: str
    right: int

    def format(self) -> str:
        return f"{self.left}% ← {self.right}%"

    def to_dict(self) -> dict:
        return {
            self.left_name: self.left,
            self.right_name: self.right,
            "display": self.format(),
        }


@dataclass(frozen=True)
class AxisBalance:
    """Balances for the literal/natural and foreignizing/domesticating pairs."""

    literal_natural: AxisPair
    foreignizing_domesticating: AxisPair
    line_count: int

    def to_dict(self) -> dict:
        return {
            "literal_natural": self.literal_natural.to_dict(),
            "foreignizing_domesticating": self.foreignizing_domesticating.to_dict(),
            "line_count": self.line_count,
        }


def _percent(total: float, count: int) -> int:
    if count == 0:
        return 0
    return round(total / count * 100)


def axis_balance(document: Document, selection: SelectionState) -> AxisBalance:
    """Average strategy weights over every line's effective alternative.

    Domesticating is approximated as 1 - foreignizing. A document without
    choices yields 0% on every side.
    """
    literal = natural = foreignizing = domesticating = 0.0
    count = 0
    for choice in document.choices:
        alt = selection.effective_alternative(choice)
        literal += alt.weight(StrategyAxis.LITERAL)
        natural += alt.weight(StrategyAxis.NATURAL)
        f = alt.weight(StrategyAxis.FOREIGNIZING)
        foreignizing += f
        domesticating += 1 - f
        count += 1

    return AxisBalance(
        literal_natural=AxisPair(
            "literal", _percent(literal, count), "natural", _percent(natural, count)
        ),
        foreignizing_domesticating=AxisPair(
            "foreignizing",
            _percent(foreignizing, count),
            "domesticating",
            _percent(domesticating, count),
        ),
        line_count=count,
    )


@dataclass(frozen=True)
class ReaderPreference:
    """Share of notional readers who chose an alternative."""

    count: int
    total: int

    @property
    def ratio(self) -> float:
        return self.count / self.total

    @property
    def percent(self) -> int:
        return round(self.ratio * 100)

    @property
    def label(self) -> str:
        return f"{self.percent}% chose this"

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "total": self.total,
            "ratio": self.ratio,
            "percent": self.percent,
            "label": self.label,
        }


def reader_preference(
    alternative: Alternative, total_readers: int = DEFAULT_TOTAL_READERS
) -> ReaderPreference | None:
    """Popularity of an alternative, None when no reader count is authored.

    Raises:
        ValueError: If total_readers is not positive
    """
    if total_readers <= 0:
        raise ValueError(f"total_readers must be positive, got {total_readers}")
    if alternative.reader_count is None:
        return None
    return ReaderPreference(count=alternative.reader_count, total=total_readers)
