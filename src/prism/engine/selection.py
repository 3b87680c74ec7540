"""Reader selection state and active strategy toggles.

SelectionState is a sparse override map on top of the document defaults:
a line with no entry uses its choice's `selected` index. Overrides are
never validated on write; out-of-range indices are resolved lazily by
effective_index(), which falls back to the document default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterator, Mapping

from prism.document.models import Alternative, Choice, StrategyAxis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveStrategies:
    """On/off state for every strategy axis.

    Passed explicitly into ranking calls; there is no global toggle state.
    """

    literal: bool = False
    natural: bool = False
    foreignizing: bool = False

    @classmethod
    def none(cls) -> "ActiveStrategies":
        return cls()

    @classmethod
    def only(cls, *axes: StrategyAxis) -> "ActiveStrategies":
        """Activate exactly the given axes."""
        return cls(**{axis.value: True for axis in axes})

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, bool]) -> "ActiveStrategies":
        """Build from {"literal": True, ...}; unknown keys are ignored."""
        return cls(
            **{axis.value: bool(mapping.get(axis.value, False)) for axis in StrategyAxis}
        )

    def is_active(self, axis: StrategyAxis) -> bool:
        return getattr(self, axis.value)

    def active_axes(self) -> list[StrategyAxis]:
        return [axis for axis in StrategyAxis if self.is_active(axis)]

    def toggle(self, axis: StrategyAxis) -> "ActiveStrategies":
        """Return a copy with one axis flipped."""
        return replace(self, **{axis.value: not self.is_active(axis)})

    def to_dict(self) -> dict[str, bool]:
        return {axis.value: self.is_active(axis) for axis in StrategyAxis}


class SelectionState:
    """Sparse mapping of line -> chosen alternative index."""

    def __init__(self, picks: Mapping[int, int] | None = None):
        self._picks: dict[int, int] = dict(picks or {})

    @classmethod
    def from_mapping(cls, mapping: Mapping) -> "SelectionState":
        """Permissive restore from a stored {line: index} mapping.

        Keys may be strings (JSON objects only have string keys). Entries
        whose key or value is not an integer are skipped; range is not
        checked here.
        """
        picks: dict[int, int] = {}
        for key, value in mapping.items():
            try:
                line = int(key)
            except (TypeError, ValueError):
                logger.debug(f"Ignoring non-integer line key {key!r}")
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                logger.debug(f"Ignoring non-integer index {value!r} for line {line}")
                continue
            picks[line] = value
        return cls(picks)

    def get(self, line: int) -> int | None:
        return self._picks.get(line)

    def set(self, line: int, index: int) -> None:
        self._picks[line] = index

    def remove(self, line: int) -> None:
        self._picks.pop(line, None)

    def clear(self) -> None:
        self._picks.clear()

    def has_pick(self, line: int) -> bool:
        return line in self._picks

    def lines(self) -> list[int]:
        return sorted(self._picks)

    def effective_index(self, choice: Choice) -> int:
        """Override for the choice's line if in range, else the default."""
        index = self._picks.get(choice.line)
        if index is None:
            return choice.selected
        if not choice.in_range(index):
            logger.debug(
                f"Index {index} out of range for line {choice.line} "
                f"({len(choice.alternatives)} alternatives); using default"
            )
            return choice.selected
        return index

    def effective_alternative(self, choice: Choice) -> Alternative:
        return choice.alternatives[self.effective_index(choice)]

    def merge(self, other: "SelectionState") -> "SelectionState":
        """New state with other's entries taking precedence."""
        merged = dict(self._picks)
        merged.update(other._picks)
        return SelectionState(merged)

    def copy(self) -> "SelectionState":
        return SelectionState(self._picks)

    def to_dict(self) -> dict[int, int]:
        return dict(sorted(self._picks.items()))

    def __len__(self) -> int:
        return len(self._picks)

    def __iter__(self) -> Iterator[int]:
        return iter(self.lines())

    def __contains__(self, line: object) -> bool:
        return line in self._picks

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SelectionState):
            return self._picks == other._picks
        if isinstance(other, Mapping):
            return self._picks == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"SelectionState({self.to_dict()!r})"
