"""Selection, ranking, consequence and metrics engine.

Every function here is synchronous and pure apart from SelectionState,
which is the only mutable entity. Nothing in this package performs I/O.
"""

from prism.engine.selection import ActiveStrategies, SelectionState
from prism.engine.ranker import RankedAlternative, StrategyRanker, rank, resolve_all, score
from prism.engine.consequences import (
    ConsequenceReport,
    EmphasisDiff,
    RippleDirection,
    RippleEffect,
    diff_emphasis,
    impact_label,
    propagate,
)
from prism.engine.metrics import AxisBalance, AxisPair, axis_balance, reader_preference

__all__ = [
    "ActiveStrategies",
    "AxisBalance",
    "AxisPair",
    "ConsequenceReport",
    "EmphasisDiff",
    "RankedAlternative",
    "RippleDirection",
    "RippleEffect",
    "SelectionState",
    "StrategyRanker",
    "axis_balance",
    "diff_emphasis",
    "impact_label",
    "propagate",
    "rank",
    "reader_preference",
    "resolve_all",
    "score",
]
