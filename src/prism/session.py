"""Reading session: the single writer of a reader's selection.

Wires the engine to a persistence store for one document. A host (CLI,
HTTP API, or any view layer) calls into the session and renders what it
returns; the session itself never renders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from prism.config import Settings
from prism.document.models import Choice, Document, StrategyAxis
from prism.engine.consequences import ConsequenceReport, consequences, impact_label
from prism.engine.metrics import AxisBalance, axis_balance, reader_preference
from prism.engine.ranker import rank, resolve_all
from prism.engine.selection import ActiveStrategies, SelectionState
from prism.export.apparatus import ApparatusEntry, build_apparatus
from prism.persistence.store import KeyValueStore, MemoryStore, SelectionPersistence
from prism.share.codec import decode_for_document, encode

logger = logging.getLogger(__name__)


class UnknownLineError(KeyError):
    """Raised when a line has no choice in the document."""

    def __init__(self, line: int):
        self.line = line
        super().__init__(f"Line {line} has no alternatives")

    def __str__(self) -> str:
        return self.args[0]


class AlternativeIndexError(IndexError):
    """Raised when a pick names an alternative that does not exist."""

    def __init__(self, line: int, index: int, count: int):
        self.line = line
        self.index = index
        self.count = count
        super().__init__(
            f"Line {line} has {count} alternatives; index {index} is out of range"
        )


@dataclass
class AlternativeView:
    """One row of a line's ranked alternatives, ready to display."""

    index: int
    text: str
    score: float
    chosen: bool
    chips: list[str]
    note: str | None
    bucket: str | None
    philosophy: str | None
    philosophy_badge: str | None
    semantic_distance: str
    impact: str
    reader_preference: dict | None

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "text": self.text,
            "score": self.score,
            "chosen": self.chosen,
            "chips": self.chips,
            "note": self.note,
            "bucket": self.bucket,
            "philosophy": self.philosophy,
            "philosophy_badge": self.philosophy_badge,
            "semantic_distance": self.semantic_distance,
            "impact": self.impact,
            "reader_preference": self.reader_preference,
        }


@dataclass
class PickResult:
    """Outcome of applying one pick."""

    text: str
    report: ConsequenceReport
    balance: AxisBalance
    persisted: bool

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "consequences": self.report.to_dict(),
            "balance": self.balance.to_dict(),
            "persisted": self.persisted,
        }


@dataclass(frozen=True)
class ComparisonRow:
    """Default versus current rendering of one line."""

    line: int
    original: str
    current: str

    @property
    def changed(self) -> bool:
        return self.original != self.current

    def to_dict(self) -> dict:
        return {
            "line": self.line,
            "original": self.original,
            "current": self.current,
            "changed": self.changed,
        }


class ReadingSession:
    """A reader's session over one document."""

    def __init__(
        self,
        document: Document,
        store: KeyValueStore | None = None,
        settings: Settings | None = None,
    ):
        self.document = document
        self.settings = settings or Settings()
        self.selection = SelectionState()
        self.strategies = ActiveStrategies.none()
        self.persistence = SelectionPersistence(
            store if store is not None else MemoryStore(),
            self.settings.storage_key(document.doc_id),
            document=document,
        )

    # --- Restore / reset

    def restore(self, share_token: str | None = None) -> SelectionState:
        """Load persisted picks, then apply a share token on top.

        Lines named by the token win over persisted picks; other persisted
        picks are kept.
        """
        persisted = self.persistence.load()
        if share_token:
            shared = decode_for_document(self.document, share_token)
            self.selection = persisted.merge(shared)
            logger.debug(f"Applied share token for {len(shared)} line(s)")
        else:
            self.selection = persisted
        return self.selection

    def reset(self) -> bool:
        """Drop every pick and the persisted copy."""
        self.selection.clear()
        return self.persistence.clear()

    # --- Reads

    def _choice(self, line: int) -> Choice:
        choice = self.document.choice_for_line(line)
        if choice is None:
            raise UnknownLineError(line)
        return choice

    def effective_lines(self) -> list[str]:
        """Target text with each line's effective alternative substituted."""
        lines = list(self.document.surface_lines)
        for choice in self.document.choices:
            lines[choice.line] = self.selection.effective_alternative(choice).text
        return lines

    def ranked(
        self, line: int, active: ActiveStrategies | None = None
    ) -> list[AlternativeView]:
        """Alternatives for a line, ordered under the active strategies."""
        choice = self._choice(line)
        active = active if active is not None else self.strategies
        current = self.selection.effective_index(choice)
        has_picked = self.selection.has_pick(line)

        views = []
        for r in rank(choice, active):
            alt = r.alternative
            preference = reader_preference(alt, self.settings.total_readers)
            views.append(
                AlternativeView(
                    index=r.index,
                    text=alt.text,
                    score=round(r.score, self.settings.score_precision),
                    chosen=r.index == current,
                    chips=list(alt.chips),
                    note=alt.note,
                    bucket=alt.visible_bucket(has_picked),
                    philosophy=alt.philosophy.value if alt.philosophy else None,
                    philosophy_badge=alt.philosophy.badge if alt.philosophy else None,
                    semantic_distance=alt.semantic_distance.value,
                    impact=impact_label(alt),
                    reader_preference=preference.to_dict() if preference else None,
                )
            )
        return views

    def balance(self) -> AxisBalance:
        return axis_balance(self.document, self.selection)

    def comparison(self) -> list[ComparisonRow]:
        return [
            ComparisonRow(
                line=choice.line,
                original=choice.default_alternative.text,
                current=self.selection.effective_alternative(choice).text,
            )
            for choice in self.document.choices
        ]

    def apparatus(self) -> list[ApparatusEntry]:
        return build_apparatus(self.document, self.selection)

    # --- Writes

    def pick(self, line: int, index: int) -> PickResult:
        """Choose an alternative for a line.

        Raises:
            UnknownLineError: If the line has no choice
            AlternativeIndexError: If index is not a valid alternative
        """
        choice = self._choice(line)
        if not choice.in_range(index):
            raise AlternativeIndexError(line, index, len(choice.alternatives))

        previous = self.selection.effective_index(choice)
        self.selection.set(line, index)
        persisted = self.persistence.save(self.selection)

        return PickResult(
            text=choice.alternatives[index].text,
            report=consequences(self.document, choice, previous, index),
            balance=self.balance(),
            persisted=persisted,
        )

    def toggle_strategy(self, axis: StrategyAxis) -> ActiveStrategies:
        self.strategies = self.strategies.toggle(axis)
        return self.strategies

    def set_strategies(self, active: ActiveStrategies) -> None:
        self.strategies = active

    def apply_strategy_to_all(self) -> bool:
        """Replace every pick with the best alternative under the strategies."""
        self.selection = resolve_all(self.document, self.strategies)
        return self.persistence.save(self.selection)

    # --- Sharing

    def share_token(self) -> str:
        return encode(self.document, self.selection)

    def share_url(self, base_url: str) -> str:
        """base_url with the share parameter set to the current token."""
        parts = urlsplit(base_url)
        query = [
            (k, v)
            for k, v in parse_qsl(parts.query, keep_blank_values=True)
            if k != self.settings.share_param
        ]
        query.append((self.settings.share_param, self.share_token()))
        return urlunsplit(parts._replace(query=urlencode(query)))
