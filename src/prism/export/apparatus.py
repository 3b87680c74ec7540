"""Critical apparatus of a composite reading.

Per line, the document default is the base reading (lemma) and every
alternative is a witness reading tagged with its chips and philosophy.
The reader's currently effective alternative is marked. Markup is left
to the renderers (tei.render_tei, apparatus_jsonl).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from prism.document.models import Document
from prism.engine.selection import SelectionState
from prism.export.identifiers import canonical_json, content_hash, line_id, reading_id

APPARATUS_SCHEMA_VERSION = "1.0.0"


@dataclass
class ApparatusReading:
    """One alternative as a witness reading."""

    reading_id: str
    index: int
    text: str
    chips: list[str] = field(default_factory=list)
    philosophy: str | None = None
    is_base: bool = False
    is_effective: bool = False

    def ana_tokens(self) -> list[str]:
        """Analysis pointers: one per chip, then the philosophy if any."""
        tokens = [f"#chip:{chip}" for chip in self.chips]
        if self.philosophy:
            tokens.append(f"#phil:{self.philosophy}")
        return tokens

    def to_dict(self) -> dict:
        return {
            "reading_id": self.reading_id,
            "index": self.index,
            "text": self.text,
            "chips": self.chips,
            "philosophy": self.philosophy,
            "is_base": self.is_base,
            "is_effective": self.is_effective,
        }


@dataclass
class ApparatusEntry:
    """Apparatus for one target line."""

    line_id: str
    n: int
    """1-based position in the export."""

    line: int
    base_text: str
    readings: list[ApparatusReading]
    schema_version: str = APPARATUS_SCHEMA_VERSION

    @property
    def effective(self) -> ApparatusReading:
        return next(r for r in self.readings if r.is_effective)

    def to_dict(self) -> dict:
        return {
            "line_id": self.line_id,
            "n": self.n,
            "line": self.line,
            "base_text": self.base_text,
            "readings": [r.to_dict() for r in self.readings],
            "schema_version": self.schema_version,
        }

    def to_jsonl(self) -> str:
        return canonical_json(self.to_dict())


def build_apparatus(
    document: Document, selection: SelectionState
) -> list[ApparatusEntry]:
    """Apparatus entries for every choice, in document order."""
    entries = []
    for n, choice in enumerate(document.choices, start=1):
        unit = line_id(document.doc_id, choice.line)
        effective = selection.effective_index(choice)
        readings = [
            ApparatusReading(
                reading_id=reading_id(unit, alt.text),
                index=i,
                text=alt.text,
                chips=list(alt.chips),
                philosophy=alt.philosophy.value if alt.philosophy else None,
                is_base=i == choice.selected,
                is_effective=i == effective,
            )
            for i, alt in enumerate(choice.alternatives)
        ]
        entries.append(
            ApparatusEntry(
                line_id=unit,
                n=n,
                line=choice.line,
                base_text=choice.default_alternative.text,
                readings=readings,
            )
        )
    return entries


def apparatus_jsonl(entries: list[ApparatusEntry]) -> str:
    """One canonical JSON object per line, newline terminated."""
    return "".join(entry.to_jsonl() + "\n" for entry in entries)


def apparatus_hash(entries: list[ApparatusEntry]) -> str:
    """Content hash of a whole apparatus export."""
    return content_hash([entry.to_dict() for entry in entries])
