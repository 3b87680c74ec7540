"""Document loading and validation.

Parsing is tolerant: a malformed choice or alternative is dropped and
recorded in the LoadReport, so the remaining lines still render. Only
failures that leave nothing to operate on (missing file, network error,
invalid JSON, non-object top level) raise DocumentLoadError.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from prism.document.models import (
    Alternative,
    Choice,
    Dependency,
    Document,
    Philosophy,
    SemanticDistance,
    SourceLine,
    StrategyAxis,
)

logger = logging.getLogger(__name__)


class DocumentError(Exception):
    """Base class for document errors."""

    pass


class DocumentLoadError(DocumentError):
    """Raised when no usable document could be obtained."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load document from {source}: {reason}")


@dataclass
class LoadReport:
    """What was loaded and which parts were skipped."""

    source: str
    doc_id: str
    choices_loaded: int = 0
    choices_skipped: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.warnings

    def warn(self, message: str) -> None:
        logger.warning(f"{self.source}: {message}")
        self.warnings.append(message)

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "doc_id": self.doc_id,
            "choices_loaded": self.choices_loaded,
            "choices_skipped": self.choices_skipped,
            "warnings": self.warnings,
        }


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _parse_source_lines(raw: object, report: LoadReport) -> tuple[SourceLine, ...]:
    if not isinstance(raw, list):
        report.warn("source.lines missing or not a list")
        return ()

    lines = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or not isinstance(item.get("text"), str):
            report.warn(f"source.lines[{i}]: missing text; skipped")
            continue
        translit = item.get("transliteration", item.get("pinyin", ""))
        lines.append(
            SourceLine(
                text=item["text"],
                transliteration=translit if isinstance(translit, str) else "",
            )
        )
    return tuple(lines)


def _parse_weights(raw: object, where: str, report: LoadReport) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        report.warn(f"{where}: weights is not a mapping; ignored")
        return {}

    weights: dict[StrategyAxis, float] = {}
    for key, value in raw.items():
        try:
            axis = StrategyAxis(key)
        except ValueError:
            report.warn(f"{where}: unknown strategy axis {key!r}; ignored")
            continue
        if not _is_number(value):
            report.warn(f"{where}: weight for {key} is not a number; ignored")
            continue
        if not 0.0 <= value <= 1.0:
            report.warn(f"{where}: weight for {key} outside [0, 1]; clamped")
            value = min(1.0, max(0.0, value))
        weights[axis] = float(value)
    return weights


def _parse_alternative(
    raw: object, where: str, report: LoadReport
) -> Alternative | None:
    if not isinstance(raw, dict):
        report.warn(f"{where}: not an object; skipped")
        return None

    text = raw.get("text")
    if not isinstance(text, str) or not text.strip():
        report.warn(f"{where}: empty text; skipped")
        return None

    chips_raw = raw.get("chips") or []
    if not isinstance(chips_raw, list):
        report.warn(f"{where}: chips is not a list; ignored")
        chips_raw = []
    chips = tuple(c for c in chips_raw if isinstance(c, str))

    philosophy = None
    if raw.get("philosophy") is not None:
        try:
            philosophy = Philosophy(raw["philosophy"])
        except ValueError:
            report.warn(f"{where}: unknown philosophy {raw['philosophy']!r}; ignored")

    distance = SemanticDistance.MEDIUM
    if raw.get("semanticDistance") is not None:
        try:
            distance = SemanticDistance(raw["semanticDistance"])
        except ValueError:
            report.warn(
                f"{where}: unknown semanticDistance "
                f"{raw['semanticDistance']!r}; using medium"
            )

    reader_count = raw.get("readerCount")
    if reader_count is not None and not (_is_int(reader_count) and reader_count >= 0):
        report.warn(f"{where}: readerCount must be a non-negative integer; ignored")
        reader_count = None

    note = raw.get("note")
    bucket = raw.get("bucket")
    return Alternative(
        text=text,
        weights=_parse_weights(raw.get("weights"), where, report),
        chips=chips,
        note=note if isinstance(note, str) else None,
        bucket=bucket if isinstance(bucket, str) else None,
        philosophy=philosophy,
        semantic_distance=distance,
        reader_count=reader_count,
    )


def _parse_dependencies(
    raw: object, where: str, report: LoadReport
) -> tuple[Dependency, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        report.warn(f"{where}: dependencies is not a list; ignored")
        return ()

    deps = []
    for j, item in enumerate(raw):
        if (
            not isinstance(item, dict)
            or not _is_int(item.get("affectsLine"))
            or not _is_number(item.get("delta", 0))
        ):
            report.warn(f"{where}.dependencies[{j}]: malformed; skipped")
            continue
        deps.append(
            Dependency(affects_line=item["affectsLine"], delta=float(item.get("delta", 0)))
        )
    return tuple(deps)


def _parse_choice(
    raw: object,
    i: int,
    surface_count: int,
    seen_lines: set[int],
    report: LoadReport,
) -> Choice | None:
    where = f"choice[{i}]"
    if not isinstance(raw, dict):
        report.warn(f"{where}: not an object; skipped")
        return None

    line = raw.get("line")
    if not _is_int(line):
        report.warn(f"{where}: missing or non-integer line; skipped")
        return None
    if not 0 <= line < surface_count:
        report.warn(f"{where}: line {line} has no surface line; skipped")
        return None
    if line in seen_lines:
        report.warn(f"{where}: duplicate line {line}; skipped")
        return None

    alts_raw = raw.get("alternatives")
    if not isinstance(alts_raw, list) or not alts_raw:
        report.warn(f"{where}: no alternatives; skipped")
        return None

    alternatives = []
    for j, alt_raw in enumerate(alts_raw):
        alt = _parse_alternative(alt_raw, f"{where}.alternatives[{j}]", report)
        if alt is not None:
            alternatives.append(alt)
    if not alternatives:
        report.warn(f"{where}: no usable alternatives; skipped")
        return None

    selected = raw.get("selected", 0)
    if not _is_int(selected) or not 0 <= selected < len(alternatives):
        report.warn(f"{where}: selected {selected!r} out of range; using 0")
        selected = 0

    stakes = raw.get("stakes")
    seen_lines.add(line)
    return Choice(
        line=line,
        alternatives=tuple(alternatives),
        selected=selected,
        dependencies=_parse_dependencies(raw.get("dependencies"), where, report),
        stakes=stakes if isinstance(stakes, str) else None,
    )


def parse_document(
    data: object, source: str = "<memory>", doc_id: str | None = None
) -> tuple[Document, LoadReport]:
    """Build a Document from its JSON structure.

    Args:
        data: Decoded JSON document
        source: Where the data came from (for messages)
        doc_id: Identifier override; defaults to data["id"] or "document"

    Returns:
        Tuple of (Document, LoadReport)

    Raises:
        DocumentLoadError: If data is not a JSON object
    """
    if not isinstance(data, dict):
        raise DocumentLoadError(source, "top level is not an object")

    resolved_id = doc_id or data.get("id") or "document"
    report = LoadReport(source=source, doc_id=str(resolved_id))

    source_section = data.get("source") if isinstance(data.get("source"), dict) else {}
    source_lines = _parse_source_lines(source_section.get("lines"), report)

    target = data.get("target")
    if not isinstance(target, dict):
        report.warn("target missing or not an object")
        target = {}

    surface_raw = target.get("surfaceLines")
    if not isinstance(surface_raw, list):
        report.warn("target.surfaceLines missing or not a list")
        surface_raw = []
    surface_lines = tuple(s if isinstance(s, str) else "" for s in surface_raw)

    choices_raw = target.get("choices")
    if choices_raw is None:
        report.warn("target.choices missing; document has no alternatives")
        choices_raw = []
    elif not isinstance(choices_raw, list):
        report.warn("target.choices is not a list; ignored")
        choices_raw = []

    seen: set[int] = set()
    choices = []
    for i, raw in enumerate(choices_raw):
        choice = _parse_choice(raw, i, len(surface_lines), seen, report)
        if choice is None:
            report.choices_skipped += 1
        else:
            choices.append(choice)
    report.choices_loaded = len(choices)

    title = data.get("title")
    document = Document(
        doc_id=report.doc_id,
        source_lines=source_lines,
        surface_lines=surface_lines,
        choices=tuple(choices),
        title=title if isinstance(title, str) else None,
    )
    return document, report


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def fetch_json(location: str, timeout: float = 10.0) -> object:
    """Read JSON from a local path or an http(s) URL.

    Raises:
        DocumentLoadError: On any I/O, HTTP or decoding failure
    """
    if _is_url(location):
        try:
            resp = httpx.get(location, timeout=timeout, follow_redirects=True)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DocumentLoadError(
                location, f"HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise DocumentLoadError(location, f"request failed: {e}") from e
        text = resp.text
    else:
        path = Path(location).expanduser()
        if not path.exists():
            raise DocumentLoadError(location, "file not found")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentLoadError(location, str(e)) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentLoadError(location, f"invalid JSON: {e}") from e


def load_document(
    location: str | Path, timeout: float = 10.0
) -> tuple[Document, LoadReport]:
    """Load and parse a document from a path or URL.

    The document id defaults to the file stem when the data has no "id".
    """
    location = str(location)
    data = fetch_json(location, timeout=timeout)
    stem = Path(location.split("?", 1)[0]).stem or None
    doc_id = None
    if isinstance(data, dict) and not data.get("id"):
        doc_id = stem
    document, report = parse_document(data, source=location, doc_id=doc_id)
    logger.info(
        f"Loaded document {document.doc_id}: {report.choices_loaded} choices, "
        f"{report.choices_skipped} skipped"
    )
    return document, report
