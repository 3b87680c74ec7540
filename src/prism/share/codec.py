"""Compact share token for a full selection state.

The token is the effective alternative index of every choice, in document
order, joined with "-" (e.g. "0-2-1"). It is versionless and positional:
reordering a document's choices invalidates tokens shared earlier.

Decoding is permissive. Unparseable segments are skipped and indices are
not range-checked; range is resolved where an index is dereferenced
against a specific choice (SelectionState.effective_index).
"""

from __future__ import annotations

import logging
import re

from prism.document.models import Document
from prism.engine.selection import SelectionState

logger = logging.getLogger(__name__)

SEPARATOR = "-"

_INTEGER = re.compile(r"^\+?\d+$")


def encode(document: Document, selection: SelectionState) -> str:
    """Encode the effective index of every choice.

    Example:
        >>> encode(doc, SelectionState({1: 2}))
        '0-2-0'
    """
    return SEPARATOR.join(
        str(selection.effective_index(choice)) for choice in document.choices
    )


def _parse_segment(segment: str) -> int | None:
    segment = segment.strip()
    if not _INTEGER.match(segment):
        return None
    return int(segment)


def decode(token: str) -> SelectionState:
    """Decode a token into a state keyed by choice position.

    Example:
        >>> decode("2-x-0").to_dict()
        {0: 2, 2: 0}
    """
    picks: dict[int, int] = {}
    if not token:
        return SelectionState()
    for position, segment in enumerate(token.split(SEPARATOR)):
        value = _parse_segment(segment)
        if value is None:
            if segment:
                logger.debug(f"Skipping unparseable share segment {segment!r}")
            continue
        picks[position] = value
    return SelectionState(picks)


def decode_for_document(document: Document, token: str) -> SelectionState:
    """Decode a token and key it by each choice's line.

    Positions beyond the document's choices are dropped. Indices stay
    unchecked, as with decode().
    """
    by_position = decode(token)
    picks: dict[int, int] = {}
    for position, choice in enumerate(document.choices):
        index = by_position.get(position)
        if index is not None:
            picks[choice.line] = index
    extra = [p for p in by_position.lines() if p >= len(document.choices)]
    if extra:
        logger.debug(f"Share token has {len(extra)} segment(s) beyond the document")
    return SelectionState(picks)
