"""Stable identifiers and canonical serialization for exports."""

from __future__ import annotations

import hashlib
import json
import unicodedata
from typing import Any


def line_id(doc_id: str, line: int) -> str:
    """Stable identifier for a target line.

    Example:
        >>> line_id("jingyesi", 2)
        'jingyesi.2'
    """
    return f"{doc_id}.{line}"


def normalize_text(text: str) -> str:
    """NFC-normalize, strip and lowercase for hashing."""
    return unicodedata.normalize("NFC", text).strip().lower()


def reading_id(unit_id: str, text: str) -> str:
    """Deterministic reading identifier.

    First 12 hex chars of SHA256 over unit id and normalized text, so the
    same rendering on the same line always gets the same ID.

    Example:
        >>> reading_id("jingyesi.0", "Before my bed, bright moonlight")
        'jingyesi.0#...'
    """
    hash_input = f"{unit_id}|{normalize_text(text)}"
    digest = hashlib.sha256(hash_input.encode("utf-8")).hexdigest()[:12]
    return f"{unit_id}#{digest}"


def canonical_json(obj: Any, *, sort_keys: bool = True) -> str:
    """Serialize to canonical JSON: sorted keys, no whitespace, raw UTF-8.

    Example:
        >>> canonical_json({"b": 1, "a": 2})
        '{"a":2,"b":1}'
    """
    return json.dumps(
        obj,
        sort_keys=sort_keys,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def content_hash(data: Any) -> str:
    """SHA256 hex digest of the canonical JSON form."""
    return hashlib.sha256(canonical_json(data).encode("utf-8")).hexdigest()
