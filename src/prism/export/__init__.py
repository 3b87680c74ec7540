"""Export of composite readings.

Provides:
- Apparatus data (base text, every variant with tags, effective reading)
- TEI P5 rendering
- Canonical JSONL rendering with a content hash
"""

from prism.export.apparatus import (
    APPARATUS_SCHEMA_VERSION,
    ApparatusEntry,
    ApparatusReading,
    apparatus_hash,
    apparatus_jsonl,
    build_apparatus,
)
from prism.export.tei import render_tei

__all__ = [
    "APPARATUS_SCHEMA_VERSION",
    "ApparatusEntry",
    "ApparatusReading",
    "apparatus_hash",
    "apparatus_jsonl",
    "build_apparatus",
    "render_tei",
]
