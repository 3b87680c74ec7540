"""Document model and loading."""

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
from prism.document.loader import (
    DocumentError,
    DocumentLoadError,
    LoadReport,
    load_document,
    parse_document,
)

__all__ = [
    "Alternative",
    "Choice",
    "Dependency",
    "Document",
    "DocumentError",
    "DocumentLoadError",
    "LoadReport",
    "Philosophy",
    "SemanticDistance",
    "SourceLine",
    "StrategyAxis",
    "load_document",
    "parse_document",
]
