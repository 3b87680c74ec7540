"""Pydantic models for API."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class HealthModel(BaseModel):
    """Health check response."""

    status: str
    version: str
    document_loaded: bool
    doc_id: Optional[str] = None


class SourceLineModel(BaseModel):
    """A source text line."""

    text: str
    transliteration: str = ""


class ChoiceSummaryModel(BaseModel):
    """A line with alternatives."""

    line: int = Field(..., description="Target line index")
    alternative_count: int = Field(..., description="Number of alternatives")
    selected: int = Field(..., description="Document-default alternative index")
    stakes: Optional[str] = Field(None, description="Why this line's choice matters")


class DocumentModel(BaseModel):
    """Document overview."""

    doc_id: str
    title: Optional[str] = None
    source_lines: List[SourceLineModel]
    surface_lines: List[str]
    choices: List[ChoiceSummaryModel]
    load_warnings: List[str] = Field(default_factory=list)


class AxisPairModel(BaseModel):
    """Two opposing axis percentages."""

    left_name: str
    left: int
    right_name: str
    right: int
    display: str


class BalanceModel(BaseModel):
    """Document-wide strategy balance."""

    literal_natural: AxisPairModel
    foreignizing_domesticating: AxisPairModel
    line_count: int


class SessionModel(BaseModel):
    """Current state of a reading session."""

    session_id: str
    lines: List[str] = Field(..., description="Composite target text")
    picks: Dict[int, int] = Field(..., description="Line -> chosen index overrides")
    strategies: Dict[str, bool]
    balance: BalanceModel
    share_token: str


class ReaderPreferenceModel(BaseModel):
    count: int
    total: int
    ratio: float
    percent: int
    label: str


class AlternativeModel(BaseModel):
    """One ranked alternative."""

    index: int
    text: str
    score: float
    chosen: bool
    chips: List[str]
    note: Optional[str] = None
    bucket: Optional[str] = Field(
        None, description="Only present once the reader picked on this line"
    )
    philosophy: Optional[str] = None
    philosophy_badge: Optional[str] = None
    semantic_distance: str
    impact: str
    reader_preference: Optional[ReaderPreferenceModel] = None


class AlternativesResponse(BaseModel):
    """Ranked alternatives for a line."""

    line: int
    stakes: Optional[str] = None
    strategies: Dict[str, bool]
    alternatives: List[AlternativeModel]


class PickRequest(BaseModel):
    """Request body for a pick."""

    line: int = Field(..., description="Target line index")
    index: int = Field(..., description="Alternative index")


class EmphasisDiffModel(BaseModel):
    gained: List[str]
    lost: List[str]


class RippleModel(BaseModel):
    source_line: int
    affects_line: int
    direction: str
    magnitude: float
    message: str


class ConsequencesModel(BaseModel):
    """What a pick changed."""

    line: int
    from_index: int
    to_index: int
    diff: EmphasisDiffModel
    ripples: List[RippleModel]
    impact: str
    stakes: Optional[str] = None


class PickResponse(BaseModel):
    """Response for a pick."""

    text: str
    consequences: ConsequencesModel
    balance: BalanceModel
    persisted: bool
    share_token: str


class StrategyRequest(BaseModel):
    """Active strategy toggles."""

    literal: bool = False
    natural: bool = False
    foreignizing: bool = False


class ComparisonRowModel(BaseModel):
    line: int
    original: str
    current: str
    changed: bool


class DecodeResponse(BaseModel):
    """Decoded share token, keyed by choice position."""

    token: str
    picks: Dict[int, int]
