"""API route definitions."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import replace
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response

# Keep typing imports in namespace for Pydantic annotation evaluation
__typing_imports__ = (List, Optional)

from prism import __version__
from prism.api.models import (
    AlternativesResponse,
    AxisPairModel,
    BalanceModel,
    ChoiceSummaryModel,
    ComparisonRowModel,
    DecodeResponse,
    DocumentModel,
    HealthModel,
    PickRequest,
    PickResponse,
    SessionModel,
    SourceLineModel,
    StrategyRequest,
)
from prism.config import Settings
from prism.document.loader import DocumentLoadError, LoadReport
from prism.document.models import Document
from prism.engine.metrics import AxisBalance, AxisPair
from prism.engine.selection import ActiveStrategies
from prism.export.tei import render_tei
from prism.persistence.store import KeyValueStore
from prism.session import AlternativeIndexError, ReadingSession, UnknownLineError
from prism.share.codec import decode

logger = logging.getLogger(__name__)

router = APIRouter()


class SessionRegistry:
    """In-process reading sessions over one document.

    Each session id gets its own ReadingSession; picks are persisted
    through the shared store under a per-session key. At most
    settings.max_sessions are held; the least recently used one is dropped
    first and restores its persisted picks if its id comes back.
    """

    def __init__(
        self,
        settings: Settings,
        store: KeyValueStore,
        document: Document | None = None,
        report: LoadReport | None = None,
        load_error: DocumentLoadError | None = None,
    ):
        self.settings = settings
        self.store = store
        self.document = document
        self.report = report
        self.load_error = load_error
        self._sessions: OrderedDict[str, ReadingSession] = OrderedDict()

    def require_document(self) -> Document:
        if self.document is None:
            detail = str(self.load_error) if self.load_error else "No document loaded"
            raise HTTPException(status_code=503, detail=detail)
        return self.document

    def get(self, session_id: str, share_token: str | None = None) -> ReadingSession:
        document = self.require_document()
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        else:
            session = ReadingSession(
                document,
                store=self.store,
                settings=self._session_settings(session_id),
            )
            session.restore(share_token)
            self._sessions[session_id] = session
            logger.info(f"Created session: {session_id}")
            while len(self._sessions) > self.settings.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.debug(f"Evicted session: {evicted}")
        return session

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def _session_settings(self, session_id: str) -> Settings:
        return replace(
            self.settings,
            storage_key_prefix=f"{self.settings.storage_key_prefix}:{session_id}",
        )


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


Registry = Annotated[SessionRegistry, Depends(get_registry)]


def _pair_model(pair: AxisPair) -> AxisPairModel:
    return AxisPairModel(
        left_name=pair.left_name,
        left=pair.left,
        right_name=pair.right_name,
        right=pair.right,
        display=pair.format(),
    )


def _balance_model(balance: AxisBalance) -> BalanceModel:
    return BalanceModel(
        literal_natural=_pair_model(balance.literal_natural),
        foreignizing_domesticating=_pair_model(balance.foreignizing_domesticating),
        line_count=balance.line_count,
    )


def _session_model(session_id: str, session: ReadingSession) -> SessionModel:
    return SessionModel(
        session_id=session_id,
        lines=session.effective_lines(),
        picks=session.selection.to_dict(),
        strategies=session.strategies.to_dict(),
        balance=_balance_model(session.balance()),
        share_token=session.share_token(),
    )


@router.get("/health", response_model=HealthModel)
async def health_check(registry: Registry):
    """Health check endpoint."""
    loaded = registry.document is not None
    return HealthModel(
        status="ok" if loaded else "degraded",
        version=__version__,
        document_loaded=loaded,
        doc_id=registry.document.doc_id if loaded else None,
    )


@router.get("/document", response_model=DocumentModel)
async def get_document(registry: Registry):
    """Source lines, default target text and the lines that have alternatives."""
    document = registry.require_document()
    return DocumentModel(
        doc_id=document.doc_id,
        title=document.title,
        source_lines=[
            SourceLineModel(text=s.text, transliteration=s.transliteration)
            for s in document.source_lines
        ],
        surface_lines=list(document.surface_lines),
        choices=[
            ChoiceSummaryModel(
                line=c.line,
                alternative_count=len(c.alternatives),
                selected=c.selected,
                stakes=c.stakes,
            )
            for c in document.choices
        ],
        load_warnings=registry.report.warnings if registry.report else [],
    )


@router.get("/sessions/{session_id}", response_model=SessionModel)
async def get_session(
    session_id: str,
    registry: Registry,
    v: Annotated[
        Optional[str],
        Query(description="Share token, applied over persisted picks on first access"),
    ] = None,
):
    """Current composite reading for a session."""
    session = registry.get(session_id, share_token=v)
    return _session_model(session_id, session)


@router.get(
    "/sessions/{session_id}/lines/{line}/alternatives",
    response_model=AlternativesResponse,
)
async def get_alternatives(
    session_id: str,
    line: int,
    registry: Registry,
    literal: bool = False,
    natural: bool = False,
    foreignizing: bool = False,
):
    """Alternatives for a line, ranked under the given strategy toggles."""
    session = registry.get(session_id)
    active = ActiveStrategies(
        literal=literal, natural=natural, foreignizing=foreignizing
    )
    session.set_strategies(active)
    try:
        views = session.ranked(line, active)
    except UnknownLineError as e:
        raise HTTPException(status_code=404, detail=str(e))

    choice = session.document.choice_for_line(line)
    return AlternativesResponse(
        line=line,
        stakes=choice.stakes if choice else None,
        strategies=active.to_dict(),
        alternatives=[v.to_dict() for v in views],
    )


@router.post("/sessions/{session_id}/picks", response_model=PickResponse)
async def post_pick(session_id: str, request: PickRequest, registry: Registry):
    """Apply a pick and report its consequences."""
    session = registry.get(session_id)
    try:
        result = session.pick(request.line, request.index)
    except UnknownLineError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AlternativeIndexError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return PickResponse(
        text=result.text,
        consequences=result.report.to_dict(),
        balance=_balance_model(result.balance),
        persisted=result.persisted,
        share_token=session.share_token(),
    )


@router.post("/sessions/{session_id}/strategy/apply", response_model=SessionModel)
async def apply_strategy(
    session_id: str, request: StrategyRequest, registry: Registry
):
    """Pick the best alternative on every line under the given strategies."""
    session = registry.get(session_id)
    session.set_strategies(ActiveStrategies.from_mapping(request.model_dump()))
    session.apply_strategy_to_all()
    return _session_model(session_id, session)


@router.post("/sessions/{session_id}/reset", response_model=SessionModel)
async def reset_session(session_id: str, registry: Registry):
    """Return every line to the document default."""
    session = registry.get(session_id)
    session.reset()
    return _session_model(session_id, session)


@router.get(
    "/sessions/{session_id}/comparison", response_model=List[ComparisonRowModel]
)
async def get_comparison(session_id: str, registry: Registry):
    """Default rendering beside the reader's version, per line."""
    session = registry.get(session_id)
    return [row.to_dict() for row in session.comparison()]


@router.get("/sessions/{session_id}/export/tei")
async def export_tei(session_id: str, registry: Registry):
    """Critical apparatus of the session's reading as TEI XML."""
    session = registry.get(session_id)
    xml = render_tei(session.document, session.apparatus())
    filename = f"{session.document.doc_id}-apparatus.xml"
    return Response(
        content=xml,
        media_type="application/xml",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/share/decode", response_model=DecodeResponse)
async def decode_share_token(
    token: Annotated[str, Query(description="Share token, e.g. '0-2-1'")],
):
    """Decode a share token without range checks."""
    return DecodeResponse(token=token, picks=decode(token).to_dict())
