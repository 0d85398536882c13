"""Endpoints for load-order inspection and reordering."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from modvfs.database import get_session
from modvfs.errors import HintResolutionFailedError, ModVfsError
from modvfs.routers.deps import engine_lock, get_advisor, get_engine, http_error, persist
from modvfs.schemas.hints import RankingHints
from modvfs.schemas.load_order import LoadOrderResult, ReorderRequest, ReorderResult
from modvfs.services.advisors import RankingAdvisor
from modvfs.services.engine import ModEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/load-order", tags=["load-order"])


def _current(engine: ModEngine) -> LoadOrderResult:
    snapshot = engine.registry.snapshot()
    return LoadOrderResult(version=snapshot.version, order=snapshot.order)


@router.get("/", response_model=LoadOrderResult)
def load_order(engine: ModEngine = Depends(get_engine)) -> LoadOrderResult:
    with engine_lock:
        return _current(engine)


@router.put("/", response_model=LoadOrderResult)
def reorder(
    data: ReorderRequest,
    engine: ModEngine = Depends(get_engine),
    session: Session = Depends(get_session),
) -> LoadOrderResult:
    """Replace the whole load order.  ``order`` must list every mod exactly once."""
    with engine_lock:
        before = engine.version
        try:
            engine.reorder(data.order)
        except ModVfsError as exc:
            raise http_error(exc) from exc
        if engine.version != before:
            persist(engine, session)
        return _current(engine)


@router.post("/hints", response_model=ReorderResult)
def apply_hints(
    hints: RankingHints,
    engine: ModEngine = Depends(get_engine),
    session: Session = Depends(get_session),
) -> ReorderResult:
    """Reorder from caller-supplied ranking hints."""
    with engine_lock:
        try:
            result = engine.apply_hints(hints)
        except HintResolutionFailedError as exc:
            raise HTTPException(400, str(exc)) from exc
        if result.changed:
            persist(engine, session)
        return result


@router.post("/sort", response_model=ReorderResult)
def sort(
    engine: ModEngine = Depends(get_engine),
    advisor: RankingAdvisor = Depends(get_advisor),
    session: Session = Depends(get_session),
) -> ReorderResult:
    """Ask the configured advisor for hints and apply them.

    If the advisor fails, the current order is kept and 502 is returned.
    """
    with engine_lock:
        try:
            result = engine.sort_with(advisor)
        except ModVfsError as exc:
            logger.warning("Sort via '%s' advisor failed: %s", advisor.name, exc)
            raise http_error(exc) from exc
        if result.changed:
            persist(engine, session)
        return result
