"""Shared FastAPI dependencies used across routers.

The API process owns exactly one ``ModEngine``.  Endpoints are plain ``def``
functions (run on the threadpool), so every access to the engine goes through
``engine_lock``; this is the serialisation the engine expects from its caller.
"""

import logging
import threading

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from modvfs import database
from modvfs.config import settings
from modvfs.errors import (
    DuplicateIdError,
    EmptyManifestError,
    HintResolutionFailedError,
    ModNotFoundError,
    ModVfsError,
    OrderMismatchError,
)
from modvfs.services.advisors import RankingAdvisor, build_advisor
from modvfs.services.engine import ModEngine
from modvfs.services.registry_store import load_registry, save_registry

logger = logging.getLogger(__name__)

engine_lock = threading.RLock()
_engine: ModEngine | None = None

_STATUS_CODES: list[tuple[type[ModVfsError], int]] = [
    (ModNotFoundError, 404),
    (DuplicateIdError, 409),
    (EmptyManifestError, 400),
    (OrderMismatchError, 400),
    (HintResolutionFailedError, 502),
]


def init_engine() -> ModEngine:
    """Load the persisted registry and install the process-wide engine."""
    global _engine
    with Session(database.engine) as session:
        registry = load_registry(session)
    _engine = ModEngine(
        registry,
        fuzzy_name_matching=settings.fuzzy_name_matching,
        parallel_recompute=settings.parallel_recompute,
    )
    return _engine


def get_engine() -> ModEngine:
    if _engine is None:
        raise RuntimeError("Engine not initialised; the app lifespan has not run")
    return _engine


def get_advisor() -> RankingAdvisor:
    try:
        return build_advisor(settings)
    except ValueError as exc:
        raise HTTPException(503, f"Ranking advisor not configured: {exc}") from exc


def http_error(exc: ModVfsError) -> HTTPException:
    """Map an engine error to the matching HTTP status."""
    for cls, status in _STATUS_CODES:
        if isinstance(exc, cls):
            return HTTPException(status, str(exc))
    return HTTPException(500, str(exc))


def persist(engine: ModEngine, session: Session) -> None:
    """Save the registry after a mutation.

    If the write fails, the in-memory engine is ahead of storage; it is
    discarded and reloaded from the last committed state before answering 500.
    """
    try:
        save_registry(session, engine.registry)
    except SQLAlchemyError as exc:
        logger.error(
            "Persisting registry v%d failed; reloading last committed state", engine.version
        )
        init_engine()
        raise HTTPException(
            500, "Failed to persist the registry; the change was discarded"
        ) from exc
