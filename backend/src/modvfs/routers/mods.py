import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session

from modvfs.database import get_session
from modvfs.errors import ModVfsError
from modvfs.routers.deps import engine_lock, get_engine, http_error, persist
from modvfs.schemas.conflicts import ModConflicts
from modvfs.schemas.mod import Mod, ModCreate, ModListEntry, ModListResult, ModUpdate
from modvfs.schemas.vfs import ModFilesResult
from modvfs.services.engine import ModEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mods", tags=["mods"])


@router.get("/", response_model=ModListResult)
def list_mods(
    filter: str | None = None,
    engine: ModEngine = Depends(get_engine),
) -> ModListResult:
    """Mods in load order with their overwrite relationships."""
    with engine_lock:
        return engine.list_mods_ordered(filter)


@router.post("/", response_model=Mod, status_code=201)
def register_mod(
    data: ModCreate,
    engine: ModEngine = Depends(get_engine),
    session: Session = Depends(get_session),
) -> Mod:
    with engine_lock:
        try:
            engine.register(data)
        except ModVfsError as exc:
            raise http_error(exc) from exc
        persist(engine, session)
        return engine.get_mod(data.id)


@router.get("/{mod_id}", response_model=ModListEntry)
def get_mod(mod_id: str, engine: ModEngine = Depends(get_engine)) -> ModListEntry:
    with engine_lock:
        try:
            mod = engine.get_mod(mod_id)
            conflicts = engine.conflicts_of(mod_id)
        except ModVfsError as exc:
            raise http_error(exc) from exc
    return ModListEntry(
        mod=mod,
        overwrites=conflicts.overwrites,
        overwritten_by=conflicts.overwritten_by,
        flag=conflicts.flag,
    )


@router.patch("/{mod_id}", response_model=Mod)
def update_mod(
    mod_id: str,
    data: ModUpdate,
    engine: ModEngine = Depends(get_engine),
    session: Session = Depends(get_session),
) -> Mod:
    """Enable/disable a mod and/or move it to a new priority."""
    if data.enabled is None and data.priority is None:
        raise HTTPException(400, "Nothing to update")
    with engine_lock:
        try:
            # priority first: it is the only part that can fail validation
            if data.priority is not None:
                engine.set_priority(mod_id, data.priority)
            if data.enabled is not None:
                engine.set_enabled(mod_id, data.enabled)
        except ModVfsError as exc:
            raise http_error(exc) from exc
        persist(engine, session)
        return engine.get_mod(mod_id)


@router.delete("/{mod_id}", status_code=204)
def remove_mod(
    mod_id: str,
    engine: ModEngine = Depends(get_engine),
    session: Session = Depends(get_session),
) -> Response:
    with engine_lock:
        try:
            engine.remove(mod_id)
        except ModVfsError as exc:
            raise http_error(exc) from exc
        persist(engine, session)
    return Response(status_code=204)


@router.get("/{mod_id}/files", response_model=ModFilesResult)
def mod_files(mod_id: str, engine: ModEngine = Depends(get_engine)) -> ModFilesResult:
    """The mod's manifest with the winning provider of each path."""
    with engine_lock:
        try:
            return engine.mod_files(mod_id)
        except ModVfsError as exc:
            raise http_error(exc) from exc


@router.get("/{mod_id}/conflicts", response_model=ModConflicts)
def mod_conflicts(mod_id: str, engine: ModEngine = Depends(get_engine)) -> ModConflicts:
    with engine_lock:
        try:
            return engine.conflicts_of(mod_id)
        except ModVfsError as exc:
            raise http_error(exc) from exc
