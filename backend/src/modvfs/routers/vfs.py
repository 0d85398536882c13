from fastapi import APIRouter, Depends, Query

from modvfs.routers.deps import engine_lock, get_engine
from modvfs.schemas.conflicts import ConflictGraph
from modvfs.schemas.vfs import ProviderEntry, ResolveResult, VfsMap
from modvfs.services.engine import ModEngine
from modvfs.utils.paths import normalize_virtual_path

router = APIRouter(prefix="/vfs", tags=["vfs"])


@router.get("/", response_model=VfsMap)
def vfs_snapshot(engine: ModEngine = Depends(get_engine)) -> VfsMap:
    with engine_lock:
        return engine.derived().vfs


@router.get("/resolve", response_model=ResolveResult)
def resolve(
    path: str = Query(min_length=1),
    engine: ModEngine = Depends(get_engine),
) -> ResolveResult:
    with engine_lock:
        return ResolveResult(path=normalize_virtual_path(path), mod_id=engine.resolve_path(path))


@router.get("/history", response_model=list[ProviderEntry])
def history(
    path: str = Query(min_length=1),
    engine: ModEngine = Depends(get_engine),
) -> list[ProviderEntry]:
    """Every provider of ``path``, lowest priority first."""
    with engine_lock:
        return engine.provider_history(path)


@router.get("/conflicts", response_model=ConflictGraph)
def conflicts(engine: ModEngine = Depends(get_engine)) -> ConflictGraph:
    with engine_lock:
        return engine.conflict_graph()
