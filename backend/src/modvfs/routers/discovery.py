from fastapi import APIRouter, Depends
from sqlmodel import Session

from modvfs.database import get_session
from modvfs.routers.deps import engine_lock, get_engine, persist
from modvfs.schemas.discovery import DiscoveredPackage, DiscoveryMergeResult
from modvfs.services.engine import ModEngine

router = APIRouter(prefix="/discovery", tags=["discovery"])


@router.post("/", response_model=DiscoveryMergeResult)
def merge(
    packages: list[DiscoveredPackage],
    engine: ModEngine = Depends(get_engine),
    session: Session = Depends(get_session),
) -> DiscoveryMergeResult:
    """Merge one scan's results, deduplicated by identity key."""
    with engine_lock:
        result = engine.merge_discovered(packages)
        if result.registered or result.replaced:
            persist(engine, session)
        return result
