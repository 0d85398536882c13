"""Virtual file system resolution: which enabled mod provides each path.

The winner for a path is the enabled provider with the highest priority.
Priorities are unique, so there are no ties.  Paths whose providers are all
disabled are simply absent from the map.
"""

import logging
import time

from modvfs.schemas.vfs import FileStatus, ModFileEntry, ModFilesResult, ProviderEntry, VfsMap
from modvfs.services.registry import RegistrySnapshot

logger = logging.getLogger(__name__)


def _enabled_priorities(snapshot: RegistrySnapshot) -> dict[str, int]:
    return {m.id: m.priority for m in snapshot.mods if m.enabled}


def _winner(providers: frozenset[str], priorities: dict[str, int]) -> str | None:
    return max(
        (mod_id for mod_id in providers if mod_id in priorities),
        key=priorities.__getitem__,
        default=None,
    )


def resolve_vfs(snapshot: RegistrySnapshot) -> VfsMap:
    """Fold the ordered enabled mods into a sorted ``path -> mod id`` map."""
    start = time.perf_counter()
    priorities = _enabled_priorities(snapshot)
    entries: dict[str, str] = {}
    for path in sorted(snapshot.manifests.providers):
        winner = _winner(snapshot.manifests.providers[path], priorities)
        if winner is not None:
            entries[path] = winner

    logger.debug(
        "VFS v%d: %d of %d paths materialised in %.1fms",
        snapshot.version,
        len(entries),
        len(snapshot.manifests.providers),
        (time.perf_counter() - start) * 1000,
    )
    return VfsMap(version=snapshot.version, entries=entries)


def resolve_path(snapshot: RegistrySnapshot, path: str) -> str | None:
    """Return the id of the mod that currently provides ``path``, if any."""
    providers = snapshot.manifests.mods_providing(path)
    return _winner(providers, _enabled_priorities(snapshot))


def provider_history(snapshot: RegistrySnapshot, path: str) -> list[ProviderEntry]:
    """All providers of ``path`` ascending by priority.

    Disabled providers are included with ``enabled=False``; the winner is the
    last enabled entry.
    """
    providers = [snapshot.get(mod_id) for mod_id in snapshot.manifests.mods_providing(path)]
    providers.sort(key=lambda m: m.priority)
    return [ProviderEntry(mod_id=m.id, priority=m.priority, enabled=m.enabled) for m in providers]


def mod_files(snapshot: RegistrySnapshot, mod_id: str) -> ModFilesResult:
    """Per-path view of one mod's manifest: which of its files actually win."""
    mod = snapshot.get(mod_id)
    priorities = _enabled_priorities(snapshot)
    files: list[ModFileEntry] = []
    for path in sorted(snapshot.manifests.paths_of(mod_id)):
        winner = _winner(snapshot.manifests.providers[path], priorities)
        if not mod.enabled:
            status = FileStatus.INACTIVE
        elif winner == mod_id:
            status = FileStatus.WINNING
        else:
            status = FileStatus.OVERRIDDEN
        files.append(ModFileEntry(path=path, status=status, winner_id=winner))

    return ModFilesResult(
        mod_id=mod_id,
        files=files,
        winning_count=sum(1 for f in files if f.status == FileStatus.WINNING),
        overridden_count=sum(1 for f in files if f.status == FileStatus.OVERRIDDEN),
    )
