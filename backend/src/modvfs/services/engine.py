"""ModEngine: owns the registry and serves derived state for one version at a time.

Derived state (conflict graph and VFS map) is recomputed from scratch whenever
the registry version changes, and both halves are always computed from the same
``RegistrySnapshot``.  Callers serialise mutations; the engine does no locking.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from modvfs.schemas.conflicts import ConflictGraph, ModConflicts
from modvfs.schemas.discovery import DiscoveredPackage, DiscoveryMergeResult
from modvfs.schemas.hints import RankingHints
from modvfs.schemas.load_order import ReorderResult
from modvfs.schemas.mod import Mod, ModCreate, ModListEntry, ModListResult
from modvfs.schemas.vfs import ModFilesResult, ProviderEntry, VfsMap
from modvfs.services.advisors.base import RankingAdvisor
from modvfs.services.conflict_graph import build_conflict_graph
from modvfs.services.discovery import merge_discovered
from modvfs.services.registry import ModRegistry, RegistrySnapshot
from modvfs.services.reorder import ReorderEngine
from modvfs.services.vfs import mod_files, provider_history, resolve_vfs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedState:
    snapshot: RegistrySnapshot
    conflicts: ConflictGraph
    vfs: VfsMap

    @property
    def version(self) -> int:
        return self.snapshot.version


def compute_derived(snapshot: RegistrySnapshot, *, parallel: bool = False) -> DerivedState:
    """Compute the conflict graph and VFS map for one snapshot."""
    if parallel:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="modvfs-derive") as pool:
            conflicts_future = pool.submit(build_conflict_graph, snapshot)
            vfs_future = pool.submit(resolve_vfs, snapshot)
            conflicts, vfs = conflicts_future.result(), vfs_future.result()
    else:
        conflicts = build_conflict_graph(snapshot)
        vfs = resolve_vfs(snapshot)
    return DerivedState(snapshot=snapshot, conflicts=conflicts, vfs=vfs)


class ModEngine:
    def __init__(
        self,
        registry: ModRegistry | None = None,
        *,
        fuzzy_name_matching: bool = True,
        parallel_recompute: bool = False,
    ) -> None:
        self._registry = registry if registry is not None else ModRegistry()
        self._reorder = ReorderEngine(self._registry, fuzzy_name_matching=fuzzy_name_matching)
        self._parallel = parallel_recompute
        self._derived: DerivedState | None = None

    @property
    def registry(self) -> ModRegistry:
        return self._registry

    @property
    def version(self) -> int:
        return self._registry.version

    def derived(self) -> DerivedState:
        snapshot = self._registry.snapshot()
        if self._derived is None or self._derived.version != snapshot.version:
            self._derived = compute_derived(snapshot, parallel=self._parallel)
            logger.debug("Recomputed derived state for registry v%d", snapshot.version)
        return self._derived

    # ------------------------------------------------------------------
    # Display queries
    # ------------------------------------------------------------------

    def list_mods_ordered(self, name_filter: str | None = None) -> ModListResult:
        """Mods in priority order with their overwrite relationships.

        ``name_filter`` narrows the listed entries by case-insensitive name
        substring; the counts always cover the whole registry.
        """
        state = self.derived()
        needle = name_filter.casefold() if name_filter else None
        entries: list[ModListEntry] = []
        for mod in state.snapshot.mods:
            if needle and needle not in mod.name.casefold():
                continue
            conflicts = state.conflicts.conflicts_of(mod.id)
            entries.append(
                ModListEntry(
                    mod=mod,
                    overwrites=conflicts.overwrites,
                    overwritten_by=conflicts.overwritten_by,
                    flag=conflicts.flag,
                )
            )
        return ModListResult(
            version=state.version,
            mods=entries,
            active_count=sum(1 for m in state.snapshot.mods if m.enabled),
            total_count=len(state.snapshot.mods),
        )

    def get_mod(self, mod_id: str) -> Mod:
        return self.derived().snapshot.get(mod_id)

    def conflicts_of(self, mod_id: str) -> ModConflicts:
        state = self.derived()
        state.snapshot.get(mod_id)  # raises ModNotFoundError
        return state.conflicts.conflicts_of(mod_id)

    def conflict_graph(self) -> ConflictGraph:
        return self.derived().conflicts

    def resolve_path(self, path: str) -> str | None:
        return self.derived().vfs.resolve(path)

    def vfs_snapshot(self) -> dict[str, str]:
        return dict(self.derived().vfs.entries)

    def provider_history(self, path: str) -> list[ProviderEntry]:
        return provider_history(self.derived().snapshot, path)

    def mod_files(self, mod_id: str) -> ModFilesResult:
        return mod_files(self.derived().snapshot, mod_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def register(self, mod: ModCreate) -> str:
        return self._registry.register(mod)

    def set_enabled(self, mod_id: str, enabled: bool) -> None:
        self._registry.set_enabled(mod_id, enabled)

    def set_priority(self, mod_id: str, priority: int) -> None:
        self._registry.set_priority(mod_id, priority)

    def remove(self, mod_id: str) -> None:
        self._registry.remove(mod_id)

    def reorder(self, new_order: Sequence[str]) -> None:
        self._registry.reorder(new_order)

    def apply_hints(self, hints: RankingHints) -> ReorderResult:
        return self._reorder.apply(hints)

    def sort_with(self, advisor: RankingAdvisor) -> ReorderResult:
        return self._reorder.sort_with(advisor)

    def merge_discovered(self, packages: Iterable[DiscoveredPackage]) -> DiscoveryMergeResult:
        return merge_discovered(self._registry, packages)
