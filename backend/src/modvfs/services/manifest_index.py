"""Per-mod path sets and the inverted path -> providers index.

The index is maintained incrementally as mods are registered and removed, at a
cost of O(|manifest|) per operation.  It also tracks which paths currently have
two or more providers, so the conflict pass only ever visits real collision
groups instead of comparing every pair of mods.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from modvfs.errors import ModNotFoundError
from modvfs.utils.paths import normalize_virtual_path


@dataclass(frozen=True)
class ManifestView:
    """Read-only copy of the index, taken for one registry version."""

    providers: Mapping[str, frozenset[str]]
    paths_by_mod: Mapping[str, frozenset[str]]
    collisions: frozenset[str]

    def mods_providing(self, path: str) -> frozenset[str]:
        return self.providers.get(normalize_virtual_path(path), frozenset())

    def paths_of(self, mod_id: str) -> frozenset[str]:
        try:
            return self.paths_by_mod[mod_id]
        except KeyError:
            raise ModNotFoundError(mod_id) from None


class ManifestIndex:
    def __init__(self) -> None:
        self._paths_by_mod: dict[str, frozenset[str]] = {}
        self._mods_by_path: dict[str, set[str]] = {}
        self._collisions: set[str] = set()
        self._frozen: ManifestView | None = None

    def __contains__(self, mod_id: object) -> bool:
        return mod_id in self._paths_by_mod

    def add(self, mod_id: str, paths: Iterable[str]) -> None:
        """Index a mod's manifest.  Paths must already be normalised."""
        if mod_id in self._paths_by_mod:
            raise ValueError(f"Mod '{mod_id}' is already indexed")
        manifest = frozenset(paths)
        self._paths_by_mod[mod_id] = manifest
        for path in manifest:
            providers = self._mods_by_path.setdefault(path, set())
            providers.add(mod_id)
            if len(providers) == 2:
                self._collisions.add(path)
        self._frozen = None

    def discard(self, mod_id: str) -> None:
        """Drop a mod from the index.  Unknown ids are ignored."""
        manifest = self._paths_by_mod.pop(mod_id, None)
        if manifest is None:
            return
        for path in manifest:
            providers = self._mods_by_path[path]
            providers.discard(mod_id)
            if not providers:
                del self._mods_by_path[path]
            if len(providers) < 2:
                self._collisions.discard(path)
        self._frozen = None

    def paths_of(self, mod_id: str) -> frozenset[str]:
        try:
            return self._paths_by_mod[mod_id]
        except KeyError:
            raise ModNotFoundError(mod_id) from None

    def mods_providing(self, path: str) -> frozenset[str]:
        return frozenset(self._mods_by_path.get(normalize_virtual_path(path), ()))

    def collision_paths(self) -> frozenset[str]:
        return frozenset(self._collisions)

    def freeze(self) -> ManifestView:
        """Return a read-only view; reused until the next add/discard."""
        if self._frozen is None:
            self._frozen = ManifestView(
                providers=MappingProxyType(
                    {path: frozenset(mods) for path, mods in self._mods_by_path.items()}
                ),
                paths_by_mod=MappingProxyType(dict(self._paths_by_mod)),
                collisions=frozenset(self._collisions),
            )
        return self._frozen
