"""The mod registry: the single owned, mutable source of truth.

Priorities are never stored on the records.  A mod's priority is its position
in ``_order``, which keeps them dense (``0..N-1``) by construction.  Every
successful mutation bumps ``version``; derived state (conflict graph, VFS map)
is computed from an immutable ``RegistrySnapshot`` tied to one version.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from modvfs.errors import (
    DuplicateIdError,
    EmptyManifestError,
    ModNotFoundError,
    OrderMismatchError,
)
from modvfs.schemas.mod import Mod, ModCreate
from modvfs.services.manifest_index import ManifestIndex, ManifestView

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable view of the registry at one version."""

    version: int
    mods: tuple[Mod, ...]
    by_id: Mapping[str, Mod]
    manifests: ManifestView

    def get(self, mod_id: str) -> Mod:
        try:
            return self.by_id[mod_id]
        except KeyError:
            raise ModNotFoundError(mod_id) from None

    @property
    def order(self) -> list[str]:
        return [m.id for m in self.mods]


class ModRegistry:
    def __init__(self) -> None:
        self._records: dict[str, ModCreate] = {}
        self._order: list[str] = []
        self._positions: dict[str, int] = {}
        self._identity_keys: dict[str, str] = {}
        self._index = ManifestIndex()
        self._version = 0
        self._snapshot: RegistrySnapshot | None = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    @property
    def index(self) -> ManifestIndex:
        return self._index

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, mod_id: object) -> bool:
        return mod_id in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._order))

    def get(self, mod_id: str) -> Mod:
        record = self._require(mod_id)
        return Mod(**record.model_dump(), priority=self._positions[mod_id])

    def ordered(self) -> list[Mod]:
        return [self.get(mod_id) for mod_id in self._order]

    def find_by_identity_key(self, identity_key: str) -> Mod | None:
        mod_id = self._identity_keys.get(identity_key)
        return self.get(mod_id) if mod_id is not None else None

    def paths_of(self, mod_id: str) -> frozenset[str]:
        self._require(mod_id)
        return self._index.paths_of(mod_id)

    def snapshot(self) -> RegistrySnapshot:
        """Return the immutable snapshot for the current version."""
        if self._snapshot is None or self._snapshot.version != self._version:
            mods = tuple(self.ordered())
            self._snapshot = RegistrySnapshot(
                version=self._version,
                mods=mods,
                by_id=MappingProxyType({m.id: m for m in mods}),
                manifests=self._index.freeze(),
            )
        return self._snapshot

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def register(self, mod: ModCreate) -> str:
        """Add a mod at the lowest-precedence end of the order (priority N)."""
        self._validate_new(mod)
        self._insert(mod)
        self._bump()
        logger.info("Registered mod '%s' at priority %d", mod.id, self._positions[mod.id])
        return mod.id

    def set_enabled(self, mod_id: str, enabled: bool) -> None:
        record = self._require(mod_id)
        if record.enabled == enabled:
            return
        self._records[mod_id] = record.model_copy(update={"enabled": enabled})
        self._bump()
        logger.info("Mod '%s' %s", mod_id, "enabled" if enabled else "disabled")

    def set_priority(self, mod_id: str, priority: int) -> None:
        """Move one mod to ``priority``, shifting the mods in between by one."""
        self._require(mod_id)
        if not 0 <= priority < len(self._order):
            raise OrderMismatchError(
                message=f"Priority {priority} is outside 0..{len(self._order) - 1}"
            )
        new_order = [m for m in self._order if m != mod_id]
        new_order.insert(priority, mod_id)
        self.reorder(new_order)

    def remove(self, mod_id: str) -> None:
        self._require(mod_id)
        self._delete(mod_id)
        self._reindex_positions()
        self._bump()
        logger.info("Removed mod '%s'", mod_id)

    def reorder(self, new_order: Sequence[str]) -> None:
        """Assign priorities ``0..N-1`` in the given sequence."""
        new_order = list(new_order)
        self._validate_permutation(new_order)
        if new_order == self._order:
            return
        self._order = new_order
        self._reindex_positions()
        self._bump()
        logger.info("Reordered %d mods", len(new_order))

    def replace(self, old_id: str, mod: ModCreate) -> str:
        """Swap ``old_id`` for ``mod`` in the same priority slot.

        Equivalent to removing ``old_id``, registering ``mod`` and moving it to
        the old slot, but validated up front and applied as one version.
        """
        old = self._require(old_id)
        self._validate_new(mod, replacing=old)
        slot = self._positions[old_id]
        self._delete(old_id)
        self._insert(mod)
        self._order.remove(mod.id)
        self._order.insert(slot, mod.id)
        self._reindex_positions()
        self._bump()
        logger.info("Replaced mod '%s' with '%s' at priority %d", old_id, mod.id, slot)
        return mod.id

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require(self, mod_id: str) -> ModCreate:
        try:
            return self._records[mod_id]
        except KeyError:
            raise ModNotFoundError(mod_id) from None

    def _validate_new(self, mod: ModCreate, replacing: ModCreate | None = None) -> None:
        if mod.id in self._records and (replacing is None or mod.id != replacing.id):
            raise DuplicateIdError(mod.id)
        if not mod.manifest:
            raise EmptyManifestError(mod.id)
        if mod.identity_key is not None:
            owner = self._identity_keys.get(mod.identity_key)
            if owner is not None and (replacing is None or owner != replacing.id):
                raise DuplicateIdError(mod.identity_key, field="identity key")

    def _validate_permutation(self, new_order: list[str]) -> None:
        counts = Counter(new_order)
        current = set(self._records)
        duplicates = [mod_id for mod_id, n in counts.items() if n > 1]
        missing = current - counts.keys()
        extra = counts.keys() - current
        if duplicates or missing or extra:
            raise OrderMismatchError(missing=missing, extra=extra, duplicates=duplicates)

    def _insert(self, mod: ModCreate) -> None:
        self._index.add(mod.id, mod.manifest)
        self._records[mod.id] = mod
        self._positions[mod.id] = len(self._order)
        self._order.append(mod.id)
        if mod.identity_key is not None:
            self._identity_keys[mod.identity_key] = mod.id

    def _delete(self, mod_id: str) -> None:
        record = self._records.pop(mod_id)
        self._index.discard(mod_id)
        self._order.remove(mod_id)
        del self._positions[mod_id]
        if record.identity_key is not None:
            self._identity_keys.pop(record.identity_key, None)

    def _reindex_positions(self) -> None:
        self._positions = {mod_id: i for i, mod_id in enumerate(self._order)}

    def _bump(self) -> None:
        self._version += 1
