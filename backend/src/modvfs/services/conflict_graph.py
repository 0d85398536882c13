import logging
import time
from collections import defaultdict
from itertools import combinations

from modvfs.schemas.conflicts import ConflictEdge, ConflictGraph, ModConflicts
from modvfs.services.registry import RegistrySnapshot

logger = logging.getLogger(__name__)


def build_conflict_graph(snapshot: RegistrySnapshot) -> ConflictGraph:
    """Build the pairwise overwrite graph across all enabled mods.

    Only paths with two or more providers are visited.  Disabled mods are
    dropped before grouping, so a path shared by one enabled and one disabled
    mod produces no edge at all.
    """
    start = time.perf_counter()
    priorities = {m.id: m.priority for m in snapshot.mods if m.enabled}
    providers = snapshot.manifests.providers

    # {(loser, winner): [shared paths]}
    edge_map: dict[tuple[str, str], list[str]] = defaultdict(list)
    for path in snapshot.manifests.collisions:
        enabled = sorted(
            (mod_id for mod_id in providers[path] if mod_id in priorities),
            key=priorities.__getitem__,
        )
        if len(enabled) < 2:
            continue
        # combinations() keeps input order, so each pair is (earlier, later)
        for loser, winner in combinations(enabled, 2):
            edge_map[(loser, winner)].append(path)

    overwrites: dict[str, set[str]] = defaultdict(set)
    overwritten_by: dict[str, set[str]] = defaultdict(set)
    edges: list[ConflictEdge] = []
    for (loser, winner), paths in sorted(
        edge_map.items(), key=lambda kv: (priorities[kv[0][0]], priorities[kv[0][1]])
    ):
        overwrites[winner].add(loser)
        overwritten_by[loser].add(winner)
        edges.append(
            ConflictEdge(
                loser_id=loser,
                winner_id=winner,
                shared_paths=sorted(paths),
                weight=len(paths),
            )
        )

    by_id = snapshot.by_id
    per_mod = {
        mod.id: ModConflicts(
            overwrites=sorted(overwrites[mod.id], key=lambda m: by_id[m].priority),
            overwritten_by=sorted(overwritten_by[mod.id], key=lambda m: by_id[m].priority),
        )
        for mod in snapshot.mods
    }

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.debug(
        "Conflict graph v%d: %d edges over %d collision paths in %.1fms",
        snapshot.version,
        len(edges),
        len(snapshot.manifests.collisions),
        elapsed_ms,
    )
    return ConflictGraph(
        version=snapshot.version,
        edges=edges,
        per_mod=per_mod,
        total_conflicts=sum(e.weight for e in edges),
    )
