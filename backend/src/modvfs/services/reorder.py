"""Load-order recomputation from advisory ranking hints.

Hints come from an external advisor and may be partial: an explicit order that
mentions only some mods, per-category ranks, or both.  The new order is built by
a stable sort on ``(tier, rank, current priority)``:

* tier 0: mods placed by the explicit order, ranked by their position in it;
* tier 1: mods whose category has a rank;
* tier 2: everything else, ranked by current priority.

Because current priority is the final tie-break, mods the advisor did not
mention keep their relative order.  The result is applied through
``ModRegistry.reorder`` in one step, or not at all.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from modvfs.errors import HintResolutionFailedError, ModVfsError
from modvfs.schemas.hints import RankingHints
from modvfs.schemas.load_order import ReorderResult
from modvfs.schemas.mod import Mod
from modvfs.services.advisors.base import RankingAdvisor
from modvfs.services.registry import ModRegistry

logger = logging.getLogger(__name__)

_EXPLICIT = 0
_CATEGORY = 1
_UNRANKED = 2


@dataclass
class HintMatches:
    """How explicit-order entries were mapped onto registered mods."""

    positions: dict[str, int] = field(default_factory=dict)
    fuzzy: dict[str, str] = field(default_factory=dict)
    unmatched: list[str] = field(default_factory=list)


def _fuzzy_candidate(entry: str, mods: Sequence[Mod], taken: dict[str, int]) -> Mod | None:
    """Pick the mod whose name is contained in ``entry``.

    The longest matching name wins, so "Vivid Fallout - All in One" is not
    claimed by a shorter "Vivid" mod; ties go to the lower priority.
    """
    haystack = entry.casefold()
    candidates = [
        m
        for m in mods
        if m.id not in taken and m.name.strip() and m.name.casefold() in haystack
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda m: (len(m.name), -m.priority))


def match_explicit_order(
    mods: Sequence[Mod],
    explicit_order: Sequence[str],
    *,
    fuzzy: bool = True,
) -> HintMatches:
    """Map explicit-order entries to mod ids.

    Exact id and identity-key matches are resolved for every entry before any
    name matching is attempted, so a fuzzy match can never claim a mod that a
    later entry names exactly.
    """
    by_id = {m.id: m for m in mods}
    by_key = {m.identity_key: m for m in mods if m.identity_key}
    matches = HintMatches()
    pending: list[tuple[int, str]] = []

    for position, entry in enumerate(explicit_order):
        mod = by_id.get(entry) or by_key.get(entry)
        if mod is None:
            pending.append((position, entry))
            continue
        if mod.id in matches.positions:
            logger.warning("Hint '%s' resolves to already-placed mod '%s'; ignoring", entry, mod.id)
            continue
        matches.positions[mod.id] = position

    for position, entry in pending:
        mod = _fuzzy_candidate(entry, mods, matches.positions) if fuzzy else None
        if mod is None:
            logger.warning("Hint '%s' matches no registered mod; ignoring", entry)
            matches.unmatched.append(entry)
            continue
        logger.warning("Hint '%s' matched mod '%s' by name containment only", entry, mod.id)
        matches.positions[mod.id] = position
        matches.fuzzy[entry] = mod.id

    return matches


def compute_hinted_order(
    mods: Sequence[Mod],
    hints: RankingHints,
    *,
    fuzzy: bool = True,
) -> tuple[list[str], HintMatches]:
    """Return the new total order for ``mods`` (given in priority order).

    Raises ``HintResolutionFailedError`` when the hints recognise no mod at all.
    """
    matches = (
        match_explicit_order(mods, hints.explicit_order, fuzzy=fuzzy)
        if hints.explicit_order
        else HintMatches()
    )
    category_ranks = {k.casefold(): v for k, v in (hints.category_ranks or {}).items()}
    ranked = {m.category.value.casefold() for m in mods} & category_ranks.keys()
    if mods and not matches.positions and not ranked:
        raise HintResolutionFailedError(
            "Hints do not match any registered mod or category "
            f"({len(matches.unmatched)} explicit entries unmatched)"
        )

    def rank_key(mod: Mod) -> tuple[int, int, int]:
        if mod.id in matches.positions:
            return (_EXPLICIT, matches.positions[mod.id], mod.priority)
        rank = category_ranks.get(mod.category.value.casefold())
        if rank is not None:
            return (_CATEGORY, rank, mod.priority)
        return (_UNRANKED, mod.priority, mod.priority)

    ordered = sorted(mods, key=rank_key)
    return [m.id for m in ordered], matches


class ReorderEngine:
    def __init__(self, registry: ModRegistry, *, fuzzy_name_matching: bool = True) -> None:
        self._registry = registry
        self._fuzzy = fuzzy_name_matching

    def request_hints(self, advisor: RankingAdvisor) -> RankingHints:
        """Ask ``advisor`` for hints, turning any failure into ``HintResolutionFailedError``."""
        mods = self._registry.ordered()
        try:
            hints = advisor.suggest(mods)
        except HintResolutionFailedError:
            raise
        except ModVfsError as exc:
            raise HintResolutionFailedError(f"Advisor rejected the request: {exc}") from exc
        except Exception as exc:
            raise HintResolutionFailedError(f"Advisor failed: {exc}") from exc
        if not isinstance(hints, RankingHints):
            raise HintResolutionFailedError(
                f"Advisor returned {type(hints).__name__}, expected RankingHints"
            )
        return hints

    def apply(self, hints: RankingHints) -> ReorderResult:
        mods = self._registry.ordered()
        previous = [m.id for m in mods]
        order, matches = compute_hinted_order(mods, hints, fuzzy=self._fuzzy)
        self._registry.reorder(order)

        moved = [mod_id for i, mod_id in enumerate(order) if previous[i] != mod_id]
        changed = order != previous
        logger.info(
            "Applied ranking hints: %d placed explicitly, %d moved, %d hints unmatched",
            len(matches.positions),
            len(moved),
            len(matches.unmatched),
        )
        return ReorderResult(
            success=True,
            message=(
                f"Load order sorted: {len(moved)} mod(s) changed position"
                if changed
                else "Load order already matches the hints"
            ),
            changed=changed,
            previous_order=previous,
            order=order,
            moved=moved,
            fuzzy_matches=matches.fuzzy,
            unmatched_hints=matches.unmatched,
        )

    def sort_with(self, advisor: RankingAdvisor) -> ReorderResult:
        """Fetch hints and apply them.  On failure the registry is untouched."""
        hints = self.request_hints(advisor)
        return self.apply(hints)
