"""Advisor protocol, registry, and the built-in offline advisors.

An advisor looks at the current mods and suggests ranking hints.  Advisors are
black boxes to the engine: they may be slow or fail, and whatever they return is
validated before any reorder is applied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Protocol

from modvfs.config import Settings
from modvfs.constants import DEFAULT_CATEGORY_RANKS
from modvfs.schemas.hints import RankingHints
from modvfs.schemas.mod import Mod

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Protocol + Registry
# ---------------------------------------------------------------------------


class RankingAdvisor(Protocol):
    """Interface that all ranking advisors must satisfy."""

    name: str

    def suggest(self, mods: Sequence[Mod]) -> RankingHints: ...


AdvisorFactory = Callable[[Settings], RankingAdvisor]

_ADVISORS: dict[str, AdvisorFactory] = {}


def register_advisor(name: str) -> Callable[[AdvisorFactory], AdvisorFactory]:
    """Decorator that makes a factory selectable by ``Settings.advisor``."""

    def decorator(factory: AdvisorFactory) -> AdvisorFactory:
        _ADVISORS[name] = factory
        return factory

    return decorator


def available_advisors() -> list[str]:
    return sorted(_ADVISORS)


def build_advisor(settings: Settings) -> RankingAdvisor:
    """Instantiate the advisor named by ``settings.advisor``."""
    try:
        factory = _ADVISORS[settings.advisor]
    except KeyError:
        raise ValueError(
            f"Unknown advisor '{settings.advisor}' (available: {available_advisors()})"
        ) from None
    return factory(settings)


# ---------------------------------------------------------------------------
# Built-in advisors
# ---------------------------------------------------------------------------


class CategoryRankingAdvisor:
    """Ranks mods by category only, using a fixed table."""

    name = "category"

    def __init__(self, ranks: Mapping[str, int] | None = None) -> None:
        self._ranks = dict(ranks if ranks is not None else DEFAULT_CATEGORY_RANKS)

    def suggest(self, mods: Sequence[Mod]) -> RankingHints:
        return RankingHints(category_ranks=self._ranks)


class StaticOrderAdvisor:
    """Replays a fixed explicit order, e.g. one imported from another tool."""

    name = "static"

    def __init__(self, order: Sequence[str]) -> None:
        self._order = list(order)

    def suggest(self, mods: Sequence[Mod]) -> RankingHints:
        return RankingHints(explicit_order=self._order)


@register_advisor("category")
def _category_advisor(settings: Settings) -> RankingAdvisor:
    return CategoryRankingAdvisor()
