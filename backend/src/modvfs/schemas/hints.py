"""Ranking hints supplied by an advisory collaborator."""

from __future__ import annotations

from collections import Counter
from typing import Annotated

from pydantic import BaseModel, StrictInt, StringConstraints, model_validator

HintKey = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class RankingHints(BaseModel):
    """Either an explicit order of mod keys, per-category ranks, or both.

    ``explicit_order`` entries are matched against mod ids first, identity keys
    second and, as a last resort, mod names.  ``category_ranks`` keys are
    category names (case-insensitive); lower ranks load earlier.
    """

    explicit_order: list[HintKey] | None = None
    category_ranks: dict[str, StrictInt] | None = None

    @model_validator(mode="after")
    def _require_mapping(self) -> RankingHints:
        if not self.explicit_order and not self.category_ranks:
            raise ValueError("Hints contain neither an explicit order nor category ranks")
        if self.explicit_order:
            duplicates = sorted(k for k, n in Counter(self.explicit_order).items() if n > 1)
            if duplicates:
                raise ValueError(f"Explicit order repeats entries: {duplicates}")
        return self
