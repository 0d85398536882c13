"""Response models for the derived conflict graph."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field, computed_field


class ConflictFlag(StrEnum):
    """Summary of a mod's conflict position, as shown next to it in a mod list."""

    NONE = "none"
    WINNER = "winner"
    LOSER = "loser"
    MIXED = "mixed"


class ConflictEdge(BaseModel):
    """``winner_id`` overwrites ``loser_id`` on every path in ``shared_paths``."""

    loser_id: str
    winner_id: str
    shared_paths: list[str]
    weight: int


class ModConflicts(BaseModel):
    overwrites: list[str] = Field(default_factory=list)
    overwritten_by: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def flag(self) -> ConflictFlag:
        if self.overwrites and self.overwritten_by:
            return ConflictFlag.MIXED
        if self.overwrites:
            return ConflictFlag.WINNER
        if self.overwritten_by:
            return ConflictFlag.LOSER
        return ConflictFlag.NONE


class ConflictGraph(BaseModel):
    version: int
    edges: list[ConflictEdge]
    per_mod: dict[str, ModConflicts]
    total_conflicts: int

    def conflicts_of(self, mod_id: str) -> ModConflicts:
        return self.per_mod.get(mod_id, ModConflicts())
