"""Mod records as they enter the registry and as they are shown to callers."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from modvfs.schemas.conflicts import ConflictFlag
from modvfs.utils.paths import normalize_manifest


class ModCategory(StrEnum):
    DLC = "DLC"
    BUG_FIX = "BugFix"
    MESH = "Mesh"
    TEXTURE = "Texture"
    ENVIRONMENT = "Environment"
    SCRIPT = "Script"
    OTHER = "Other"


class ModCreate(BaseModel):
    """A mod as supplied to ``ModRegistry.register``.

    The manifest is normalised on construction; the registry rejects it if
    nothing is left.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    version: str = ""
    category: ModCategory = ModCategory.OTHER
    enabled: bool = True
    identity_key: str | None = None
    manifest: frozenset[str] = frozenset()

    @field_validator("manifest", mode="before")
    @classmethod
    def _normalise_manifest(cls, value: Iterable[str]) -> frozenset[str]:
        if isinstance(value, str):
            value = [value]
        return normalize_manifest(value)

    @field_serializer("manifest")
    def _sorted_manifest(self, manifest: frozenset[str]) -> list[str]:
        return sorted(manifest)


class Mod(ModCreate):
    """A registered mod with its current priority."""

    priority: int


class ModUpdate(BaseModel):
    enabled: bool | None = None
    priority: int | None = None


class ModListEntry(BaseModel):
    mod: Mod
    overwrites: list[str]
    overwritten_by: list[str]
    flag: ConflictFlag


class ModListResult(BaseModel):
    version: int
    mods: list[ModListEntry]
    active_count: int
    total_count: int
