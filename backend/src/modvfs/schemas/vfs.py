"""Response models for VFS resolution."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from modvfs.utils.paths import normalize_virtual_path


class ProviderEntry(BaseModel):
    mod_id: str
    priority: int
    enabled: bool


class VfsMap(BaseModel):
    version: int
    entries: dict[str, str]

    def resolve(self, path: str) -> str | None:
        return self.entries.get(normalize_virtual_path(path))


class FileStatus(StrEnum):
    WINNING = "winning"
    OVERRIDDEN = "overridden"
    INACTIVE = "inactive"


class ModFileEntry(BaseModel):
    path: str
    status: FileStatus
    winner_id: str | None = None


class ModFilesResult(BaseModel):
    mod_id: str
    files: list[ModFileEntry]
    winning_count: int
    overridden_count: int


class ResolveResult(BaseModel):
    path: str
    mod_id: str | None
