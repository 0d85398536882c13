from pydantic import BaseModel, Field

from modvfs.schemas.mod import ModCategory


class DiscoveredPackage(BaseModel):
    """A package reported by a scanner.  Never carries a priority."""

    identity_key: str = Field(min_length=1)
    name: str
    version: str = ""
    category: ModCategory = ModCategory.OTHER
    manifest_paths: list[str]


class ReplacedMod(BaseModel):
    identity_key: str
    old_id: str
    new_id: str


class SkippedPackage(BaseModel):
    identity_key: str
    name: str
    reason: str


class DiscoveryMergeResult(BaseModel):
    registered: list[str] = []
    replaced: list[ReplacedMod] = []
    unchanged: list[str] = []
    skipped: list[SkippedPackage] = []
