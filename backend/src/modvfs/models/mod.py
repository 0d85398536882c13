"""Persisted registry records.

Only the registry itself is stored: one row per mod with its load-order
position, and one row per manifest path.  Conflicts and the VFS map are never
persisted; they are re-derived after every load.
"""

from sqlmodel import Field, Relationship, SQLModel


class ModRow(SQLModel, table=True):
    __tablename__ = "mods"

    id: str = Field(primary_key=True)
    position: int = Field(index=True)
    name: str
    version: str = ""
    category: str = "Other"
    enabled: bool = True
    identity_key: str | None = Field(default=None, index=True)

    paths: list["ModPathRow"] = Relationship(
        back_populates="mod",
        cascade_delete=True,
    )


class ModPathRow(SQLModel, table=True):
    __tablename__ = "mod_paths"

    id: int | None = Field(default=None, primary_key=True)
    mod_id: str = Field(foreign_key="mods.id", index=True)
    path: str

    mod: ModRow | None = Relationship(back_populates="paths")
