"""Schemas for load-order inspection and reordering."""

from pydantic import BaseModel


class LoadOrderResult(BaseModel):
    version: int
    order: list[str]


class ReorderRequest(BaseModel):
    order: list[str]


class ReorderResult(BaseModel):
    success: bool
    message: str
    changed: bool = False
    previous_order: list[str] = []
    order: list[str] = []
    moved: list[str] = []
    fuzzy_matches: dict[str, str] = {}
    unmatched_hints: list[str] = []
