"""Error taxonomy for registry mutations, hint resolution and persisted state.

Every error is local and recoverable: the operation that raised it has left the
registry, index and derived state exactly as they were before the call.
"""

from __future__ import annotations

from collections.abc import Iterable


class ModVfsError(Exception):
    """Base class for all engine errors."""


class DuplicateIdError(ModVfsError):
    def __init__(self, mod_id: str, *, field: str = "id") -> None:
        self.mod_id = mod_id
        self.field = field
        super().__init__(f"Mod {field} '{mod_id}' is already registered")


class EmptyManifestError(ModVfsError):
    def __init__(self, mod_id: str) -> None:
        self.mod_id = mod_id
        super().__init__(f"Mod '{mod_id}' has an empty manifest")


class ModNotFoundError(ModVfsError):
    def __init__(self, mod_id: str) -> None:
        self.mod_id = mod_id
        super().__init__(f"Mod '{mod_id}' not found")


class OrderMismatchError(ModVfsError):
    """The requested order is not a permutation of the registered ids."""

    def __init__(
        self,
        *,
        missing: Iterable[str] = (),
        extra: Iterable[str] = (),
        duplicates: Iterable[str] = (),
        message: str | None = None,
    ) -> None:
        self.missing = sorted(missing)
        self.extra = sorted(extra)
        self.duplicates = sorted(duplicates)
        if message is None:
            parts = []
            if self.missing:
                parts.append(f"missing={self.missing}")
            if self.extra:
                parts.append(f"extra={self.extra}")
            if self.duplicates:
                parts.append(f"duplicates={self.duplicates}")
            message = "Order is not a permutation of registered mods (" + ", ".join(parts) + ")"
        super().__init__(message)


class HintResolutionFailedError(ModVfsError):
    """The ranking advisor was unreachable or returned unusable hints."""


class RegistryLoadError(ModVfsError):
    """Persisted registry records are malformed and cannot be loaded."""
