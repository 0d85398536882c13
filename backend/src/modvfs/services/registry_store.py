"""Save and load the registry as an ordered sequence of mod records.

Loading rebuilds the registry through ``register`` so the manifest index is
re-derived from the records.  Malformed records are reported as
``RegistryLoadError``; positions and manifests are never repaired silently.
"""

import logging
from collections import defaultdict

from pydantic import ValidationError
from sqlmodel import Session, select

from modvfs.errors import ModVfsError, RegistryLoadError
from modvfs.models.mod import ModPathRow, ModRow
from modvfs.schemas.mod import ModCategory, ModCreate
from modvfs.services.registry import ModRegistry
from modvfs.utils.paths import normalize_virtual_path

logger = logging.getLogger(__name__)


def save_registry(session: Session, registry: ModRegistry) -> int:
    """Replace the stored registry with the current one.  Returns rows written."""
    snapshot = registry.snapshot()
    try:
        for path_row in session.exec(select(ModPathRow)).all():
            session.delete(path_row)
        for mod_row in session.exec(select(ModRow)).all():
            session.delete(mod_row)
        session.flush()

        for mod in snapshot.mods:
            session.add(
                ModRow(
                    id=mod.id,
                    position=mod.priority,
                    name=mod.name,
                    version=mod.version,
                    category=mod.category.value,
                    enabled=mod.enabled,
                    identity_key=mod.identity_key,
                )
            )
        session.flush()
        for mod in snapshot.mods:
            for path in sorted(mod.manifest):
                session.add(ModPathRow(mod_id=mod.id, path=path))
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Failed to persist registry v%d", snapshot.version)
        raise

    logger.info("Persisted registry v%d (%d mods)", snapshot.version, len(snapshot.mods))
    return len(snapshot.mods)


def load_registry(session: Session) -> ModRegistry:
    """Rebuild a registry from stored records."""
    rows = session.exec(select(ModRow).order_by(ModRow.position)).all()  # type: ignore[arg-type]

    positions = [row.position for row in rows]
    if positions != list(range(len(rows))):
        raise RegistryLoadError(f"Stored positions are not dense 0..{len(rows) - 1}: {positions}")

    manifests: dict[str, set[str]] = defaultdict(set)
    for path_row in session.exec(select(ModPathRow)).all():
        manifests[path_row.mod_id].add(path_row.path)

    known_ids = {row.id for row in rows}
    orphans = sorted(set(manifests) - known_ids)
    if orphans:
        raise RegistryLoadError(f"Stored paths reference unknown mods: {orphans}")

    registry = ModRegistry()
    for row in rows:
        try:
            category = ModCategory(row.category)
        except ValueError:
            raise RegistryLoadError(
                f"Mod '{row.id}' has unknown category '{row.category}'"
            ) from None

        paths = manifests.get(row.id, set())
        if not paths:
            raise RegistryLoadError(f"Mod '{row.id}' has no stored manifest paths")
        unnormalised = sorted(p for p in paths if normalize_virtual_path(p) != p)
        if unnormalised:
            raise RegistryLoadError(f"Mod '{row.id}' has unnormalised paths: {unnormalised}")

        try:
            registry.register(
                ModCreate(
                    id=row.id,
                    name=row.name,
                    version=row.version,
                    category=category,
                    enabled=row.enabled,
                    identity_key=row.identity_key,
                    manifest=paths,
                )
            )
        except (ModVfsError, ValidationError) as exc:
            raise RegistryLoadError(f"Mod '{row.id}' could not be loaded: {exc}") from exc

    logger.info("Loaded %d mods from storage", len(registry))
    return registry
