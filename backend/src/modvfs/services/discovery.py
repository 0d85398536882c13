"""Merge scanner results into the registry.

Scanners run independently and report the same packages on every pass, so
results are matched to registered mods by their stable identity key (install
path, ``name@version``, ...) instead of being appended blindly.
"""

import hashlib
import logging
from collections.abc import Iterable

from modvfs.errors import ModVfsError
from modvfs.schemas.discovery import (
    DiscoveredPackage,
    DiscoveryMergeResult,
    ReplacedMod,
    SkippedPackage,
)
from modvfs.schemas.mod import Mod, ModCreate
from modvfs.services.registry import ModRegistry
from modvfs.utils.paths import normalize_manifest

logger = logging.getLogger(__name__)


def package_mod_id(identity_key: str, version: str, manifest: frozenset[str]) -> str:
    """Deterministic id for a discovered package.

    Any change to the version or manifest yields a new id, matching the rule
    that a changed package is a new registration rather than an edit.
    """
    h = hashlib.sha1()
    h.update(identity_key.encode("utf-8"))
    h.update(b"\0")
    h.update(version.encode("utf-8"))
    for path in sorted(manifest):
        h.update(b"\0")
        h.update(path.encode("utf-8"))
    return h.hexdigest()[:16]


def _unchanged(existing: Mod, candidate: ModCreate) -> bool:
    return (
        existing.manifest == candidate.manifest
        and existing.version == candidate.version
        and existing.name == candidate.name
        and existing.category == candidate.category
    )


def merge_discovered(
    registry: ModRegistry,
    packages: Iterable[DiscoveredPackage],
) -> DiscoveryMergeResult:
    """Register new packages and replace changed ones in their existing slot.

    Each package is applied independently; a package that cannot be merged is
    reported in ``skipped`` and does not affect the others.
    """
    result = DiscoveryMergeResult()
    seen: set[str] = set()

    for pkg in packages:
        if pkg.identity_key in seen:
            result.skipped.append(
                SkippedPackage(
                    identity_key=pkg.identity_key,
                    name=pkg.name,
                    reason="duplicate identity key in this scan",
                )
            )
            continue
        seen.add(pkg.identity_key)

        manifest = normalize_manifest(pkg.manifest_paths)
        existing = registry.find_by_identity_key(pkg.identity_key)
        candidate = ModCreate(
            id=package_mod_id(pkg.identity_key, pkg.version, manifest),
            name=pkg.name,
            version=pkg.version,
            category=pkg.category,
            enabled=existing.enabled if existing is not None else True,
            identity_key=pkg.identity_key,
            manifest=manifest,
        )

        if existing is not None and _unchanged(existing, candidate):
            result.unchanged.append(existing.id)
            continue

        try:
            if existing is None:
                result.registered.append(registry.register(candidate))
            else:
                new_id = registry.replace(existing.id, candidate)
                result.replaced.append(
                    ReplacedMod(identity_key=pkg.identity_key, old_id=existing.id, new_id=new_id)
                )
        except ModVfsError as exc:
            logger.warning("Skipping discovered package '%s': %s", pkg.identity_key, exc)
            result.skipped.append(
                SkippedPackage(identity_key=pkg.identity_key, name=pkg.name, reason=str(exc))
            )

    logger.info(
        "Discovery merge: %d registered, %d replaced, %d unchanged, %d skipped",
        len(result.registered),
        len(result.replaced),
        len(result.unchanged),
        len(result.skipped),
    )
    return result
