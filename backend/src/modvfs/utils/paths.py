"""Virtual path normalisation.

Manifests arrive from scanners that may use Windows separators and mixed case
(``Textures\\Landscape\\Roads\\Road01_d.dds``).  Every path stored in the index
is normalised to lower-case, ``/``-separated and relative to the virtual root,
so ``Textures\\Foo.dds`` and ``textures/foo.dds`` collide as they would on the
case-insensitive game data directory.
"""

from collections.abc import Iterable


def normalize_virtual_path(path: str) -> str:
    """Normalise one virtual path.

    ``./Meshes\\Body.NIF`` -> ``meshes/body.nif``.  Returns ``""`` when
    nothing but separators or ``.`` segments remain.
    """
    segments = [s for s in path.replace("\\", "/").lower().split("/") if s and s != "."]
    return "/".join(segments)


def normalize_manifest(paths: Iterable[str]) -> frozenset[str]:
    """Normalise a manifest, discarding paths that normalise to nothing."""
    normalised = (normalize_virtual_path(p) for p in paths)
    return frozenset(p for p in normalised if p)
