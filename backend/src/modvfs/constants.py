from modvfs.schemas.mod import ModCategory

# Loading order by category for the built-in advisor.  Official content and
# patches load first; large environment overhauls load before the narrower
# texture replacers meant to override them; body meshes load before the skin
# textures layered over them.
DEFAULT_CATEGORY_RANKS: dict[str, int] = {
    ModCategory.DLC: 0,
    ModCategory.BUG_FIX: 1,
    ModCategory.MESH: 2,
    ModCategory.ENVIRONMENT: 3,
    ModCategory.TEXTURE: 4,
    ModCategory.SCRIPT: 5,
    ModCategory.OTHER: 6,
}

API_PREFIX = "/api/v1"
