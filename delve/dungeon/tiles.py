# Terrain kinds centralized for modular imports
WALL = "wall"
FLOOR = "floor"
BRUSH = "brush"  # walkable undergrowth that blocks line of sight

# kind -> (blocked, block_sight)
TERRAIN_FLAGS = {
    WALL: (True, True),
    FLOOR: (False, False),
    BRUSH: (False, True),
}

TERRAIN_CHARS = {
    WALL: "#",
    FLOOR: ".",
    BRUSH: '"',
}


def kind_to_char(kind: str) -> str:
    return TERRAIN_CHARS.get(kind, "?")


__all__ = ["WALL", "FLOOR", "BRUSH", "TERRAIN_FLAGS", "TERRAIN_CHARS", "kind_to_char"]
