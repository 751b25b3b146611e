"""Public dungeon package interface."""

from .cells import Cell, Grid, OutOfBoundsError  # noqa: F401
from .config import DungeonConfig  # noqa: F401
from .generator import DungeonGenerationError, ItemSpawn, Level, MonsterSpawn, generate_level  # noqa: F401
from .rooms import Room  # noqa: F401
from .tiles import BRUSH, FLOOR, WALL  # noqa: F401

__all__ = [
    "Cell",
    "Grid",
    "OutOfBoundsError",
    "DungeonConfig",
    "DungeonGenerationError",
    "Level",
    "MonsterSpawn",
    "ItemSpawn",
    "generate_level",
    "Room",
    "BRUSH",
    "FLOOR",
    "WALL",
]
