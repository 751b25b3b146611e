from dataclasses import dataclass
from typing import Optional

from delve.config import env_overrides


@dataclass
class DungeonConfig:
    width: int = 80
    height: int = 43
    min_rooms: int = 8
    max_rooms: int = 30
    min_size: int = 6
    max_size: int = 10
    # None => target_rooms * 15
    max_attempts: Optional[int] = None
    brush_chance: float = 0.1
    monster_density: float = 1.0
    min_monsters_per_room: int = 0
    # None => dungeon-level transition table in spawn_service
    max_monsters_per_room: Optional[int] = None
    max_items_per_room: Optional[int] = None
    # chance each room wall cell is knocked through; 0 keeps rooms rectangular
    wall_burrow_chance: float = 0.0
    smooth_edges: bool = False
    seed: Optional[int] = None

    @classmethod
    def from_env(cls, prefix: str = "DELVE_DUNGEON_", **overrides) -> "DungeonConfig":
        """Build a config from ``DELVE_DUNGEON_<FIELD>`` variables; keyword overrides win."""
        values = env_overrides(cls, prefix)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


__all__ = ["DungeonConfig"]
