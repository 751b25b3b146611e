import random
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from .cells import Grid
from .config import DungeonConfig
from .tiles import BRUSH, FLOOR


@dataclass
class Room:
    x1: int
    y1: int
    x2: int  # exclusive
    y2: int  # exclusive

    @classmethod
    def from_size(cls, x: int, y: int, w: int, h: int) -> "Room":
        return cls(x, y, x + w, y + h)

    @property
    def w(self) -> int:
        return self.x2 - self.x1

    @property
    def h(self) -> int:
        return self.y2 - self.y1

    @property
    def center(self) -> Tuple[int, int]:
        return ((self.x1 + self.x2) // 2, (self.y1 + self.y2) // 2)

    def cells(self) -> Iterator[Tuple[int, int]]:
        for ix in range(self.x1, self.x2):
            for iy in range(self.y1, self.y2):
                yield ix, iy

    def contains(self, x: int, y: int) -> bool:
        return self.x1 <= x < self.x2 and self.y1 <= y < self.y2

    def intersects(self, other: "Room", pad: int = 1) -> bool:
        return (
            self.x1 - pad < other.x2
            and self.x2 + pad > other.x1
            and self.y1 - pad < other.y2
            and self.y2 + pad > other.y1
        )


def fits(config: DungeonConfig) -> bool:
    """Whether a minimum-size room plus its wall border fits the grid at all."""
    return config.min_size >= 1 and config.min_size <= config.width - 2 and config.min_size <= config.height - 2


def sample_room(config: DungeonConfig, rng) -> Room:
    """Sample a room that leaves a one-cell wall border around the grid."""
    w = rng.randint(config.min_size, max(config.min_size, min(config.max_size, config.width - 2)))
    h = rng.randint(config.min_size, max(config.min_size, min(config.max_size, config.height - 2)))
    x = rng.randint(1, config.width - w - 1)
    y = rng.randint(1, config.height - h - 1)
    return Room.from_size(x, y, w, h)


def room_overlaps(room: Room, existing: List[Room], pad: int = 1) -> bool:
    return any(room.intersects(r, pad=pad) for r in existing)


def carve_room(grid: Grid, room: Room, rng=None, brush_chance: float = 0.0) -> None:
    """Carve the room interior to floor, sprinkling brush but never on the centre."""
    rng = rng or random
    center = room.center
    for ix, iy in room.cells():
        if brush_chance > 0 and (ix, iy) != center and rng.random() < brush_chance:
            grid.set_kind(ix, iy, BRUSH)
        else:
            grid.set_kind(ix, iy, FLOOR)


def wall_ring(grid: Grid, room: Room) -> List[Tuple[int, int]]:
    """Wall cells bordering the room's sides, corners and the grid edge excluded."""
    ring = []
    for ix in range(room.x1, room.x2):
        ring += [(ix, room.y1 - 1), (ix, room.y2)]
    for iy in range(room.y1, room.y2):
        ring += [(room.x1 - 1, iy), (room.x2, iy)]
    return [(x, y) for x, y in ring if 0 < x < grid.width - 1 and 0 < y < grid.height - 1]


def burrow_walls(grid: Grid, room: Room, rng, chance: float) -> int:
    """Knock random holes into the room's walls; returns how many cells opened."""
    if chance <= 0:
        return 0
    opened = 0
    for x, y in wall_ring(grid, room):
        if rng.random() < chance and grid.cell(x, y).blocked:
            grid.set_kind(x, y, FLOOR)
            opened += 1
    return opened


__all__ = ["Room", "sample_room", "room_overlaps", "carve_room", "fits", "wall_ring", "burrow_walls"]
