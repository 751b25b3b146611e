"""Level generation: room scatter, tunnel carving and spawn placement.

Phases, in order:
    * Fill the grid with walls.
    * Pick a target room count and scatter rooms, rejecting any candidate that
      touches an accepted room (1-cell padding). The attempt budget is capped so
      generation always terminates; hitting the cap keeps whatever was placed.
    * Carve each accepted room, optionally burrow holes into its walls, and join
      it to the previous room's centre with an L-shaped tunnel.
    * Optionally relax rough edges: interior wall cells with fewer than five
      sight-blocking walls in their 3x3 neighbourhood become floor.
    * First room centre is the player start, last room centre holds the stairs
      down, and rooms after the first receive monster spawns. Every room may
      receive floor items.

Zero rooms is a configuration error (dimensions too small) and raises
``DungeonGenerationError``. A single room is a valid level with no tunnels and
no stairs.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from delve.logging_utils import get_logger
from delve.services.spawn_service import choose_item_template, choose_template, max_items_for, max_monsters_for

from .cells import Coord2D, Grid
from .config import DungeonConfig
from .metrics import init_metrics
from .rooms import Room, burrow_walls, carve_room, fits, room_overlaps, sample_room
from .tiles import BRUSH, FLOOR, WALL
from .tunnels import carve_l_tunnel

logger = get_logger("delve.dungeon")

ATTEMPTS_PER_ROOM = 15
# relax_rough_edges opens a wall with fewer blocking neighbours than this
RELAX_WALL_THRESHOLD = 5


class DungeonGenerationError(ValueError):
    """Raised when not even one room can be placed."""


@dataclass(frozen=True)
class MonsterSpawn:
    x: int
    y: int
    template: str
    room_index: int


@dataclass(frozen=True)
class ItemSpawn:
    x: int
    y: int
    template: str
    room_index: int


@dataclass
class Level:
    grid: Grid
    rooms: List[Room]
    player_start: Coord2D
    stairs: Optional[Coord2D]
    spawns: List[MonsterSpawn] = field(default_factory=list)
    dungeon_level: int = 1
    seed: Optional[int] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
    items: List[ItemSpawn] = field(default_factory=list)

    @property
    def centers(self) -> List[Coord2D]:
        return [r.center for r in self.rooms]


def place_rooms(grid: Grid, config: DungeonConfig, rng, metrics: Dict[str, Any]) -> List[Room]:
    """Scatter non-overlapping rooms, carving each and tunnelling to its predecessor."""
    target = rng.randint(config.min_rooms, config.max_rooms)
    budget = config.max_attempts if config.max_attempts is not None else target * ATTEMPTS_PER_ROOM
    metrics["target_rooms"] = target
    rooms: List[Room] = []
    attempts = 0
    while len(rooms) < target and attempts < budget:
        attempts += 1
        candidate = sample_room(config, rng)
        if room_overlaps(candidate, rooms, pad=1):
            metrics["rejected"] += 1
            continue
        carve_room(grid, candidate, rng, config.brush_chance)
        metrics["burrowed"] += burrow_walls(grid, candidate, rng, config.wall_burrow_chance)
        if rooms:
            carve_l_tunnel(grid, rooms[-1].center, candidate.center, rng)
            metrics["tunnels"] += 1
        rooms.append(candidate)
    metrics["attempts"] = attempts
    if rooms and len(rooms) < target:
        logger.warn(event="room_cap_hit", target=target, placed=len(rooms), attempts=attempts)
    return rooms


def relax_rough_edges(grid: Grid) -> int:
    """Open interior walls that are mostly surrounded by open cells.

    Runs in place from the top-left, so a cell opened earlier counts as open
    for its later neighbours. The two outermost rings are never touched.
    """
    opened = 0
    for x in range(2, grid.width - 2):
        for y in range(2, grid.height - 2):
            if not grid.cells[x][y].blocked:
                continue
            walls = 0
            for nx in range(x - 1, x + 2):
                for ny in range(y - 1, y + 2):
                    c = grid.cells[nx][ny]
                    if c.blocked and c.block_sight:
                        walls += 1
            if walls < RELAX_WALL_THRESHOLD:
                grid.set_kind(x, y, FLOOR)
                opened += 1
    return opened


def place_monsters(
    grid: Grid, rooms: List[Room], config: DungeonConfig, rng, dungeon_level: int
) -> List[MonsterSpawn]:
    """One batch per room after the first; first monster at the centre, the rest on free interior cells."""
    max_per_room = config.max_monsters_per_room
    if max_per_room is None:
        max_per_room = max_monsters_for(dungeon_level)
    low = min(config.min_monsters_per_room, max_per_room)
    spawns: List[MonsterSpawn] = []
    for index, room in enumerate(rooms[1:], start=1):
        if rng.random() >= config.monster_density:
            continue
        count = rng.randint(low, max_per_room)
        taken = set()
        for n in range(count):
            if n == 0:
                pos = room.center
            else:
                free = [c for c in room.cells() if c not in taken and grid.is_walkable(*c)]
                if not free:
                    break
                pos = rng.choice(free)
            taken.add(pos)
            template = choose_template(dungeon_level, rng)
            spawns.append(MonsterSpawn(pos[0], pos[1], template.slug, index))
    return spawns


def place_items(
    grid: Grid, rooms: List[Room], config: DungeonConfig, rng, dungeon_level: int,
    monsters: Sequence[MonsterSpawn] = (),
) -> List[ItemSpawn]:
    """Up to ``max_items`` per room, each on a random interior cell.

    A pick that lands on a wall, a monster spawn or another item is dropped,
    not retried, so crowded rooms simply get fewer items.
    """
    max_per_room = config.max_items_per_room
    if max_per_room is None:
        max_per_room = max_items_for(dungeon_level)
    taken = {(m.x, m.y) for m in monsters}
    items: List[ItemSpawn] = []
    for index, room in enumerate(rooms):
        count = rng.randint(0, max_per_room) if max_per_room > 0 else 0
        for _ in range(count):
            x = rng.randrange(room.x1, room.x2)
            y = rng.randrange(room.y1, room.y2)
            if not grid.is_walkable(x, y) or (x, y) in taken:
                continue
            taken.add((x, y))
            template = choose_item_template(dungeon_level, rng)
            items.append(ItemSpawn(x, y, template.slug, index))
    return items


def generate_level(
    config: Optional[DungeonConfig] = None, rng: Optional[random.Random] = None, dungeon_level: int = 1
) -> Level:
    config = config or DungeonConfig()
    if rng is None:
        if config.seed is None:
            # the caller's config is left untouched; the chosen seed lands on Level.seed
            config = replace(config, seed=random.randint(0, 2**31 - 1))
        rng = random.Random(config.seed)
    if not fits(config):
        raise DungeonGenerationError(
            f"{config.width}x{config.height} grid cannot hold a {config.min_size}x{config.min_size} room"
        )
    start = time.perf_counter()
    metrics = init_metrics()
    grid = Grid(config.width, config.height, fill=WALL)
    rooms = place_rooms(grid, config, rng, metrics)
    if not rooms:
        raise DungeonGenerationError(f"No rooms placed after {metrics['attempts']} attempts")
    if config.smooth_edges:
        metrics["relaxed"] = relax_rough_edges(grid)
    spawns = place_monsters(grid, rooms, config, rng, dungeon_level)
    items = place_items(grid, rooms, config, rng, dungeon_level, spawns)
    stairs = rooms[-1].center if len(rooms) > 1 else None
    metrics["rooms"] = len(rooms)
    metrics["monsters"] = len(spawns)
    metrics["items"] = len(items)
    metrics["tiles_floor"] = grid.count(FLOOR)
    metrics["tiles_brush"] = grid.count(BRUSH)
    metrics["tiles_wall"] = grid.count(WALL)
    metrics["runtime_ms"] = round((time.perf_counter() - start) * 1000, 3)
    logger.debug(
        event="level_generated",
        seed=config.seed,
        dungeon_level=dungeon_level,
        rooms=metrics["rooms"],
        target=metrics["target_rooms"],
        monsters=metrics["monsters"],
        items=metrics["items"],
        runtime_ms=metrics["runtime_ms"],
    )
    return Level(
        grid=grid,
        rooms=rooms,
        player_start=rooms[0].center,
        stairs=stairs,
        spawns=spawns,
        dungeon_level=dungeon_level,
        seed=config.seed,
        metrics=metrics,
        items=items,
    )


__all__ = [
    "DungeonGenerationError",
    "Level",
    "MonsterSpawn",
    "ItemSpawn",
    "generate_level",
    "place_rooms",
    "place_monsters",
    "place_items",
    "relax_rough_edges",
]
