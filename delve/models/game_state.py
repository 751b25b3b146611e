"""
project: Delve
module: models/game_state.py
License: MIT

The ``GameState`` aggregate: everything a turn reads or mutates.

One object owns the grid, the entity and item stores, the current visibility
set, the message log and the RNG. The turn scheduler holds it for the duration
of a turn and passes it explicitly into every service call; nothing in the
package keeps game state in module globals.

Seeding: a single base seed drives the whole run. Each dungeon level is
generated from a sub-seed derived from the base seed and the level number, and
simulation randomness (damage variance, wandering) comes from a separate
derived stream, so generating a level never shifts the combat dice and vice
versa.
"""

from __future__ import annotations

import random
import zlib
from collections import deque
from dataclasses import replace
from typing import Deque, Optional

from delve.config import SimConfig
from delve.dungeon.cells import Grid
from delve.dungeon.config import DungeonConfig
from delve.dungeon.generator import Level, generate_level
from delve.services.spawn_service import get_item_template, get_template

from .entities import Entity, EntityStore, MonsterKind
from .items import Item, ItemStore
from .snapshot import CellView, EntityView, FrameSnapshot, ItemView


def derive_seed(base_seed: int, tag: str) -> int:
    # crc32 rather than hash(): str hashing is randomized per process
    crc = zlib.crc32(tag.encode("utf-8")) & 0xFFFFFFFF
    return (int(base_seed) ^ crc) & 0xFFFFFFFF


class GameState:
    def __init__(
        self,
        level: Level,
        sim_config: Optional[SimConfig] = None,
        dungeon_config: Optional[DungeonConfig] = None,
        seed: Optional[int] = None,
        entities: Optional[EntityStore] = None,
        items: Optional[ItemStore] = None,
    ):
        # stores define __len__, so an empty one is falsy: compare against None
        self.sim_config = sim_config if sim_config is not None else SimConfig()
        if dungeon_config is None:
            dungeon_config = DungeonConfig(width=level.grid.width, height=level.grid.height)
        self.dungeon_config = dungeon_config
        self.seed = seed if seed is not None else (level.seed if level.seed is not None else 0)
        self.rng = random.Random(derive_seed(self.seed, "sim"))
        self.messages: Deque[str] = deque(maxlen=self.sim_config.message_log_limit)
        self.turn = 0
        self.visible: frozenset = frozenset()
        self.entities = entities if entities is not None else EntityStore()
        self.items = items if items is not None else ItemStore()
        self.level = level
        if not any(e.is_player for e in self.entities):
            sx, sy = level.player_start
            cfg = self.sim_config
            self.entities.add_player(sx, sy, hp=cfg.player_hp, power=cfg.player_power, defense=cfg.player_defense)
        self._populate(level)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def new(
        cls,
        seed: Optional[int] = None,
        dungeon_config: Optional[DungeonConfig] = None,
        sim_config: Optional[SimConfig] = None,
    ) -> "GameState":
        """Generate dungeon level 1 from ``seed`` and populate it."""
        if dungeon_config is None:
            dungeon_config = DungeonConfig()
        if seed is None:
            seed = dungeon_config.seed if dungeon_config.seed is not None else random.randint(0, 2**31 - 1)
        level = generate_level(
            replace(dungeon_config, seed=seed), rng=random.Random(derive_seed(seed, "level:1")), dungeon_level=1
        )
        state = cls(level, sim_config=sim_config, dungeon_config=dungeon_config, seed=seed)
        state.add_message("Welcome, stranger! Prepare to perish in the depths.")
        return state

    def _populate(self, level: Level) -> None:
        for spawn in level.spawns:
            if self.entities.entity_at(spawn.x, spawn.y) is not None:
                continue
            self.entities.add_monster(get_template(spawn.template), spawn.x, spawn.y)
        for spawn in level.items:
            self.items.add(get_item_template(spawn.template), spawn.x, spawn.y)

    def descend(self) -> Level:
        """Replace the level with the next one down.

        The player and the pack carry over; monsters and floor items do not.
        """
        next_depth = self.dungeon_level + 1
        level = generate_level(
            replace(self.dungeon_config, seed=self.seed),
            rng=random.Random(derive_seed(self.seed, f"level:{next_depth}")),
            dungeon_level=next_depth,
        )
        self.entities.clear_monsters()
        self.items.clear_floor()
        self.level = level
        self.visible = frozenset()
        self.player.move_to(*level.player_start)
        self._populate(level)
        return level

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def grid(self) -> Grid:
        return self.level.grid

    @property
    def dungeon_level(self) -> int:
        return self.level.dungeon_level

    @property
    def stairs(self):
        return self.level.stairs

    @property
    def player(self) -> Entity:
        return self.entities.player

    @property
    def game_over(self) -> bool:
        return not self.player.alive

    def add_message(self, text: str) -> None:
        self.messages.append(text)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------
    def snapshot(self, message_count: int = 5) -> FrameSnapshot:
        grid = self.grid
        visible = self.visible
        cells = tuple(
            tuple(
                CellView(kind=c.kind, explored=c.explored, visible=(x, y) in visible)
                for y, c in enumerate(column)
            )
            for x, column in enumerate(grid.cells)
        )
        alive = tuple(_entity_view(e) for e in self.entities if e.alive)
        remains = tuple(_entity_view(e) for e in self.entities.remains())
        recent = tuple(self.messages)[-message_count:] if message_count else ()
        return FrameSnapshot(
            turn=self.turn,
            dungeon_level=self.dungeon_level,
            width=grid.width,
            height=grid.height,
            cells=cells,
            entities=alive,
            remains=remains,
            visible=visible,
            stairs=self.stairs,
            messages=recent,
            game_over=self.game_over,
            items=tuple(_item_view(i) for i in self.items.floor),
            inventory=tuple(_item_view(i) for i in self.items.inventory),
        )


def _entity_view(e: Entity) -> EntityView:
    behavior = e.kind.behavior.value if isinstance(e.kind, MonsterKind) else None
    return EntityView(
        id=e.id,
        name=e.name,
        x=e.x,
        y=e.y,
        glyph=e.glyph,
        color=e.color,
        hp=e.hp,
        max_hp=e.max_hp,
        is_player=e.is_player,
        behavior=behavior,
    )


def _item_view(i: Item) -> ItemView:
    return ItemView(
        id=i.id,
        name=i.name,
        glyph=i.glyph,
        color=i.color,
        x=i.x,
        y=i.y,
        equipped=bool(i.equipment and i.equipment.equipped),
    )


__all__ = ["GameState", "derive_seed"]
