"""Entity records and the store that owns them.

Entities are plain records; behaviour lives in the services. What an entity is
is expressed by its ``kind`` (``PlayerKind`` or ``MonsterKind``), a tagged
variant the turn scheduler branches on rather than a class hierarchy.

The ``EntityStore`` is the only owner of entity objects. Everything else refers
to entities by id. Iteration order is insertion order and is never re-sorted,
which is what makes monster turn order reproducible. Dead entities stay in the
store (their remains still need drawing) but drop out of ``alive_monsters`` and
``blocking_positions``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

Coord2D = Tuple[int, int]

CORPSE_GLYPH = "%"
CORPSE_COLOR = "dark_red"


class BehaviorState(str, Enum):
    IDLE = "idle"
    HOSTILE = "hostile"
    CONFUSED = "confused"


@dataclass
class PlayerKind:
    pass


@dataclass
class MonsterKind:
    template: str
    behavior: BehaviorState = BehaviorState.IDLE
    # Set the first time an idle wander step is taken; wandering stays near it.
    wander_origin: Optional[Coord2D] = None
    # stumbling turns left while CONFUSED, and the state to return to afterwards
    confused_turns: int = 0
    previous_behavior: Optional[BehaviorState] = None

    @property
    def confused(self) -> bool:
        return self.behavior is BehaviorState.CONFUSED


EntityKind = Union[PlayerKind, MonsterKind]


@dataclass
class Entity:
    id: int
    name: str
    x: int
    y: int
    glyph: str
    color: str
    hp: int
    max_hp: int
    power: int
    defense: int
    kind: EntityKind = field(default_factory=PlayerKind)
    xp: int = 0
    level: int = 1
    alive: bool = True

    @property
    def pos(self) -> Coord2D:
        return (self.x, self.y)

    @property
    def is_player(self) -> bool:
        return isinstance(self.kind, PlayerKind)

    @property
    def blocks(self) -> bool:
        return self.alive

    def move_to(self, x: int, y: int) -> None:
        self.x, self.y = x, y

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "alive": self.alive,
            "player": self.is_player,
        }


class EntityStore:
    def __init__(self):
        self._entities: Dict[int, Entity] = {}
        self._next_id = 0
        self._player_id: Optional[int] = None

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    def __contains__(self, entity_id: int) -> bool:
        return entity_id in self._entities

    def _add(self, **attrs) -> Entity:
        entity = Entity(id=self._next_id, **attrs)
        self._entities[entity.id] = entity
        self._next_id += 1
        return entity

    def add_player(self, x: int, y: int, hp: int, power: int, defense: int, name: str = "player") -> Entity:
        if self._player_id is not None:
            raise ValueError("Entity store already has a player")
        player = self._add(
            name=name, x=x, y=y, glyph="@", color="white",
            hp=hp, max_hp=hp, power=power, defense=defense, kind=PlayerKind(),
        )
        self._player_id = player.id
        return player

    def add_monster(self, template, x: int, y: int) -> Entity:
        """Spawn hook: create a monster from a ``MonsterTemplate`` at ``(x, y)``."""
        return self._add(
            name=template.name, x=x, y=y, glyph=template.glyph, color=template.color,
            hp=template.hp, max_hp=template.hp, power=template.power, defense=template.defense,
            xp=template.xp, kind=MonsterKind(template=template.slug),
        )

    def get(self, entity_id: int) -> Entity:
        try:
            return self._entities[entity_id]
        except KeyError:
            raise KeyError(f"No entity with id {entity_id}") from None

    @property
    def player(self) -> Entity:
        if self._player_id is None:
            raise LookupError("Entity store has no player")
        return self._entities[self._player_id]

    def alive_monsters(self) -> List[Entity]:
        return [e for e in self._entities.values() if e.alive and not e.is_player]

    def monster_ids(self) -> List[int]:
        return [e.id for e in self._entities.values() if not e.is_player]

    def living_monsters(self) -> Iterator[Entity]:
        """Monsters in insertion order, each checked for life at the moment it is yielded.

        A monster killed while an earlier one was being handled is never yielded.
        """
        for entity_id in self.monster_ids():
            entity = self._entities.get(entity_id)
            if entity is not None and entity.alive:
                yield entity

    def remains(self) -> List[Entity]:
        return [e for e in self._entities.values() if not e.alive]

    def entity_at(self, x: int, y: int) -> Optional[Entity]:
        """The living (blocking) entity standing on ``(x, y)``, if any."""
        for e in self._entities.values():
            if e.blocks and e.x == x and e.y == y:
                return e
        return None

    def blocking_positions(self, exclude: Tuple[int, ...] = ()) -> Set[Coord2D]:
        return {e.pos for e in self._entities.values() if e.blocks and e.id not in exclude}

    def clear_monsters(self) -> None:
        """Drop everything except the player (used when a new level is entered)."""
        self._entities = {eid: e for eid, e in self._entities.items() if e.is_player}


__all__ = [
    "BehaviorState",
    "PlayerKind",
    "MonsterKind",
    "EntityKind",
    "Entity",
    "EntityStore",
    "CORPSE_GLYPH",
    "CORPSE_COLOR",
]
