"""Monster and item spawn selection.

Provides the monster and item template catalogs and the dungeon-level
transition tables that decide how many monsters and items a room may hold and
how likely the rarer templates are. Everything is stateless; the caller
supplies the RNG so a seeded level always spawns the same population.

A transition table is a list of ``(from_level, value)`` pairs sorted by level;
the value of the last pair whose level is <= the current dungeon level applies,
and levels below the first pair yield 0.

Item templates name their kind and equipment slot as plain strings; the item
store turns them into ``ItemKind``/``Slot`` when it builds the item.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

Transition = Tuple[int, int]


@dataclass(frozen=True)
class MonsterTemplate:
    slug: str
    name: str
    glyph: str
    color: str
    hp: int
    power: int
    defense: int
    xp: int


MONSTER_TEMPLATES: Dict[str, MonsterTemplate] = {
    "orc": MonsterTemplate("orc", "orc", "o", "light_green", hp=20, power=4, defense=0, xp=35),
    "troll": MonsterTemplate("troll", "troll", "T", "red", hp=30, power=8, defense=2, xp=100),
}

# Spawn weights per template; troll odds grow with depth
SPAWN_WEIGHTS: Dict[str, Sequence[Transition]] = {
    "orc": [(1, 80)],
    "troll": [(3, 15), (5, 30), (7, 60)],
}

MAX_MONSTERS_PER_ROOM: Sequence[Transition] = [(1, 2), (4, 3), (6, 5)]


@dataclass(frozen=True)
class ItemTemplate:
    slug: str
    name: str
    glyph: str
    color: str
    kind: str
    # equipment only
    slot: Optional[str] = None
    power_bonus: int = 0
    defense_bonus: int = 0
    max_hp_bonus: int = 0


ITEM_TEMPLATES: Dict[str, ItemTemplate] = {
    "heal": ItemTemplate("heal", "healing potion", "!", "violet", "heal"),
    "lightning": ItemTemplate("lightning", "scroll of lightning", "#", "light_yellow", "lightning"),
    "fireball": ItemTemplate("fireball", "scroll of fireball", "#", "light_yellow", "fireball"),
    "confuse": ItemTemplate("confuse", "scroll of confusion", "&", "light_yellow", "confuse"),
    "sword": ItemTemplate("sword", "sword", "/", "sky", "sword", slot="right hand", power_bonus=3, max_hp_bonus=1),
    "shield": ItemTemplate("shield", "shield", "*", "darker_orange", "shield", slot="left hand", defense_bonus=1,
                           max_hp_bonus=1),
    "helmet": ItemTemplate("helmet", "helmet", "^", "darker_orange", "helmet", slot="head", max_hp_bonus=100),
}

# Potions from the start, scrolls and gear unlock with depth
ITEM_WEIGHTS: Dict[str, Sequence[Transition]] = {
    "heal": [(1, 35)],
    "lightning": [(4, 25)],
    "fireball": [(6, 25)],
    "confuse": [(2, 10)],
    "sword": [(4, 5)],
    "shield": [(8, 15)],
    "helmet": [(5, 20)],
}

MAX_ITEMS_PER_ROOM: Sequence[Transition] = [(1, 1), (4, 2)]


def from_dungeon_level(table: Sequence[Transition], level: int) -> int:
    for threshold, value in reversed(table):
        if level >= threshold:
            return value
    return 0


def max_monsters_for(level: int) -> int:
    return from_dungeon_level(MAX_MONSTERS_PER_ROOM, level)


def max_items_for(level: int) -> int:
    return from_dungeon_level(MAX_ITEMS_PER_ROOM, level)


def _weighted_slug(tables: Dict[str, Sequence[Transition]], level: int, rng, what: str) -> str:
    slugs: List[str] = []
    weights: List[int] = []
    for slug, table in tables.items():
        w = from_dungeon_level(table, level)
        if w > 0:
            slugs.append(slug)
            weights.append(w)
    if not slugs:
        raise ValueError(f"No {what} available for level {level}")
    return rng.choices(slugs, weights=weights, k=1)[0]


def choose_template(level: int, rng: Optional[random.Random] = None) -> MonsterTemplate:
    """Return a weighted-random template for ``level``.

    Raises ValueError if no template has a positive weight at that level.
    """
    return MONSTER_TEMPLATES[_weighted_slug(SPAWN_WEIGHTS, level, rng or random, "monsters")]


def choose_item_template(level: int, rng: Optional[random.Random] = None) -> ItemTemplate:
    return ITEM_TEMPLATES[_weighted_slug(ITEM_WEIGHTS, level, rng or random, "items")]


def get_template(slug: str) -> MonsterTemplate:
    try:
        return MONSTER_TEMPLATES[slug]
    except KeyError:
        raise ValueError(f"Unknown monster template {slug!r}") from None


def get_item_template(slug: str) -> ItemTemplate:
    try:
        return ITEM_TEMPLATES[slug]
    except KeyError:
        raise ValueError(f"Unknown item template {slug!r}") from None


__all__ = [
    "MonsterTemplate",
    "MONSTER_TEMPLATES",
    "SPAWN_WEIGHTS",
    "MAX_MONSTERS_PER_ROOM",
    "ItemTemplate",
    "ITEM_TEMPLATES",
    "ITEM_WEIGHTS",
    "MAX_ITEMS_PER_ROOM",
    "from_dungeon_level",
    "max_monsters_for",
    "max_items_for",
    "choose_template",
    "choose_item_template",
    "get_template",
    "get_item_template",
]
