"""Picking up, using and dropping items.

Responsibilities:
    * Move floor items into the player's pack (at most ``INVENTORY_LIMIT``)
      and auto-equip gear whose slot is still free.
    * Resolve the one-shot effects: healing potion, lightning, confusion and
      fireball scrolls. A consumed item leaves the pack.
    * Toggle equipment on and off, folding its bonuses into the player's
      power, defense and max hp.

Every operation returns an ``ItemOutcome``. ``took_turn`` is False when
nothing happened (nothing to pick up, pack full, no target, item not
carried); the turn scheduler then leaves the clock alone, the same way it
treats ``Descend`` off the stairs.

Targets: lightning hits the closest visible monster within
``LIGHTNING_RANGE``. Confusion and fireball accept an explicit target cell;
without one, confusion picks the closest visible monster within
``CONFUSE_RANGE`` and the fireball is aimed at the closest visible monster.
Distances are Euclidean.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from delve.logging_utils import get_logger
from delve.models.entities import Entity
from delve.models.items import Item, ItemKind

from .combat_service import heal, inflict
from .monster_ai import confuse

logger = get_logger("delve.items")

Coord = Tuple[int, int]

HEAL_AMOUNT = 40
LIGHTNING_RANGE = 5
LIGHTNING_DAMAGE = 40
CONFUSE_RANGE = 10
CONFUSE_NUM_TURNS = 8
FIREBALL_RADIUS = 3
FIREBALL_DAMAGE = 25


@dataclass(frozen=True)
class ItemOutcome:
    took_turn: bool
    result: str
    item_id: Optional[int] = None


def distance(a: Coord, b: Coord) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def closest_monster(state, max_range: float) -> Optional[Entity]:
    """Closest living monster the player can see within ``max_range``; ties go to the older monster."""
    origin = state.player.pos
    best = None
    best_key = None
    for monster in state.entities.alive_monsters():
        if monster.pos not in state.visible:
            continue
        d = distance(origin, monster.pos)
        if d > max_range:
            continue
        key = (d, monster.id)
        if best_key is None or key < best_key:
            best, best_key = monster, key
    return best


# ----------------------------------------------------------------------
# Equipment
# ----------------------------------------------------------------------
def equip(state, item: Item) -> None:
    eq = item.equipment
    if eq is None or eq.equipped:
        return
    player = state.player
    eq.equipped = True
    player.power += eq.power_bonus
    player.defense += eq.defense_bonus
    player.max_hp += eq.max_hp_bonus
    state.add_message(f"Equipped {item.name} on {eq.slot.value}.")


def unequip(state, item: Item) -> None:
    eq = item.equipment
    if eq is None or not eq.equipped:
        return
    player = state.player
    eq.equipped = False
    player.power -= eq.power_bonus
    player.defense -= eq.defense_bonus
    player.max_hp -= eq.max_hp_bonus
    player.hp = min(player.hp, player.max_hp)
    state.add_message(f"Unequipped {item.name} on {eq.slot.value}.")


def toggle_equipment(state, item: Item) -> None:
    if item.equipment.equipped:
        unequip(state, item)
        return
    current = state.items.equipped_in_slot(item.equipment.slot)
    if current is not None:
        unequip(state, current)
    equip(state, item)


# ----------------------------------------------------------------------
# Effects: each returns False when cancelled
# ----------------------------------------------------------------------
def cast_heal(state, target: Optional[Coord]) -> bool:
    player = state.player
    if player.hp >= player.max_hp:
        state.add_message("You are already at full health.")
        return False
    state.add_message("Your wounds are healing!")
    heal(player, HEAL_AMOUNT)
    return True


def cast_lightning(state, target: Optional[Coord]) -> bool:
    monster = closest_monster(state, LIGHTNING_RANGE)
    if monster is None:
        state.add_message("No enemy is close enough to strike.")
        return False
    state.add_message(
        f"A lightning bolt strikes the {monster.name} with a loud thunder for {LIGHTNING_DAMAGE} damage!"
    )
    inflict(state, monster.id, LIGHTNING_DAMAGE, credit_id=state.player.id)
    return True


def cast_confuse(state, target: Optional[Coord]) -> bool:
    if target is None:
        monster = closest_monster(state, CONFUSE_RANGE)
    else:
        monster = _monster_at(state, target)
        if monster is not None and distance(state.player.pos, monster.pos) > CONFUSE_RANGE:
            monster = None
    if monster is None:
        state.add_message("No enemy is close enough to confuse.")
        return False
    confuse(monster, CONFUSE_NUM_TURNS)
    state.add_message(f"The {monster.name} starts stumbling around!")
    return True


def cast_fireball(state, target: Optional[Coord]) -> bool:
    if target is None:
        aim = closest_monster(state, state.sim_config.fov_radius)
        if aim is None:
            state.add_message("There is nothing to aim the fireball at.")
            return False
        target = aim.pos
    elif target not in state.visible:
        state.add_message("You cannot see that spot.")
        return False
    state.add_message(f"The fireball explodes, burning everything within {FIREBALL_RADIUS} tiles!")
    player_id = state.player.id
    for entity in list(state.entities):
        if not entity.alive or distance(target, entity.pos) > FIREBALL_RADIUS:
            continue
        state.add_message(f"The {entity.name} gets burned for {FIREBALL_DAMAGE} hit points.")
        inflict(state, entity.id, FIREBALL_DAMAGE, credit_id=player_id)
    return True


def _monster_at(state, pos: Coord) -> Optional[Entity]:
    if pos not in state.visible:
        return None
    entity = state.entities.entity_at(*pos)
    if entity is None or entity.is_player:
        return None
    return entity


EFFECTS: Dict[ItemKind, Callable[..., bool]] = {
    ItemKind.HEAL: cast_heal,
    ItemKind.LIGHTNING: cast_lightning,
    ItemKind.CONFUSE: cast_confuse,
    ItemKind.FIREBALL: cast_fireball,
}


# ----------------------------------------------------------------------
# Player actions
# ----------------------------------------------------------------------
def pick_up(state) -> ItemOutcome:
    player = state.player
    here = state.items.at(*player.pos)
    if not here:
        state.add_message("There is nothing here to pick up.")
        return ItemOutcome(False, "nothing_here")
    item = here[0]
    if state.items.full:
        state.add_message(f"Your inventory is full, cannot pick up {item.name}.")
        return ItemOutcome(False, "inventory_full", item.id)
    state.items.take(item)
    state.add_message(f"You picked up a {item.name}!")
    if item.equipment is not None and state.items.equipped_in_slot(item.equipment.slot) is None:
        equip(state, item)
    logger.debug(event="item_picked_up", item=item.id, kind=item.kind.value, turn=state.turn)
    return ItemOutcome(True, "picked_up", item.id)


def use(state, item_id: int, target: Optional[Coord] = None) -> ItemOutcome:
    item = state.items.carried(item_id)
    if item is None:
        state.add_message("You are not carrying that.")
        return ItemOutcome(False, "not_carried", item_id)
    if item.equipment is not None:
        toggle_equipment(state, item)
        return ItemOutcome(True, "kept", item.id)
    if not EFFECTS[item.kind](state, target):
        return ItemOutcome(False, "cancelled", item.id)
    state.items.discard(item)
    logger.debug(event="item_used", item=item.id, kind=item.kind.value, turn=state.turn)
    return ItemOutcome(True, "used_up", item.id)


def drop(state, item_id: int) -> ItemOutcome:
    item = state.items.carried(item_id)
    if item is None:
        state.add_message("You are not carrying that.")
        return ItemOutcome(False, "not_carried", item_id)
    unequip(state, item)
    state.items.put_down(item, *state.player.pos)
    state.add_message(f"You dropped a {item.name}.")
    return ItemOutcome(True, "dropped", item.id)


__all__ = [
    "HEAL_AMOUNT",
    "LIGHTNING_RANGE",
    "LIGHTNING_DAMAGE",
    "CONFUSE_RANGE",
    "CONFUSE_NUM_TURNS",
    "FIREBALL_RADIUS",
    "FIREBALL_DAMAGE",
    "ItemOutcome",
    "distance",
    "closest_monster",
    "equip",
    "unequip",
    "toggle_equipment",
    "cast_heal",
    "cast_lightning",
    "cast_confuse",
    "cast_fireball",
    "pick_up",
    "use",
    "drop",
]
