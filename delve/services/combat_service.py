"""Melee combat resolution.

Responsibilities:
    * Compute damage (``power - defense``, optionally jittered by
      ``SimConfig.damage_variance``) and apply it to the defender.
    * Flip ``alive`` to False exactly when hp reaches zero or below, turning the
      record into remains (corpse glyph, non-blocking).
    * Award the victim's xp to the killer and level the player up when the
      threshold is crossed.
    * Narrate every exchange into the game's message log.
    * Spell damage (``inflict``) and healing share the same death and xp rules.

Design notes:
    - Callers pass ids; entities are looked up in the state's store.
    - Attacking with or against a dead entity is a scheduler bug and raises
      ``ValueError``. The scheduler filters dead entities out of turn order, so
      this never triggers in a correct run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from delve.logging_utils import get_logger
from delve.models.entities import CORPSE_COLOR, CORPSE_GLYPH, Entity, MonsterKind

logger = get_logger("delve.combat")

LEVEL_UP_BASE = 200
LEVEL_UP_FACTOR = 150


@dataclass(frozen=True)
class AttackOutcome:
    attacker_id: Optional[int]
    defender_id: int
    damage: int
    killed: bool
    xp_awarded: int = 0
    leveled_up: bool = False


def compute_damage(attacker: Entity, defender: Entity, variance: int = 0, rng=None) -> int:
    base = attacker.power - defender.defense
    if variance > 0 and rng is not None:
        base += rng.randint(-variance, variance)
    return max(0, base)


def apply_damage(defender: Entity, amount: int) -> bool:
    """Subtract ``amount`` hp; returns True if this blow killed the defender."""
    if amount > 0:
        defender.hp -= amount
    if defender.alive and defender.hp <= 0:
        kill(defender)
        return True
    return False


def kill(entity: Entity) -> None:
    entity.alive = False
    entity.glyph = CORPSE_GLYPH
    entity.color = CORPSE_COLOR
    if isinstance(entity.kind, MonsterKind):
        entity.name = f"remains of {entity.name}"


def level_up_threshold(level: int) -> int:
    return LEVEL_UP_BASE + level * LEVEL_UP_FACTOR


def check_level_up(entity: Entity, stat: str = "constitution") -> bool:
    """Spend xp on one level if the threshold is met; returns True if a level was gained."""
    needed = level_up_threshold(entity.level)
    if entity.xp < needed:
        return False
    entity.xp -= needed
    entity.level += 1
    if stat == "strength":
        entity.power += 1
    elif stat == "agility":
        entity.defense += 1
    else:
        entity.max_hp += 20
        entity.hp += 20
    return True


def attack(state, attacker_id: int, defender_id: int) -> AttackOutcome:
    """Resolve one melee blow from ``attacker_id`` against ``defender_id``."""
    attacker = state.entities.get(attacker_id)
    defender = state.entities.get(defender_id)
    if not attacker.alive or not defender.alive:
        raise ValueError(f"Dead entity in combat: attacker={attacker_id} defender={defender_id}")
    cfg = state.sim_config
    damage = compute_damage(attacker, defender, cfg.damage_variance, state.rng)
    if damage > 0:
        state.add_message(f"The {attacker.name} hits the {defender.name} for {damage} damage.")
    else:
        state.add_message(f"The {attacker.name} attacks the {defender.name} but it has no effect!")
    return _resolve(state, attacker, defender, damage)


def inflict(state, defender_id: int, amount: int, credit_id: Optional[int] = None) -> AttackOutcome:
    """Deal ``amount`` damage that ignores defense (spells).

    A kill pays its xp to ``credit_id`` when that is the player. The caller
    narrates the cause; only the death is narrated here.
    """
    defender = state.entities.get(defender_id)
    if not defender.alive:
        raise ValueError(f"Dead entity in combat: defender={defender_id}")
    credit = state.entities.get(credit_id) if credit_id is not None else None
    return _resolve(state, credit, defender, max(0, amount))


def _resolve(state, attacker: Optional[Entity], defender: Entity, damage: int) -> AttackOutcome:
    attacker_id = attacker.id if attacker is not None else None
    reward = defender.xp if not defender.is_player else 0
    victim_name = defender.name
    killed = apply_damage(defender, damage)
    xp_awarded = 0
    leveled = False
    if killed:
        if defender.is_player:
            state.add_message("You die!")
        else:
            state.add_message(f"The {victim_name} dies! You gain {reward} XP.")
        if attacker is not None and attacker.is_player and reward:
            xp_awarded = reward
            attacker.xp += reward
            leveled = _drain_level_ups(state, attacker)
        logger.debug(event="entity_killed", attacker=attacker_id, defender=defender.id, turn=state.turn)
    return AttackOutcome(attacker_id, defender.id, damage, killed, xp_awarded, leveled)


def heal(entity: Entity, amount: int) -> int:
    """Restore up to ``amount`` hp without passing ``max_hp``; returns the hp gained."""
    before = entity.hp
    entity.hp = min(entity.max_hp, entity.hp + amount)
    return entity.hp - before


def _drain_level_ups(state, entity: Entity) -> bool:
    leveled = False
    while check_level_up(entity, state.sim_config.level_up_stat):
        leveled = True
        state.add_message(f"Your battle skills grow stronger! You reached level {entity.level}!")
    return leveled


def melee_reach(grid, attacker: Entity, target_pos) -> bool:
    """Whether ``target_pos`` is one legal step away from the attacker."""
    dx, dy = target_pos[0] - attacker.x, target_pos[1] - attacker.y
    if max(abs(dx), abs(dy)) != 1:
        return False
    return grid.can_step(attacker.x, attacker.y, dx, dy)


def find_target(state, x: int, y: int) -> Optional[Entity]:
    """Living non-player entity at ``(x, y)``."""
    target = state.entities.entity_at(x, y)
    if target is not None and not target.is_player:
        return target
    return None


__all__ = [
    "AttackOutcome",
    "LEVEL_UP_BASE",
    "LEVEL_UP_FACTOR",
    "compute_damage",
    "apply_damage",
    "kill",
    "level_up_threshold",
    "check_level_up",
    "attack",
    "inflict",
    "heal",
    "melee_reach",
    "find_target",
]
