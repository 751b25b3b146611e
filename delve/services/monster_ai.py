"""Monster AI action selection.

Each living monster runs a small state machine every turn:

    IDLE      --(player inside the monster's field of view)-->  HOSTILE
    HOSTILE   --(player out of sight)----------------------->  IDLE
    any       --(scroll of confusion)----------------------->  CONFUSED
    CONFUSED  --(stumbling turns used up)------------------->  previous state

There is no memory of the player's last known position: losing sight means
forgetting immediately.

``select_action(state, monster)`` updates the state and returns an action dict:
{
  'type': 'attack' | 'move' | 'wait',
  'target': 0,             # entity id, when type == 'attack'
  'to': (x, y),            # destination, when type == 'move'
  'reason': 'no_path',     # optional detail for 'wait'
}

Hostile monsters within melee reach attack, otherwise they take the first step
of a fresh A* path toward the player (other living entities count as
obstacles). An unreachable player means waiting. Idle monsters wait, or take a
wander step when ``SimConfig.wander_enabled`` is set.

A confused monster ignores the player. Each turn it tries one random step
(it never attacks) until its stumbling turns run out; the turn after that it
comes to its senses and does nothing else.
"""

from __future__ import annotations

from typing import Any, Dict

from delve.models.entities import BehaviorState, Entity, MonsterKind

from .combat_service import melee_reach
from .fov import can_see
from .monster_patrol import maybe_wander
from .pathfinding import find_path

Action = Dict[str, Any]


def perceives_player(state, monster: Entity) -> bool:
    player = state.player
    if not player.alive:
        return False
    return can_see(state.grid, monster.pos, player.pos, state.sim_config.fov_radius)


def update_behavior(state, monster: Entity) -> BehaviorState:
    kind = monster.kind
    if not isinstance(kind, MonsterKind):
        raise ValueError(f"Entity {monster.id} is not a monster")
    if kind.confused:
        return kind.behavior
    kind.behavior = BehaviorState.HOSTILE if perceives_player(state, monster) else BehaviorState.IDLE
    return kind.behavior


def confuse(monster: Entity, turns: int) -> None:
    """Put ``monster`` into CONFUSED for ``turns`` stumbling turns.

    Confusing an already confused monster restarts the count but keeps the
    state it will return to.
    """
    kind = monster.kind
    if not isinstance(kind, MonsterKind):
        raise ValueError(f"Entity {monster.id} is not a monster")
    if not kind.confused:
        kind.previous_behavior = kind.behavior
    kind.behavior = BehaviorState.CONFUSED
    kind.confused_turns = turns


def stumble(state, monster: Entity) -> Action:
    kind = monster.kind
    if kind.confused_turns <= 0:
        kind.behavior = kind.previous_behavior or BehaviorState.IDLE
        kind.previous_behavior = None
        state.add_message(f"The {monster.name} is no longer confused!")
        return {"type": "wait", "reason": "recovered"}
    kind.confused_turns -= 1
    dx = state.rng.randint(-1, 1)
    dy = state.rng.randint(-1, 1)
    if (dx or dy) and state.grid.can_step(monster.x, monster.y, dx, dy):
        to = (monster.x + dx, monster.y + dy)
        if state.entities.entity_at(*to) is None:
            return {"type": "move", "to": to, "reason": "confused"}
    return {"type": "wait", "reason": "confused"}


def select_action(state, monster: Entity) -> Action:
    if isinstance(monster.kind, MonsterKind) and monster.kind.confused:
        return stumble(state, monster)
    behavior = update_behavior(state, monster)
    if behavior is BehaviorState.IDLE:
        step = maybe_wander(monster, state, rng=state.rng)
        if step is not None:
            return {"type": "move", "to": step, "reason": "wander"}
        return {"type": "wait", "reason": "idle"}
    player = state.player
    if melee_reach(state.grid, monster, player.pos):
        return {"type": "attack", "target": player.id}
    occupied = state.entities.blocking_positions(exclude=(monster.id, player.id))
    path = find_path(state.grid, monster.pos, player.pos, occupied)
    if not path:
        return {"type": "wait", "reason": "no_path"}
    return {"type": "move", "to": path[0]}


__all__ = ["Action", "perceives_player", "update_behavior", "confuse", "stumble", "select_action"]
