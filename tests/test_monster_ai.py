import random

import pytest

from delve.config import SimConfig
from delve.models.entities import BehaviorState
from delve.services.monster_ai import confuse, perceives_player, select_action, update_behavior
from delve.services.monster_patrol import WANDER_RADIUS, maybe_wander
from tests.factories import make_state, open_level, three_room_level, walled_level


def _orc(state):
    return state.entities.alive_monsters()[0]


def test_idle_monster_out_of_sight_waits(three_room_state):
    orc = _orc(three_room_state)
    assert select_action(three_room_state, orc) == {"type": "wait", "reason": "idle"}
    assert orc.kind.behavior is BehaviorState.IDLE


def test_sight_makes_monster_hostile_and_step_toward_player(three_room_state):
    state = three_room_state
    orc = _orc(state)
    state.player.move_to(13, 3)
    action = select_action(state, orc)
    assert orc.kind.behavior is BehaviorState.HOSTILE
    assert action == {"type": "move", "to": (22, 3)}


def test_lost_sight_forgets_player_immediately(three_room_state):
    """Immediate-forget policy: no last-known-position pursuit once sight is lost."""
    state = three_room_state
    orc = _orc(state)
    state.player.move_to(13, 3)
    assert update_behavior(state, orc) is BehaviorState.HOSTILE
    state.player.move_to(3, 3)
    action = select_action(state, orc)
    assert orc.kind.behavior is BehaviorState.IDLE
    assert action["type"] == "wait"


def test_adjacent_hostile_monster_attacks(three_room_state):
    state = three_room_state
    orc = _orc(state)
    state.player.move_to(22, 3)
    assert select_action(state, orc) == {"type": "attack", "target": state.player.id}


def test_blocked_corridor_means_waiting():
    state = make_state(walled_level(["##########", "#@.......#", "##########"]),
                       monsters=[("orc", 3, 1), ("troll", 4, 1)])
    front, back = state.entities.alive_monsters()
    assert select_action(state, front) == {"type": "move", "to": (2, 1)}
    assert select_action(state, back) == {"type": "wait", "reason": "no_path"}
    assert back.kind.behavior is BehaviorState.HOSTILE


def test_dead_player_is_not_perceived(three_room_state):
    state = three_room_state
    orc = _orc(state)
    state.player.move_to(22, 3)
    state.player.alive = False
    assert not perceives_player(state, orc)


def test_update_behavior_rejects_player(three_room_state):
    with pytest.raises(ValueError):
        update_behavior(three_room_state, three_room_state.player)


# ---------------- idle wandering ----------------

def _wander_state(**cfg):
    sim = SimConfig(fov_radius=3, **cfg)
    state = make_state(open_level(21, 21, player=(1, 1)), monsters=[("orc", 15, 15)], sim_config=sim)
    return state, _orc(state)


def test_wander_disabled_by_default():
    state, orc = _wander_state()
    assert maybe_wander(orc, state, rng=random.Random(0)) is None
    assert select_action(state, orc)["type"] == "wait"


def test_wander_stays_near_origin():
    state, orc = _wander_state(wander_enabled=True, wander_chance=1.0)
    rng = random.Random(42)
    for _ in range(40):
        step = maybe_wander(orc, state, rng=rng)
        assert step is not None
        orc.move_to(*step)
        assert max(abs(orc.x - 15), abs(orc.y - 15)) <= WANDER_RADIUS
    assert orc.kind.wander_origin == (15, 15)


def test_wander_chance_zero_never_moves():
    state, orc = _wander_state(wander_enabled=True, wander_chance=0.0)
    assert all(maybe_wander(orc, state, rng=random.Random(i)) is None for i in range(10))


def test_wander_avoids_occupied_cells_and_stairs():
    level = three_room_level()
    state = make_state(level, monsters=[("orc", 12, 3)],
                       sim_config=SimConfig(fov_radius=2, wander_enabled=True, wander_chance=1.0))
    stair_orc = state.entities.alive_monsters()[0]
    wanderer = state.entities.alive_monsters()[1]
    rng = random.Random(1)
    for _ in range(30):
        step = maybe_wander(stair_orc, state, rng=rng)
        assert step != state.stairs
        assert step != wanderer.pos
        if step is not None:
            stair_orc.move_to(*step)


def test_confused_monster_stumbles_instead_of_attacking(three_room_state):
    state = three_room_state
    orc = _orc(state)
    state.player.move_to(22, 3)
    confuse(orc, 3)
    for _ in range(3):
        action = select_action(state, orc)
        assert action["type"] in ("move", "wait")
        assert action["reason"] == "confused"
        assert orc.kind.behavior is BehaviorState.CONFUSED
    assert orc.kind.confused_turns == 0
    assert select_action(state, orc) == {"type": "wait", "reason": "recovered"}
    assert state.messages[-1] == "The orc is no longer confused!"
    assert orc.kind.behavior is BehaviorState.IDLE
    assert select_action(state, orc) == {"type": "attack", "target": state.player.id}


def test_confusion_survives_behavior_updates_and_keeps_prior_state(three_room_state):
    state = three_room_state
    orc = _orc(state)
    state.player.move_to(13, 3)
    assert update_behavior(state, orc) is BehaviorState.HOSTILE
    confuse(orc, 2)
    confuse(orc, 5)
    assert update_behavior(state, orc) is BehaviorState.CONFUSED
    assert orc.kind.confused_turns == 5
    assert orc.kind.previous_behavior is BehaviorState.HOSTILE


def test_confusing_the_player_is_rejected(three_room_state):
    with pytest.raises(ValueError):
        confuse(three_room_state.player, 3)
