import random

import pytest

from delve.config import SimConfig
from delve.models.entities import CORPSE_GLYPH
from delve.services import combat_service
from delve.services.combat_service import (
    apply_damage,
    attack,
    check_level_up,
    compute_damage,
    level_up_threshold,
)
from delve.services.spawn_service import get_template
from tests.factories import make_state, open_level


def _duel(seed=1, sim_config=None):
    state = make_state(open_level(), monsters=[("orc", 11, 10)], sim_config=sim_config, seed=seed)
    orc = state.entities.alive_monsters()[0]
    return state, state.player, orc


def test_damage_is_power_minus_defense_clamped_at_zero():
    state, player, orc = _duel()
    assert compute_damage(player, orc) == player.power - orc.defense
    orc.defense = 99
    assert compute_damage(player, orc) == 0


def test_same_stats_same_outcome():
    results = []
    for _ in range(2):
        state, player, orc = _duel(sim_config=SimConfig(damage_variance=2), seed=5)
        outcome = attack(state, player.id, orc.id)
        results.append((outcome.damage, orc.hp, list(state.messages)))
    assert results[0] == results[1]


def test_variance_stays_within_bounds():
    state, player, orc = _duel()
    rng = random.Random(3)
    base = player.power - orc.defense
    for _ in range(50):
        d = compute_damage(player, orc, variance=2, rng=rng)
        assert max(0, base - 2) <= d <= base + 2


def test_alive_flips_exactly_at_zero_hp():
    state, player, orc = _duel()
    orc.hp = 5
    assert apply_damage(orc, 4) is False
    assert orc.alive and orc.hp == 1
    assert apply_damage(orc, 1) is True
    assert not orc.alive and orc.hp == 0
    assert orc.glyph == CORPSE_GLYPH
    assert orc.name == "remains of orc"
    # dead entities no longer block or occupy
    assert state.entities.entity_at(11, 10) is None
    assert orc in state.entities.remains()


def test_attack_messages_and_xp_on_kill():
    state, player, orc = _duel()
    orc.hp = 1
    outcome = attack(state, player.id, orc.id)
    assert outcome.killed and outcome.xp_awarded == get_template("orc").xp
    assert player.xp == get_template("orc").xp
    msgs = list(state.messages)
    assert msgs[-2] == f"The player hits the orc for {outcome.damage} damage."
    assert msgs[-1] == "The orc dies! You gain 35 XP."


def test_zero_damage_message():
    state, player, orc = _duel()
    orc.defense = 50
    outcome = attack(state, player.id, orc.id)
    assert outcome.damage == 0 and orc.hp == orc.max_hp
    assert state.messages[-1] == "The player attacks the orc but it has no effect!"


def test_attacking_dead_entity_raises():
    state, player, orc = _duel()
    combat_service.kill(orc)
    with pytest.raises(ValueError):
        attack(state, player.id, orc.id)
    with pytest.raises(ValueError):
        attack(state, orc.id, player.id)


def test_player_death_message():
    state, player, orc = _duel()
    player.hp = 1
    outcome = attack(state, orc.id, player.id)
    assert outcome.killed and not player.alive
    assert state.game_over
    assert state.messages[-1] == "You die!"


def test_level_up_threshold_and_stats():
    state, player, _ = _duel()
    assert level_up_threshold(1) == 350
    player.xp = 349
    assert not check_level_up(player)
    player.xp = 360
    hp, max_hp = player.hp, player.max_hp
    assert check_level_up(player, "constitution")
    assert player.level == 2 and player.xp == 10
    assert (player.hp, player.max_hp) == (hp + 20, max_hp + 20)
    player.xp = level_up_threshold(2)
    power = player.power
    assert check_level_up(player, "strength")
    assert player.power == power + 1
    player.xp = level_up_threshold(3)
    defense = player.defense
    assert check_level_up(player, "agility")
    assert player.defense == defense + 1


def test_kill_reward_can_trigger_level_up():
    state, player, orc = _duel(sim_config=SimConfig(level_up_stat="strength"))
    player.xp = level_up_threshold(1) - 1
    orc.hp = 1
    power = player.power
    outcome = attack(state, player.id, orc.id)
    assert outcome.leveled_up
    assert player.level == 2 and player.power == power + 1
    assert state.messages[-1] == "Your battle skills grow stronger! You reached level 2!"
