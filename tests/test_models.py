import random

import pytest

from delve.models.entities import EntityStore
from delve.models.game_state import GameState, derive_seed
from delve.models.items import ItemStore
from delve.models.intents import Attack, Descend, Move, Quit, Wait, parse_intent
from delve.services.spawn_service import (
    MAX_MONSTERS_PER_ROOM,
    choose_template,
    from_dungeon_level,
    get_template,
    max_monsters_for,
)
from tests.factories import make_state, three_room_level


@pytest.mark.parametrize("dx,dy", [(0, 0), (2, 0), (0, -2), (1, 5)])
def test_invalid_directions_rejected(dx, dy):
    with pytest.raises(ValueError):
        Move(dx, dy)
    with pytest.raises(ValueError):
        Attack(dx, dy)


def test_parse_intent_tokens():
    assert parse_intent("n") == Move(0, -1)
    assert parse_intent("SE") == Move(1, 1)
    assert parse_intent("a:w") == Attack(-1, 0)
    assert parse_intent(".") == Wait()
    assert parse_intent(">") == Descend()
    assert parse_intent("q") == Quit()
    with pytest.raises(ValueError):
        parse_intent("jump")


def test_store_ids_are_stable_and_ordered():
    store = EntityStore()
    player = store.add_player(1, 1, hp=10, power=2, defense=0)
    orc = store.add_monster(get_template("orc"), 2, 2)
    troll = store.add_monster(get_template("troll"), 3, 3)
    assert [e.id for e in store] == [player.id, orc.id, troll.id]
    assert store.monster_ids() == [orc.id, troll.id]
    assert store.player is player
    assert store.get(troll.id) is troll
    with pytest.raises(KeyError):
        store.get(99)
    with pytest.raises(ValueError):
        store.add_player(0, 0, hp=1, power=1, defense=0)


def test_store_obstruction_ignores_dead():
    store = EntityStore()
    store.add_player(1, 1, hp=10, power=2, defense=0)
    orc = store.add_monster(get_template("orc"), 2, 2)
    assert store.entity_at(2, 2) is orc
    assert store.blocking_positions() == {(1, 1), (2, 2)}
    orc.alive = False
    assert store.entity_at(2, 2) is None
    assert store.blocking_positions() == {(1, 1)}
    assert store.alive_monsters() == []


def test_store_without_player():
    with pytest.raises(LookupError):
        EntityStore().player


def test_spawn_tables():
    assert from_dungeon_level(MAX_MONSTERS_PER_ROOM, 1) == 2
    assert max_monsters_for(5) == 3
    assert max_monsters_for(9) == 5
    assert from_dungeon_level([(3, 15)], 2) == 0
    rng = random.Random(0)
    assert {choose_template(1, rng).slug for _ in range(50)} == {"orc"}
    deep = {choose_template(8, rng).slug for _ in range(200)}
    assert deep == {"orc", "troll"}
    with pytest.raises(ValueError):
        get_template("dragon")


def test_derive_seed_is_stable_and_tag_dependent():
    assert derive_seed(5, "sim") == derive_seed(5, "sim")
    assert derive_seed(5, "sim") != derive_seed(5, "level:1")


def test_new_game_places_player_at_first_room_and_welcomes():
    state = GameState.new(seed=11)
    assert state.player.pos == state.level.player_start
    assert state.messages[-1].startswith("Welcome")
    assert state.dungeon_level == 1
    monsters = state.entities.alive_monsters()
    assert len(monsters) == len(state.level.spawns)


def test_message_log_is_bounded():
    from delve.config import SimConfig

    state = make_state(three_room_level(), sim_config=SimConfig(message_log_limit=3))
    for i in range(5):
        state.add_message(f"m{i}")
    assert list(state.messages) == ["m2", "m3", "m4"]
    assert state.snapshot(message_count=2).messages == ("m3", "m4")


def test_snapshot_ascii_hides_unexplored_and_shows_entities():
    state = make_state(three_room_level())
    for c in state.grid.coords():
        state.grid.cell(*c).explored = False
    state.grid.cell(3, 3).explored = True
    state.visible = frozenset({(3, 3)})
    art = state.snapshot().to_ascii().splitlines()
    assert art[3][3] == "@"
    assert art[3][23] == " "  # orc and stairs unseen
    revealed = state.snapshot().to_ascii(reveal=True).splitlines()
    assert revealed[3][23] == "o"
    assert revealed[0] == "#" * 27


def test_empty_stores_passed_in_are_used_not_replaced():
    entities, items = EntityStore(), ItemStore()
    state = GameState(three_room_level(), entities=entities, items=items)
    assert state.entities is entities
    assert state.items is items
    assert entities.player is state.player
    # player plus the orc spawned into the third room
    assert len(entities) == 2


def test_living_monsters_skips_monster_killed_during_iteration():
    store = EntityStore()
    store.add_player(1, 1, hp=10, power=2, defense=0)
    first = store.add_monster(get_template("orc"), 2, 2)
    second = store.add_monster(get_template("orc"), 3, 3)
    third = store.add_monster(get_template("orc"), 4, 4)
    seen = []
    for monster in store.living_monsters():
        seen.append(monster.id)
        if monster is first:
            second.alive = False
    assert seen == [first.id, third.id]
