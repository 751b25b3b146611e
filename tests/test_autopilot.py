from delve.models.game_state import GameState
from delve.models.intents import Attack, Descend, Move, Quit, Wait
from delve.services.autopilot import Autopilot
from delve.services.turn_service import TurnScheduler
from tests.factories import make_state, open_level, three_room_level


def _started(state):
    sched = TurnScheduler(state)
    sched.start()
    return sched


def test_attacks_adjacent_visible_monster():
    state = make_state(open_level(), monsters=[("orc", 11, 11)])
    _started(state)
    assert Autopilot(state).choose() == Attack(1, 1)


def test_walks_toward_visible_monster():
    state = make_state(open_level(), monsters=[("orc", 14, 10)])
    _started(state)
    assert Autopilot(state).choose() == Move(1, 0)


def test_explores_then_heads_for_stairs():
    state = make_state(three_room_level(with_orc=False))
    sched = _started(state)
    pilot = Autopilot(state)
    intents = []
    for _ in range(60):
        intent = pilot.next_intent()
        intents.append(intent)
        if isinstance(intent, Descend):
            break
        sched.step(intent)
    assert isinstance(intents[-1], Descend)
    assert state.player.pos == state.stairs
    assert all(state.grid.cell(*c).explored for r in state.level.rooms for c in r.cells())


def test_waits_when_nothing_left_and_stops_after_budget():
    state = make_state(open_level(7, 7, player=(3, 3)))
    _started(state)
    pilot = Autopilot(state, max_turns=2)
    assert pilot.next_intent() == Wait()
    assert pilot.next_intent() == Wait()
    assert pilot.next_intent() == Quit()


def test_autopilot_run_is_deterministic():
    def play():
        state = GameState.new(seed=5)
        TurnScheduler(state).run(Autopilot(state, max_turns=80))
        return state.turn, state.player.pos, state.player.hp, len(state.entities.remains())

    assert play() == play()
