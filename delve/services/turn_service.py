"""
project: Delve
module: services/turn_service.py
License: MIT

Turn scheduler: one player intent in, one frame snapshot out.

Responsibilities:
    * Apply the player's intent (move, bump, melee, wait, descend, item use).
    * Recompute the player's field of view and fold it into ``explored``.
    * Let every living monster act once, in entity-store insertion order.
    * Emit an immutable ``FrameSnapshot`` to the render sink.
    * Report game over once the player is dead.

Turn contract:
    - ``Quit`` halts immediately: no turn consumed, no monster moves, no frame.
    - ``Descend`` away from the stairs is refused without consuming a turn.
    - An item action that does nothing (nothing to pick up, full pack, no
      target, item not carried) is refused the same way.
    - Every other intent consumes exactly one turn, including a bump into a
      wall, an attack into empty air and a melee attempt on a monster that is
      not one legal step away.
    - Monsters act in store insertion order. Each one is checked for life right
      before it acts, so one killed earlier in the same turn never acts.

The scheduler runs single-threaded in lockstep with its input source; it blocks
only while waiting for the next intent and never interrupts a turn in progress.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional

from delve.logging_utils import get_logger
from delve.models.entities import Entity
from delve.models.game_state import GameState
from delve.models.intents import ITEM_INTENTS, Attack, Descend, Drop, Intent, Move, PickUp, Quit, Use, Wait
from delve.models.snapshot import FrameSnapshot

from . import combat_service, item_service
from .fov import compute_fov, update_explored
from .monster_ai import select_action

logger = get_logger("delve.turns")

RenderSink = Callable[[FrameSnapshot], None]


@dataclass
class TurnResult:
    consumed: bool
    halted: bool = False
    game_over: bool = False
    snapshot: Optional[FrameSnapshot] = None
    events: List[dict] = field(default_factory=list)


class IntentSource:
    """Adapter turning an iterable of intents into a blocking ``next_intent`` call.

    Exhaustion is reported as ``Quit`` so scripted runs end cleanly.
    """

    def __init__(self, intents: Iterable[Intent]):
        self._it: Iterator[Intent] = iter(intents)

    def next_intent(self) -> Intent:
        return next(self._it, Quit())


class TurnScheduler:
    def __init__(self, state: GameState, render_sink: Optional[RenderSink] = None):
        self.state = state
        self.render_sink = render_sink
        self.started = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> FrameSnapshot:
        """Compute the opening field of view and emit the turn-0 frame."""
        self._refresh_fov()
        self.started = True
        return self._emit()

    def run(self, source, max_turns: Optional[int] = None) -> TurnResult:
        """Drive turns from ``source`` until quit, game over or ``max_turns``.

        ``source`` is anything with ``next_intent()`` or a plain iterable of intents.
        """
        if not hasattr(source, "next_intent"):
            source = IntentSource(source)
        if not self.started:
            self.start()
        result = TurnResult(consumed=False)
        taken = 0
        while max_turns is None or taken < max_turns:
            result = self.step(source.next_intent())
            if result.consumed:
                taken += 1
            if result.halted or result.game_over:
                break
        return result

    # ------------------------------------------------------------------
    # One turn
    # ------------------------------------------------------------------
    def step(self, intent: Intent) -> TurnResult:
        state = self.state
        if not self.started:
            self.start()
        if isinstance(intent, Quit):
            logger.debug(event="quit", turn=state.turn)
            return TurnResult(consumed=False, halted=True, game_over=state.game_over)
        if state.game_over:
            return TurnResult(consumed=False, game_over=True, snapshot=state.snapshot())

        events: List[dict] = []
        if isinstance(intent, Descend) and not self._on_stairs():
            state.add_message("There are no stairs here.")
            return TurnResult(consumed=False, events=[{"type": "no_stairs"}])

        # 1. player action
        if isinstance(intent, ITEM_INTENTS):
            event = self._apply_item_intent(intent)
            if not event["took_turn"]:
                return TurnResult(consumed=False, events=[event])
        else:
            event = self._apply_player_intent(intent)
        events.append(event)
        state.turn += 1

        # 2. player perception
        self._refresh_fov()

        # 3. monsters, insertion order, living only
        if state.player.alive:
            for monster in state.entities.living_monsters():
                events.append(self._monster_turn(monster))
                if not state.player.alive:
                    break

        # 4. frame
        snapshot = self._emit()
        if state.game_over:
            logger.debug(event="game_over", turn=state.turn)
        return TurnResult(consumed=True, game_over=state.game_over, snapshot=snapshot, events=events)

    # ------------------------------------------------------------------
    # Player
    # ------------------------------------------------------------------
    def _on_stairs(self) -> bool:
        return self.state.stairs is not None and self.state.player.pos == self.state.stairs

    def _apply_player_intent(self, intent: Intent) -> dict:
        state = self.state
        player = state.player
        if isinstance(intent, Wait):
            return {"type": "wait", "actor": player.id}
        if isinstance(intent, Descend):
            level = state.descend()
            combat_service.heal(player, player.max_hp // 2)
            state.add_message("You take a moment to rest, and recover your strength.")
            state.add_message("After a rare moment of peace, you descend deeper into the dungeon...")
            logger.debug(event="descend", dungeon_level=level.dungeon_level, turn=state.turn)
            return {"type": "descend", "actor": player.id, "dungeon_level": level.dungeon_level}
        if isinstance(intent, (Move, Attack)):
            tx, ty = player.x + intent.dx, player.y + intent.dy
            target = combat_service.find_target(state, tx, ty) if state.grid.in_bounds(tx, ty) else None
            if target is not None and not combat_service.melee_reach(state.grid, player, target.pos):
                # a blow needs the same legal step a move would
                return {"type": "swing" if isinstance(intent, Attack) else "bump", "actor": player.id}
            if target is not None:
                outcome = combat_service.attack(state, player.id, target.id)
                return {"type": "attack", "actor": player.id, "target": target.id, "damage": outcome.damage,
                        "killed": outcome.killed}
            if isinstance(intent, Attack):
                return {"type": "swing", "actor": player.id}
            if state.grid.can_step(player.x, player.y, intent.dx, intent.dy):
                player.move_to(tx, ty)
                return {"type": "move", "actor": player.id, "to": (tx, ty)}
            return {"type": "bump", "actor": player.id}
        raise ValueError(f"Unsupported intent {intent!r}")

    def _apply_item_intent(self, intent: Intent) -> dict:
        state = self.state
        if isinstance(intent, PickUp):
            kind, outcome = "pickup", item_service.pick_up(state)
        elif isinstance(intent, Use):
            kind, outcome = "use", item_service.use(state, intent.item_id, intent.target)
        elif isinstance(intent, Drop):
            kind, outcome = "drop", item_service.drop(state, intent.item_id)
        else:
            raise ValueError(f"Unsupported intent {intent!r}")
        return {"type": kind, "actor": state.player.id, "item": outcome.item_id, "result": outcome.result,
                "took_turn": outcome.took_turn}

    def _refresh_fov(self) -> None:
        state = self.state
        state.visible = compute_fov(state.grid, state.player.pos, state.sim_config.fov_radius)
        update_explored(state.grid, state.visible)

    # ------------------------------------------------------------------
    # Monsters
    # ------------------------------------------------------------------
    def _monster_turn(self, monster: Entity) -> dict:
        state = self.state
        action = select_action(state, monster)
        kind = action["type"]
        if kind == "attack":
            outcome = combat_service.attack(state, monster.id, action["target"])
            return {"type": "attack", "actor": monster.id, "target": action["target"], "damage": outcome.damage,
                    "killed": outcome.killed}
        if kind == "move":
            x, y = action["to"]
            if state.entities.entity_at(x, y) is None:
                monster.move_to(x, y)
                return {"type": "move", "actor": monster.id, "to": (x, y)}
            return {"type": "wait", "actor": monster.id, "reason": "blocked"}
        return {"type": "wait", "actor": monster.id, "reason": action.get("reason")}

    def _emit(self) -> FrameSnapshot:
        snapshot = self.state.snapshot()
        if self.render_sink is not None:
            self.render_sink(snapshot)
        return snapshot


__all__ = ["TurnScheduler", "TurnResult", "IntentSource", "RenderSink"]
