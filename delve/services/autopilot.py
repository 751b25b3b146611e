"""Scripted input source used by the CLI ``simulate`` command.

Picks one intent per turn from what the player currently knows:

1. Badly hurt (a third of max hp or less) with a healing potion: drink it.
2. A visible living monster within melee reach is attacked.
3. A scroll of lightning and a visible monster in its range: read it.
4. Otherwise walk toward the nearest visible living monster.
5. Standing on an item with room in the pack: pick it up.
6. Otherwise walk toward the nearest visible floor item.
7. Otherwise walk toward the nearest explored floor cell that borders
   unexplored territory (breadth-first over legal steps).
8. With the level fully explored, walk to the stairs and descend.
9. Nothing left to do means ``Wait``.

Monsters and items are only considered while visible; invisible ones are
ignored even when the scheduler knows where they are.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, Optional, Tuple

from delve.models.intents import Attack, Descend, Intent, Move, PickUp, Quit, Use, Wait
from delve.models.items import ItemKind

from .combat_service import melee_reach
from .item_service import LIGHTNING_RANGE, closest_monster
from .pathfinding import DIRECTIONS, chebyshev, find_path

Coord = Tuple[int, int]


class Autopilot:
    def __init__(self, state, max_turns: Optional[int] = None, descend: bool = True):
        self.state = state
        self.max_turns = max_turns
        self.descend = descend
        self.issued = 0

    def next_intent(self) -> Intent:
        if self.max_turns is not None and self.issued >= self.max_turns:
            return Quit()
        self.issued += 1
        return self.choose()

    def choose(self) -> Intent:
        state = self.state
        player = state.player
        if not player.alive:
            return Quit()
        grid = state.grid

        potion = self._carried(ItemKind.HEAL)
        if potion is not None and player.hp <= player.max_hp // 3:
            return Use(potion.id)

        monsters = [m for m in state.entities.alive_monsters() if m.pos in state.visible]
        monsters.sort(key=lambda m: (chebyshev(player.pos, m.pos), m.id))
        for m in monsters:
            if melee_reach(grid, player, m.pos):
                return Attack(m.x - player.x, m.y - player.y)
        scroll = self._carried(ItemKind.LIGHTNING)
        if scroll is not None and closest_monster(state, LIGHTNING_RANGE) is not None:
            return Use(scroll.id)
        for m in monsters:
            step = self._step_toward(m.pos)
            if step is not None:
                return step

        if not state.items.full:
            if state.items.at(*player.pos):
                return PickUp()
            loot = [i for i in state.items.floor if i.pos in state.visible]
            loot.sort(key=lambda i: (chebyshev(player.pos, i.pos), i.id))
            for item in loot:
                step = self._step_toward(item.pos)
                if step is not None:
                    return step

        frontier = self._nearest_frontier()
        if frontier is not None:
            step = self._step_toward(frontier)
            if step is not None:
                return step

        stairs = state.stairs
        if self.descend and stairs is not None and grid.cell(*stairs).explored:
            if player.pos == stairs:
                return Descend()
            step = self._step_toward(stairs)
            if step is not None:
                return step
        return Wait()

    def _carried(self, kind: ItemKind):
        for item in self.state.items.inventory:
            if item.kind is kind:
                return item
        return None

    def _step_toward(self, goal: Coord) -> Optional[Intent]:
        state = self.state
        player = state.player
        occupied = state.entities.blocking_positions(exclude=(player.id,))
        path = find_path(state.grid, player.pos, goal, occupied)
        if not path:
            return None
        nx, ny = path[0]
        return Move(nx - player.x, ny - player.y)

    def _nearest_frontier(self) -> Optional[Coord]:
        """Closest explored walkable cell with an unexplored walkable neighbour."""
        grid = self.state.grid
        start = self.state.player.pos
        seen: Dict[Coord, None] = {start: None}
        q = deque([start])
        while q:
            cx, cy = q.popleft()
            for dx, dy in DIRECTIONS:
                if not grid.can_step(cx, cy, dx, dy):
                    continue
                nxt = (cx + dx, cy + dy)
                if nxt in seen:
                    continue
                if not grid.cells[nxt[0]][nxt[1]].explored:
                    if (cx, cy) != start:
                        return (cx, cy)
                    # unexplored cell right next to us: step onto it
                    return nxt
                seen[nxt] = None
                q.append(nxt)
        return None


__all__ = ["Autopilot"]
