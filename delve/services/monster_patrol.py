"""Idle monster wandering.

Responsibility: lightweight, opt-in wandering for monsters that cannot see the
player.

Design:
 - Reads ``SimConfig`` knobs:
       wander_enabled (bool) gate, off by default
       wander_chance (float 0-1) probability a step is attempted this turn
 - Records ``kind.wander_origin`` the first time it is invoked and never
   leaves ``WANDER_RADIUS`` (Chebyshev) around it.
 - Candidate steps follow the movement rules (``Grid.can_step``) and skip
   cells held by other living entities and the stairs.
 - Returns the chosen destination; the caller performs the move.
"""

from __future__ import annotations

import random
from typing import List, Optional, Tuple

from delve.models.entities import Entity, MonsterKind

from .pathfinding import DIRECTIONS

Coord = Tuple[int, int]

WANDER_RADIUS = 3


def maybe_wander(monster: Entity, state, *, rng: Optional[random.Random] = None) -> Optional[Coord]:
    """Pick a single wander step for ``monster``, or None to stay put."""
    r = rng or random
    cfg = state.sim_config
    if not cfg.wander_enabled:
        return None
    if r.random() >= cfg.wander_chance:
        return None
    kind = monster.kind
    if not isinstance(kind, MonsterKind):
        return None
    if kind.wander_origin is None:
        kind.wander_origin = monster.pos
    ox, oy = kind.wander_origin
    grid = state.grid
    occupied = state.entities.blocking_positions(exclude=(monster.id,))
    candidates: List[Coord] = []
    for dx, dy in DIRECTIONS:
        nx, ny = monster.x + dx, monster.y + dy
        if not grid.can_step(monster.x, monster.y, dx, dy):
            continue
        # Enforce wander radius via Chebyshev distance (max-axis difference)
        if max(abs(nx - ox), abs(ny - oy)) > WANDER_RADIUS:
            continue
        if (nx, ny) in occupied or (nx, ny) == state.stairs:
            continue
        candidates.append((nx, ny))
    if not candidates:
        return None
    return r.choice(candidates)


__all__ = ["maybe_wander", "WANDER_RADIUS"]
