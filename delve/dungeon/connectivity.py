"""Connectivity checks over walkable cells.

Flood fill from a start cell across ``!blocked`` cells. Generation joins every
room to its predecessor with orthogonal tunnels, so 4-way connectivity is the
strict check; ``diagonal=True`` follows the movement rules instead
(``Grid.can_step``).
"""
from __future__ import annotations

from collections import deque
from typing import List, Sequence, Set

from .cells import Coord2D, Grid

ORTHOGONAL = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONAL = ((-1, -1), (1, -1), (-1, 1), (1, 1))


def flood_walkable(grid: Grid, start: Coord2D, diagonal: bool = False) -> Set[Coord2D]:
    sx, sy = start
    if not grid.is_walkable(sx, sy):
        return set()
    steps = ORTHOGONAL + DIAGONAL if diagonal else ORTHOGONAL
    visited = {start}
    q = deque([start])
    while q:
        cx, cy = q.popleft()
        for dx, dy in steps:
            nxt = (cx + dx, cy + dy)
            if nxt in visited or not grid.can_step(cx, cy, dx, dy):
                continue
            visited.add(nxt)
            q.append(nxt)
    return visited


def unreachable_rooms(grid: Grid, rooms: Sequence) -> List[int]:
    """Indices of rooms with no cell reachable from the first room's centre."""
    if not rooms:
        return []
    reach = flood_walkable(grid, rooms[0].center)
    return [i for i, r in enumerate(rooms) if not any(c in reach for c in r.cells())]


__all__ = ["flood_walkable", "unreachable_rooms"]
