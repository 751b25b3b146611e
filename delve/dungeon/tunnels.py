"""L-shaped tunnel carving between room centres.

A tunnel is one horizontal and one vertical run meeting at a corner. Which run
comes first is a coin flip from the generator's RNG. Tunnels only ever turn
walls into floor; room interiors they cross are left as they are (brush stays
brush), so carving never shrinks the walkable set.
"""

from __future__ import annotations

import random
from typing import List, Tuple

from .cells import Coord2D, Grid
from .tiles import FLOOR


def _carve(grid: Grid, x: int, y: int) -> None:
    cell = grid.cell(x, y)
    if cell.blocked:
        cell.set_kind(FLOOR)


def carve_h_tunnel(grid: Grid, x1: int, x2: int, y: int) -> List[Coord2D]:
    cells = [(x, y) for x in range(min(x1, x2), max(x1, x2) + 1)]
    for x, cy in cells:
        _carve(grid, x, cy)
    return cells


def carve_v_tunnel(grid: Grid, x: int, y1: int, y2: int) -> List[Coord2D]:
    cells = [(x, y) for y in range(min(y1, y2), max(y1, y2) + 1)]
    for cx, y in cells:
        _carve(grid, cx, y)
    return cells


def carve_l_tunnel(grid: Grid, start: Coord2D, end: Coord2D, rng=None) -> Tuple[List[Coord2D], bool]:
    """Carve from ``start`` to ``end``; returns (cells, horizontal_first)."""
    rng = rng or random
    (x1, y1), (x2, y2) = start, end
    horizontal_first = rng.random() < 0.5
    if horizontal_first:
        cells = carve_h_tunnel(grid, x1, x2, y1) + carve_v_tunnel(grid, x2, y1, y2)
    else:
        cells = carve_v_tunnel(grid, x1, y1, y2) + carve_h_tunnel(grid, x1, x2, y2)
    return cells, horizontal_first


__all__ = ["carve_h_tunnel", "carve_v_tunnel", "carve_l_tunnel"]
