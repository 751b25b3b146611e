"""Field-of-view computation.

Ray casting: a Bresenham line is traced from the origin to every cell inside
the Euclidean ``radius``. Each cell along a ray is visible until the first
sight-blocking cell, which is itself visible (walls are lit) and ends the ray.
The origin is always visible.

The result depends only on grid state, origin and radius, so repeated calls
with an unchanged grid return the same set. Visibility is not guaranteed to be
symmetric between two arbitrary cells; monsters run the same primitive from
their own position to decide whether they can perceive the player.

``update_explored`` folds a visibility set into the grid's persistent
``explored`` flags. It only ever sets flags, never clears them.
"""

from __future__ import annotations

from typing import FrozenSet, Iterator

from delve.dungeon.cells import Coord2D, Grid

VisibilitySet = FrozenSet[Coord2D]


def bresenham(x0: int, y0: int, x1: int, y1: int) -> Iterator[Coord2D]:
    """Yield each integer (x, y) on the line from (x0, y0) to (x1, y1), endpoints included."""
    dx, dy = abs(x1 - x0), abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy
    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy


def compute_fov(grid: Grid, origin: Coord2D, radius: int) -> VisibilitySet:
    """Return the set of cells visible from ``origin`` within ``radius``."""
    ox, oy = origin
    grid.cell(ox, oy)  # origin must be on the grid
    visible = {origin}
    r2 = radius * radius
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            if dx * dx + dy * dy > r2:
                continue
            tx, ty = ox + dx, oy + dy
            if not grid.in_bounds(tx, ty):
                continue
            for rx, ry in bresenham(ox, oy, tx, ty):
                visible.add((rx, ry))
                if (rx, ry) != origin and grid.cells[rx][ry].block_sight:
                    break
    return frozenset(visible)


def can_see(grid: Grid, origin: Coord2D, target: Coord2D, radius: int) -> bool:
    """Whether ``target`` lies in the field of view computed from ``origin``."""
    tx, ty = target
    ox, oy = origin
    if (tx - ox) ** 2 + (ty - oy) ** 2 > radius * radius:
        return False
    return target in compute_fov(grid, origin, radius)


def update_explored(grid: Grid, visible: VisibilitySet) -> int:
    """Mark every visible cell explored; returns how many were newly explored."""
    newly = 0
    for x, y in visible:
        cell = grid.cell(x, y)
        if not cell.explored:
            cell.explored = True
            newly += 1
    return newly


__all__ = ["VisibilitySet", "bresenham", "compute_fov", "can_see", "update_explored"]
