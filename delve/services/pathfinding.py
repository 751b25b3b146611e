"""
A* pathfinding over the grid's walkable cells.

8-directional movement with uniform step cost, so path length is a step count
and the Chebyshev distance is an admissible, consistent heuristic. Diagonal
steps follow ``Grid.can_step``: no squeezing between two blocked orthogonal
cells. The same rule governs player movement, keeping what a monster can path
through identical to what it can actually walk.
"""
import heapq
from typing import Iterable, List, Optional

from delve.dungeon.cells import Coord2D, Grid

# Fixed neighbour order keeps tie-breaking (and therefore paths) deterministic.
DIRECTIONS = (
    (0, -1), (1, 0), (0, 1), (-1, 0),
    (1, -1), (1, 1), (-1, 1), (-1, -1),
)


def chebyshev(a: Coord2D, b: Coord2D) -> int:
    """Chebyshev (king-move) distance."""
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def get_neighbors(grid: Grid, pos: Coord2D) -> list:
    """Walkable neighbouring cells reachable in one legal step."""
    x, y = pos
    return [(x + dx, y + dy) for dx, dy in DIRECTIONS if grid.can_step(x, y, dx, dy)]


def find_path(
    grid: Grid,
    start: Coord2D,
    goal: Coord2D,
    occupied: Iterable[Coord2D] = (),
) -> Optional[List[Coord2D]]:
    """
    Find a shortest path from start to goal using A*.

    Args:
        grid: The level grid; a cell is walkable iff not blocked.
        start: (x, y) of the mover.
        goal: (x, y) target cell.
        occupied: Cells held by other blocking entities. Impassable for this
            query only; the goal itself is exempt so a mover can path to
            the entity it wants to reach.

    Returns:
        List of (x, y) steps excluding start and including goal ([] when
        start == goal), or None if no path exists.
    """
    grid.cell(*start)
    gx, gy = goal
    if not grid.in_bounds(gx, gy) or grid.cells[gx][gy].blocked:
        return None
    if start == goal:
        return []

    blocked = set(occupied)
    blocked.discard(goal)

    counter = 0
    open_set = [(chebyshev(start, goal), 0, counter, start)]
    came_from = {}
    g_score = {start: 0}

    while open_set:
        _f, g, _c, current = heapq.heappop(open_set)
        if current == goal:
            path = []
            while current != start:
                path.append(current)
                current = came_from[current]
            path.reverse()
            return path

        if g > g_score[current]:
            continue  # stale heap entry

        for neighbor in get_neighbors(grid, current):
            if neighbor in blocked:
                continue
            tentative_g = g + 1
            if tentative_g < g_score.get(neighbor, float("inf")):
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                counter += 1
                heapq.heappush(open_set, (tentative_g + chebyshev(neighbor, goal), tentative_g, counter, neighbor))

    # No path found
    return None


__all__ = ["DIRECTIONS", "chebyshev", "get_neighbors", "find_path"]
