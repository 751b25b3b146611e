"""Grid cells and the fixed-size terrain buffer.

The grid is column-major (``grid.cell(x, y)`` / ``grid.cells[x][y]``), matching
how the generator and every consumer address it. Dimensions are fixed at
construction. Coordinates are expected to be validated by the caller with
``in_bounds``; a lookup outside the grid is a programming error and raises
``OutOfBoundsError`` instead of being clamped.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

from .tiles import FLOOR, TERRAIN_FLAGS, WALL

Coord2D = Tuple[int, int]


class OutOfBoundsError(IndexError):
    """Raised when a coordinate outside ``[0, width) x [0, height)`` is looked up."""


class Cell:
    """Lightweight container for a single grid cell."""

    __slots__ = ("kind", "blocked", "block_sight", "explored")

    def __init__(self, kind: str = WALL, explored: bool = False):
        self.kind = kind
        self.blocked, self.block_sight = TERRAIN_FLAGS[kind]
        self.explored = explored

    def set_kind(self, kind: str) -> None:
        self.kind = kind
        self.blocked, self.block_sight = TERRAIN_FLAGS[kind]

    def to_dict(self):
        return {
            "kind": self.kind,
            "blocked": self.blocked,
            "block_sight": self.block_sight,
            "explored": self.explored,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Cell({self.kind!r}, explored={self.explored})"


class Grid:
    def __init__(self, width: int, height: int, fill: str = WALL):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        self.cells: List[List[Cell]] = [[Cell(fill) for _ in range(self._height)] for _ in range(self._width)]

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def cell(self, x: int, y: int) -> Cell:
        if not self.in_bounds(x, y):
            raise OutOfBoundsError(f"({x}, {y}) outside {self._width}x{self._height} grid")
        return self.cells[x][y]

    def set_kind(self, x: int, y: int, kind: str) -> None:
        self.cell(x, y).set_kind(kind)

    def is_walkable(self, x: int, y: int) -> bool:
        return not self.cell(x, y).blocked

    def blocks_sight(self, x: int, y: int) -> bool:
        return self.cell(x, y).block_sight

    def can_step(self, x: int, y: int, dx: int, dy: int) -> bool:
        """Whether a single step from ``(x, y)`` by ``(dx, dy)`` is legal terrain-wise.

        The target must be in bounds and walkable. A diagonal step may not
        squeeze between two blocked orthogonal cells.
        """
        nx, ny = x + dx, y + dy
        if not self.in_bounds(nx, ny) or self.cells[nx][ny].blocked:
            return False
        if dx and dy:
            if self.cells[x + dx][y].blocked and self.cells[x][y + dy].blocked:
                return False
        return True

    def coords(self) -> Iterator[Coord2D]:
        for x in range(self._width):
            for y in range(self._height):
                yield x, y

    def walkable_coords(self) -> Iterator[Coord2D]:
        for x, y in self.coords():
            if not self.cells[x][y].blocked:
                yield x, y

    def explored_coords(self) -> frozenset:
        return frozenset((x, y) for x, y in self.coords() if self.cells[x][y].explored)

    def count(self, kind: str) -> int:
        return sum(1 for x, y in self.coords() if self.cells[x][y].kind == kind)

    @classmethod
    def open(cls, width: int, height: int) -> "Grid":
        """All-floor grid; handy for tests and scripted scenarios."""
        return cls(width, height, fill=FLOOR)


__all__ = ["Cell", "Grid", "Coord2D", "OutOfBoundsError"]
