"""Immutable frame snapshots handed to the render sink.

A snapshot is built from the ``GameState`` at the end of every turn and shares
nothing mutable with it: cells, entities and messages are copied into frozen
dataclasses and tuples. Render code can keep snapshots around (e.g. for replay
or diffing) without ever seeing later turns leak into them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from delve.dungeon.tiles import kind_to_char

Coord2D = Tuple[int, int]


@dataclass(frozen=True)
class CellView:
    kind: str
    explored: bool
    visible: bool


@dataclass(frozen=True)
class EntityView:
    id: int
    name: str
    x: int
    y: int
    glyph: str
    color: str
    hp: int
    max_hp: int
    is_player: bool
    behavior: Optional[str] = None


@dataclass(frozen=True)
class ItemView:
    id: int
    name: str
    glyph: str
    color: str
    # None while carried
    x: Optional[int] = None
    y: Optional[int] = None
    equipped: bool = False


@dataclass(frozen=True)
class FrameSnapshot:
    turn: int
    dungeon_level: int
    width: int
    height: int
    # column-major like the grid: cells[x][y]
    cells: Tuple[Tuple[CellView, ...], ...]
    entities: Tuple[EntityView, ...]
    remains: Tuple[EntityView, ...]
    visible: frozenset
    stairs: Optional[Coord2D]
    messages: Tuple[str, ...]
    game_over: bool
    items: Tuple[ItemView, ...] = ()
    inventory: Tuple[ItemView, ...] = ()

    def cell(self, x: int, y: int) -> CellView:
        return self.cells[x][y]

    @property
    def explored(self) -> frozenset:
        return frozenset(
            (x, y) for x in range(self.width) for y in range(self.height) if self.cells[x][y].explored
        )

    @property
    def player(self) -> Optional[EntityView]:
        for e in self.entities:
            if e.is_player:
                return e
        for e in self.remains:
            if e.is_player:
                return e
        return None

    def to_ascii(self, reveal: bool = False) -> str:
        """Debug text view: explored terrain, then remains, items, stairs and visible entities on top.

        Unexplored cells render as blanks unless ``reveal`` is set.
        """
        rows = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                c = self.cells[x][y]
                row.append(kind_to_char(c.kind) if (c.explored or c.visible or reveal) else " ")
            rows.append(row)
        for e in self.remains:
            if reveal or (e.x, e.y) in self.visible:
                rows[e.y][e.x] = e.glyph
        for i in self.items:
            if reveal or (i.x, i.y) in self.visible:
                rows[i.y][i.x] = i.glyph
        if self.stairs is not None:
            sx, sy = self.stairs
            if reveal or self.cells[sx][sy].explored:
                rows[sy][sx] = ">"
        for e in self.entities:
            if reveal or e.is_player or (e.x, e.y) in self.visible:
                rows[e.y][e.x] = e.glyph
        return "\n".join("".join(r) for r in rows)


__all__ = ["CellView", "EntityView", "ItemView", "FrameSnapshot"]
