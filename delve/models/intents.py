"""Player intents: one discrete action per turn.

``Move`` and ``Attack`` carry a direction with ``dx, dy`` in ``{-1, 0, 1}``,
not both zero; anything else raises ``ValueError`` at construction so a bad
value never reaches the scheduler. ``Quit`` halts without consuming a turn.

``PickUp`` takes the item under the player. ``Use`` and ``Drop`` name a carried
item by id; ``Use`` may also carry a target cell for scrolls that are aimed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

_DELTAS = (-1, 0, 1)


def _check_direction(dx, dy) -> None:
    if dx not in _DELTAS or dy not in _DELTAS or (dx == 0 and dy == 0):
        raise ValueError(f"Invalid direction ({dx}, {dy})")


def _check_item_id(item_id) -> None:
    if isinstance(item_id, bool) or not isinstance(item_id, int) or item_id < 0:
        raise ValueError(f"Invalid item id {item_id!r}")


@dataclass(frozen=True)
class Move:
    dx: int
    dy: int

    def __post_init__(self):
        _check_direction(self.dx, self.dy)


@dataclass(frozen=True)
class Attack:
    dx: int
    dy: int

    def __post_init__(self):
        _check_direction(self.dx, self.dy)


@dataclass(frozen=True)
class Wait:
    pass


@dataclass(frozen=True)
class Descend:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class PickUp:
    pass


@dataclass(frozen=True)
class Use:
    item_id: int
    target: Optional[Tuple[int, int]] = None

    def __post_init__(self):
        _check_item_id(self.item_id)
        if self.target is not None:
            if len(self.target) != 2 or not all(isinstance(v, int) for v in self.target):
                raise ValueError(f"Invalid target {self.target!r}")
            object.__setattr__(self, "target", tuple(self.target))


@dataclass(frozen=True)
class Drop:
    item_id: int

    def __post_init__(self):
        _check_item_id(self.item_id)


Intent = Union[Move, Attack, Wait, Descend, Quit, PickUp, Use, Drop]
ITEM_INTENTS = (PickUp, Use, Drop)

# Compass shorthands for scripts and tests
DIRECTIONS = {
    "n": (0, -1),
    "s": (0, 1),
    "e": (1, 0),
    "w": (-1, 0),
    "ne": (1, -1),
    "nw": (-1, -1),
    "se": (1, 1),
    "sw": (-1, 1),
}


def _parse_use(body: str) -> Use:
    item, _, at = body.partition("@")
    if not at:
        return Use(int(item))
    x, _, y = at.partition(",")
    return Use(int(item), (int(x), int(y)))


def parse_intent(token: str) -> Intent:
    """Parse a compact token.

    ``n``/``se``/... (move), ``a:ne`` (attack), ``.`` (wait), ``>`` (descend),
    ``q`` (quit), ``g`` (pick up), ``u:3`` or ``u:3@4,7`` (use item 3, optionally
    aimed at cell 4,7) and ``d:3`` (drop item 3).
    """
    t = (token or "").strip().lower()
    if t in (".", "wait"):
        return Wait()
    if t in (">", "descend"):
        return Descend()
    if t in ("q", "quit"):
        return Quit()
    if t in ("g", "pickup"):
        return PickUp()
    if t.startswith("a:") and t[2:] in DIRECTIONS:
        return Attack(*DIRECTIONS[t[2:]])
    if t in DIRECTIONS:
        return Move(*DIRECTIONS[t])
    if t.startswith(("u:", "d:")):
        try:
            return _parse_use(t[2:]) if t[0] == "u" else Drop(int(t[2:]))
        except ValueError:
            raise ValueError(f"Unknown intent token {token!r}") from None
    raise ValueError(f"Unknown intent token {token!r}")


__all__ = [
    "Move",
    "Attack",
    "Wait",
    "Descend",
    "Quit",
    "PickUp",
    "Use",
    "Drop",
    "Intent",
    "ITEM_INTENTS",
    "DIRECTIONS",
    "parse_intent",
]
