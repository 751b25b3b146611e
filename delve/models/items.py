"""Items on the floor and in the player's pack.

An ``Item`` is either lying on the floor (it has a position) or carried (its
position is ``None`` and it sits in ``ItemStore.inventory``). Items never block
movement or sight. Ids come from one counter per store and are never reused,
so ``Use(item_id)`` keeps pointing at the same object for the whole run, even
across a descent.

Equipment bonuses are folded straight into the wearer's fighter stats when an
item is equipped and taken back out when it is removed (see
``delve.services.item_service``), so combat never has to look at the pack.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

Coord2D = Tuple[int, int]

INVENTORY_LIMIT = 26


class ItemKind(str, Enum):
    HEAL = "heal"
    LIGHTNING = "lightning"
    CONFUSE = "confuse"
    FIREBALL = "fireball"
    SWORD = "sword"
    SHIELD = "shield"
    HELMET = "helmet"


class Slot(str, Enum):
    LEFT_HAND = "left hand"
    RIGHT_HAND = "right hand"
    HEAD = "head"


@dataclass
class Equipment:
    slot: Slot
    power_bonus: int = 0
    defense_bonus: int = 0
    max_hp_bonus: int = 0
    equipped: bool = False


@dataclass
class Item:
    id: int
    kind: ItemKind
    name: str
    glyph: str
    color: str
    x: Optional[int] = None
    y: Optional[int] = None
    equipment: Optional[Equipment] = None

    @property
    def pos(self) -> Optional[Coord2D]:
        if self.x is None or self.y is None:
            return None
        return (self.x, self.y)

    @property
    def on_floor(self) -> bool:
        return self.pos is not None

    def to_dict(self):
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "equipped": bool(self.equipment and self.equipment.equipped),
        }


class ItemStore:
    def __init__(self):
        self._floor: Dict[int, Item] = {}
        self._inventory: List[Item] = []
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._floor) + len(self._inventory)

    def add(self, template, x: int, y: int) -> Item:
        """Spawn hook: drop a new item built from an ``ItemTemplate`` at ``(x, y)``."""
        equipment = None
        if template.slot is not None:
            equipment = Equipment(
                slot=Slot(template.slot),
                power_bonus=template.power_bonus,
                defense_bonus=template.defense_bonus,
                max_hp_bonus=template.max_hp_bonus,
            )
        item = Item(
            id=self._next_id, kind=ItemKind(template.kind), name=template.name, glyph=template.glyph,
            color=template.color, x=x, y=y, equipment=equipment,
        )
        self._next_id += 1
        self._floor[item.id] = item
        return item

    @property
    def floor(self) -> List[Item]:
        return list(self._floor.values())

    @property
    def inventory(self) -> List[Item]:
        return list(self._inventory)

    @property
    def full(self) -> bool:
        return len(self._inventory) >= INVENTORY_LIMIT

    def at(self, x: int, y: int) -> List[Item]:
        return [i for i in self._floor.values() if i.x == x and i.y == y]

    def carried(self, item_id: int) -> Optional[Item]:
        for item in self._inventory:
            if item.id == item_id:
                return item
        return None

    def take(self, item: Item) -> None:
        """Move a floor item into the pack. Callers check ``full`` first."""
        if self.full:
            raise ValueError("Inventory is full")
        del self._floor[item.id]
        item.x = item.y = None
        self._inventory.append(item)

    def put_down(self, item: Item, x: int, y: int) -> None:
        self._inventory.remove(item)
        item.x, item.y = x, y
        self._floor[item.id] = item

    def discard(self, item: Item) -> None:
        """Destroy a carried item (a consumed potion or scroll)."""
        self._inventory.remove(item)

    def equipped(self) -> List[Item]:
        return [i for i in self._inventory if i.equipment is not None and i.equipment.equipped]

    def equipped_in_slot(self, slot: Slot) -> Optional[Item]:
        for item in self.equipped():
            if item.equipment.slot is slot:
                return item
        return None

    def clear_floor(self) -> None:
        self._floor = {}


__all__ = ["INVENTORY_LIMIT", "ItemKind", "Slot", "Equipment", "Item", "ItemStore"]
