"""Entity and item stores, intents, game state aggregate and frame snapshots."""

from .entities import BehaviorState, Entity, EntityStore, MonsterKind, PlayerKind  # noqa: F401
from .game_state import GameState  # noqa: F401
from .intents import Attack, Descend, Drop, Move, PickUp, Quit, Use, Wait  # noqa: F401
from .items import Equipment, Item, ItemKind, ItemStore, Slot  # noqa: F401
from .snapshot import CellView, EntityView, FrameSnapshot, ItemView  # noqa: F401

__all__ = [
    "BehaviorState",
    "Entity",
    "EntityStore",
    "MonsterKind",
    "PlayerKind",
    "GameState",
    "Attack",
    "Descend",
    "Drop",
    "Move",
    "PickUp",
    "Quit",
    "Use",
    "Wait",
    "Equipment",
    "Item",
    "ItemKind",
    "ItemStore",
    "Slot",
    "CellView",
    "EntityView",
    "FrameSnapshot",
    "ItemView",
]
