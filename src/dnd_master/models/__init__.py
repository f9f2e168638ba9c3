"""Pydantic V2 schemas for DnD Master AI.

Submodules:
    entities: Items, the player, enemies and combat results.
    world: Map locations and the persisted session record.

Example:
    >>> from dnd_master.models import PlayerState, Item, Rarity
    >>> hero = PlayerState(name="Aria")
    >>> hero.add_items([Item(name="Torch", rarity=Rarity.COMMON)])
"""

from __future__ import annotations

from dnd_master.models.entities import (
    CombatResult,
    Enemy,
    Item,
    PlayerState,
    Rarity,
)
from dnd_master.models.world import Location, SessionRecord


__all__ = [
    # Entities
    "Rarity",
    "Item",
    "PlayerState",
    "Enemy",
    "CombatResult",
    # World
    "Location",
    "SessionRecord",
]
