"""Game entities: items, the player, enemies and combat results.

PlayerState is the only mutable record here and is owned by the session.
Items, enemies and combat results are value-like: an Item never changes
after creation, an Enemy lives for one encounter, and a CombatResult is
read-only once the resolver hands it back.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from dnd_master.core.constants import (
    DEFAULT_ITEM_NAME,
    DEFAULT_PLAYER_DEXTERITY,
    DEFAULT_PLAYER_HP,
    DEFAULT_PLAYER_INTELLIGENCE,
    DEFAULT_PLAYER_STRENGTH,
)


# =============================================================================
# Items
# =============================================================================


class Rarity(IntEnum):
    """Item rarity, ordered by tier."""

    COMMON = 0
    UNCOMMON = 1
    RARE = 2
    EPIC = 3
    LEGENDARY = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: Any) -> Rarity:
        """Parse a rarity from its tier number or (case-insensitive) name.

        Args:
            value: A Rarity, an int tier or a name such as "rare".

        Returns:
            The matching Rarity.

        Raises:
            ValueError: If the value names no rarity.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                pass
        raise ValueError(f"Unknown rarity: {value!r}")


class Item(BaseModel):
    """An inventory item.

    Attributes:
        id: Unique identifier of this instance.
        name: Display name; blank names fall back to a default.
        description: Optional flavour text.
        rarity: Rarity tier.
        weight: Weight, never negative.
        value: Value in coins, never negative.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique item ID")
    name: str = Field(default=DEFAULT_ITEM_NAME, description="Item name")
    description: str | None = Field(default=None, description="Flavour text")
    rarity: Rarity = Field(default=Rarity.COMMON, description="Rarity tier")
    weight: float = Field(default=0.0, ge=0.0, description="Weight")
    value: int = Field(default=0, ge=0, description="Value in coins")

    @field_validator("name", mode="before")
    @classmethod
    def default_blank_name(cls, v: Any) -> str:
        if v is None:
            return DEFAULT_ITEM_NAME
        text = str(v).strip()
        return text or DEFAULT_ITEM_NAME

    @field_validator("rarity", mode="before")
    @classmethod
    def parse_rarity(cls, v: Any) -> Rarity:
        return Rarity.parse(v)

    @field_serializer("rarity")
    def serialize_rarity(self, rarity: Rarity) -> str:
        return rarity.label

    def __str__(self) -> str:
        return f"{self.name} ({self.rarity.label})"


# =============================================================================
# Player
# =============================================================================


class PlayerState(BaseModel):
    """The player's character: stats plus inventory.

    The name identifies the character in the character store and cannot
    change once the record exists.

    Attributes:
        name: Character name.
        hp: Current hit points (0 means defeated).
        strength: Offensive stat, drives attack and damage.
        dexterity: Mobility stat, drives defence and escapes.
        intelligence: Intelligence score.
        inventory: Items carried, in pickup order.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = Field(min_length=1, frozen=True, description="Character name")
    hp: int = Field(default=DEFAULT_PLAYER_HP, ge=0, description="Hit points")
    strength: int = Field(default=DEFAULT_PLAYER_STRENGTH, ge=0)
    dexterity: int = Field(default=DEFAULT_PLAYER_DEXTERITY, ge=0)
    intelligence: int = Field(default=DEFAULT_PLAYER_INTELLIGENCE, ge=0)
    inventory: list[Item] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @property
    def is_defeated(self) -> bool:
        return self.hp == 0

    def add_items(self, items: list[Item] | tuple[Item, ...]) -> None:
        """Append items to the inventory, keeping their order."""
        self.inventory.extend(items)

    def inventory_names(self) -> list[str]:
        return [item.name for item in self.inventory]

    def stat_line(self) -> str:
        """Compact stat summary used in prompts and status output."""
        return (
            f"HP: {self.hp}, STR: {self.strength}, "
            f"DEX: {self.dexterity}, INT: {self.intelligence}"
        )


# =============================================================================
# Enemy
# =============================================================================


class Enemy(BaseModel):
    """An adversary generated for a single encounter. Never persisted."""

    name: str = Field(default="Unknown", min_length=1)
    hp: int = Field(default=5, ge=0)
    strength: int = Field(default=6, ge=0)
    dexterity: int = Field(default=8, ge=0)
    intelligence: int = Field(default=5, ge=0)

    def __str__(self) -> str:
        return f"{self.name} (HP: {self.hp})"


# =============================================================================
# Combat Result
# =============================================================================


class CombatResult(BaseModel):
    """Outcome of one combat resolution.

    Attributes:
        winner: Name of the side left standing.
        player_won: True when the player is the winner.
        player_remaining_hp: Player HP after the fight.
        enemy_remaining_hp: Enemy HP after the fight.
        log: One narrated line per turn, in order.
        loot: Items on offer; only populated when the player won.
        turns: Number of turns fought.
    """

    model_config = ConfigDict(frozen=True)

    winner: str
    player_won: bool
    player_remaining_hp: int = Field(ge=0)
    enemy_remaining_hp: int = Field(ge=0)
    log: tuple[str, ...] = ()
    loot: tuple[Item, ...] = ()
    turns: int = Field(default=0, ge=0)


__all__ = [
    "Rarity",
    "Item",
    "PlayerState",
    "Enemy",
    "CombatResult",
]
