"""Random encounter generation.

An encounter is an enemy scaled against the player plus, sometimes, a
small pile of loot the enemy drops if it is beaten. Generation reads the
player but never changes it.
"""

from __future__ import annotations

from collections.abc import Sequence

from dnd_master.core.constants import (
    ENEMY_NAMES,
    LOOT_MAX_VALUE,
    LOOT_MAX_WEIGHT,
    LOOT_MIN_VALUE,
    LOOT_NAMES,
    MIN_ENEMY_DEXTERITY,
    MIN_ENEMY_HP,
    MIN_ENEMY_INTELLIGENCE,
    MIN_ENEMY_STRENGTH,
)
from dnd_master.core.logging import get_logger
from dnd_master.engine.dice import DiceRoller
from dnd_master.models import Enemy, Item, PlayerState, Rarity


logger = get_logger(__name__)

MAX_LOOT_ITEMS = 2


class EncounterGenerator:
    """Builds enemies and loot drops from the player's current stats.

    Args:
        roller: Source of randomness.
        loot_chance: Probability that an encounter carries loot.
        enemy_names: Table enemy names are drawn from.
        loot_names: Table loot names are drawn from.
    """

    def __init__(
        self,
        roller: DiceRoller,
        *,
        loot_chance: float = 0.5,
        enemy_names: Sequence[str] = ENEMY_NAMES,
        loot_names: Sequence[str] = LOOT_NAMES,
    ) -> None:
        self._roller = roller
        self._loot_chance = min(max(loot_chance, 0.0), 1.0)
        self._enemy_names = tuple(enemy_names)
        self._loot_names = tuple(loot_names)

    def generate_encounter(
        self,
        player: PlayerState,
        *,
        enemy_name: str | None = None,
    ) -> tuple[Enemy, list[Item]]:
        """Create an enemy and its potential loot.

        Args:
            player: The player the enemy is scaled against.
            enemy_name: Use this name instead of a random one.

        Returns:
            Tuple of (enemy, loot). Loot is empty about half the time.
        """
        enemy = self.generate_enemy(player, name=enemy_name)
        loot = self.generate_loot(source=enemy.name)
        logger.info(
            "Encounter generated",
            enemy=enemy.name,
            enemy_hp=enemy.hp,
            loot_count=len(loot),
        )
        return enemy, loot

    def generate_enemy(self, player: PlayerState, *, name: str | None = None) -> Enemy:
        roll = self._roller.roll_die
        return Enemy(
            name=name.strip() if name and name.strip() else self._roller.choice(self._enemy_names),
            hp=max(MIN_ENEMY_HP, player.hp // 2 + roll(4)),
            strength=max(MIN_ENEMY_STRENGTH, player.strength - (roll(3) - 1)),
            dexterity=max(MIN_ENEMY_DEXTERITY, player.dexterity - (roll(3) - 1)),
            intelligence=max(MIN_ENEMY_INTELLIGENCE, player.intelligence - (roll(4) - 1)),
        )

    def generate_loot(self, *, source: str | None = None) -> list[Item]:
        """Roll for a loot drop of one or two items."""
        if not self._roller.chance(self._loot_chance):
            return []

        count = self._roller.roll_die(MAX_LOOT_ITEMS)
        return [
            Item(
                name=self._roller.choice(self._loot_names),
                description=f"Dropped by {source}." if source else None,
                rarity=self._roller.choice(list(Rarity)),
                weight=round(self._roller.uniform(0.0, LOOT_MAX_WEIGHT), 2),
                value=self._roller.roll_die(LOOT_MAX_VALUE - LOOT_MIN_VALUE + 1) + LOOT_MIN_VALUE - 1,
            )
            for _ in range(count)
        ]


__all__ = [
    "EncounterGenerator",
    "MAX_LOOT_ITEMS",
]
