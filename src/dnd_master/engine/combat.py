"""Turn-based combat between the player and a single enemy.

The resolver runs a whole fight in one call. Sides alternate, the player
striking first; an attack lands when the attacker's d20 plus half their
strength beats the defender's d20 plus half their dexterity. The fight ends
the moment one side reaches 0 HP.

Neither combatant is mutated. The caller applies the returned HP and loot.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from dnd_master.core.constants import (
    ENEMY_DAMAGE_DIE,
    ENEMY_MIN_DAMAGE_BONUS,
    PLAYER_DAMAGE_DIE,
    PLAYER_MIN_DAMAGE_BONUS,
)
from dnd_master.core.exceptions import CombatError
from dnd_master.core.logging import get_logger
from dnd_master.engine.dice import DiceRoller
from dnd_master.models import CombatResult, Enemy, Item, PlayerState


logger = get_logger(__name__)

DEFAULT_MAX_TURNS = 1000


@dataclass(frozen=True)
class EscapeResult:
    """Outcome of a flee attempt.

    Attributes:
        escaped: Whether the player got away.
        player_roll: Player's d20 plus half dexterity.
        enemy_roll: Enemy's d20 plus half dexterity.
    """

    escaped: bool
    player_roll: int
    enemy_roll: int


@dataclass
class _Side:
    name: str
    hp: int
    strength: int
    dexterity: int
    damage_die: int
    min_damage_bonus: int

    def damage_bonus(self) -> int:
        return max(self.min_damage_bonus, self.strength // 4)


class CombatResolver:
    """Resolves fights and escape attempts.

    Args:
        roller: Source of dice rolls.
        max_turns: Safety bound on the number of turns in one fight.
    """

    def __init__(self, roller: DiceRoller, *, max_turns: int = DEFAULT_MAX_TURNS) -> None:
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self._roller = roller
        self._max_turns = max_turns

    def engage(
        self,
        player: PlayerState,
        enemy: Enemy,
        loot: Sequence[Item] | None = None,
    ) -> CombatResult:
        """Fight until one side drops.

        Args:
            player: The player; read only.
            enemy: The opponent; read only.
            loot: Items the enemy drops, attached only if the player wins.

        Returns:
            The fight's CombatResult.

        Raises:
            CombatError: If the player is already defeated, or the fight
                exceeds the turn bound.
        """
        if player.hp <= 0:
            raise CombatError(
                "A defeated player cannot fight",
                combatant=player.name,
                turn_number=0,
            )

        hero = _Side(
            name=player.name,
            hp=player.hp,
            strength=player.strength,
            dexterity=player.dexterity,
            damage_die=PLAYER_DAMAGE_DIE,
            min_damage_bonus=PLAYER_MIN_DAMAGE_BONUS,
        )
        foe = _Side(
            name=enemy.name,
            hp=enemy.hp,
            strength=enemy.strength,
            dexterity=enemy.dexterity,
            damage_die=ENEMY_DAMAGE_DIE,
            min_damage_bonus=ENEMY_MIN_DAMAGE_BONUS,
        )

        log: list[str] = []
        turns = 0
        attacker, defender = hero, foe
        while hero.hp > 0 and foe.hp > 0:
            if turns >= self._max_turns:
                raise CombatError(
                    "Combat did not finish within the turn limit",
                    combatant=enemy.name,
                    turn_number=turns,
                )
            turns += 1
            log.append(self._strike(attacker, defender))
            attacker, defender = defender, attacker

        player_won = hero.hp > 0
        result = CombatResult(
            winner=hero.name if player_won else foe.name,
            player_won=player_won,
            player_remaining_hp=hero.hp,
            enemy_remaining_hp=foe.hp,
            log=tuple(log),
            loot=tuple(loot or ()) if player_won else (),
            turns=turns,
        )
        logger.info(
            "Combat resolved",
            player=player.name,
            enemy=enemy.name,
            winner=result.winner,
            turns=turns,
            player_hp=hero.hp,
        )
        return result

    def _strike(self, attacker: _Side, defender: _Side) -> str:
        attack = self._roller.roll_check(attacker.strength // 2)
        defence = self._roller.roll_check(defender.dexterity // 2)
        if attack <= defence:
            return f"{attacker.name} misses {defender.name}."

        damage = self._roller.roll_die(attacker.damage_die) + attacker.damage_bonus()
        defender.hp = max(0, defender.hp - damage)
        return (
            f"{attacker.name} hits {defender.name} for {damage} damage "
            f"({defender.name} HP: {defender.hp})."
        )

    def attempt_escape(self, player: PlayerState, enemy: Enemy) -> EscapeResult:
        """Try to run; ties go to the player."""
        player_roll = self._roller.roll_check(player.dexterity // 2)
        enemy_roll = self._roller.roll_check(enemy.dexterity // 2)
        escaped = player_roll >= enemy_roll
        logger.info(
            "Escape attempted",
            enemy=enemy.name,
            escaped=escaped,
            player_roll=player_roll,
            enemy_roll=enemy_roll,
        )
        return EscapeResult(escaped=escaped, player_roll=player_roll, enemy_roll=enemy_roll)


__all__ = [
    "DEFAULT_MAX_TURNS",
    "CombatResolver",
    "EscapeResult",
]
