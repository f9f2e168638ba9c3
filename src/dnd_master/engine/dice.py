"""Dice rolling for combat, encounters and loot.

Single dice and table draws come from the roller's own pseudo-random
source, so a roller built with a seed replays the same fight every time.
Free-form dice notation ("2d6+3") is parsed and rolled by the d20 library.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

import d20

from dnd_master.core.exceptions import DiceRollError
from dnd_master.core.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DiceExpression:
    """A rolled dice expression.

    Attributes:
        expression: The original dice expression string.
        total: The total result of the roll.
        dice: Individual kept dice results.
        modifier: Static modifier applied.
        breakdown: d20's rendering of the roll, e.g. "1d20 (14) + 3 = `17`".
    """

    expression: str
    total: int
    dice: list[int]
    modifier: int
    breakdown: str


class DiceRoller:
    """Seedable source of dice rolls.

    Example:
        >>> roller = DiceRoller(seed=7)
        >>> 1 <= roller.roll_die(20) <= 20
        True
    """

    def __init__(self, *, seed: int | None = None) -> None:
        """Initialize the dice roller.

        Args:
            seed: Optional random seed for reproducible rolls. The seed also
                reseeds the module-level generator d20 draws from.
        """
        self._seed = seed
        self._rng = random.Random(seed)
        if seed is not None:
            random.seed(seed)
        logger.debug("DiceRoller initialized", seed=seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def roll_die(self, sides: int) -> int:
        """Roll a single die.

        Args:
            sides: Number of faces, at least 1.

        Returns:
            A uniformly distributed integer in [1, sides].

        Raises:
            DiceRollError: If sides is not a positive integer.
        """
        if isinstance(sides, bool) or not isinstance(sides, int) or sides < 1:
            raise DiceRollError(
                "A die needs at least one side",
                details={"sides": sides},
            )
        return self._rng.randint(1, sides)

    def roll_check(self, modifier: int) -> int:
        """Roll d20 plus a modifier."""
        return self.roll_die(20) + modifier

    def choice(self, options: Sequence[T]) -> T:
        """Pick one entry of a non-empty table."""
        if not options:
            raise DiceRollError("Cannot draw from an empty table")
        return options[self._rng.randrange(len(options))]

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        return self._rng.random() < probability

    def roll(self, expression: str) -> DiceExpression:
        """Roll dice notation such as '1d20+5' or '2d6+1d4'.

        Args:
            expression: Dice expression understood by d20.

        Returns:
            DiceExpression containing roll results.

        Raises:
            DiceRollError: If the expression is empty or invalid.
        """
        if not expression or not expression.strip():
            raise DiceRollError("Empty dice expression", expression=expression)

        try:
            result = d20.roll(expression.strip())
        except d20.RollError as exc:
            raise DiceRollError(
                f"Invalid dice expression: {exc}",
                expression=expression,
            ) from exc

        dice_values = self._extract_dice_values(result.expr)
        rolled = DiceExpression(
            expression=expression.strip(),
            total=result.total,
            dice=dice_values,
            modifier=result.total - sum(dice_values),
            breakdown=str(result),
        )
        logger.debug("Dice rolled", expression=rolled.expression, total=rolled.total)
        return rolled

    def _extract_dice_values(self, expr: Any) -> list[int]:
        """Collect the kept dice values from a d20 expression tree."""
        values: list[int] = []

        def traverse(node: Any) -> None:
            if isinstance(node, d20.Dice):
                for die in node.values:
                    if getattr(die, "kept", True):
                        values.append(die.number)
            elif hasattr(node, "children"):
                for child in node.children:
                    traverse(child)

        traverse(expr)
        return values


# Module-level convenience roller
_default_roller: DiceRoller | None = None


def roll(expression: str) -> DiceExpression:
    """Roll dice notation with the shared default roller.

    Example:
        >>> result = roll("1d20+5")
        >>> 6 <= result.total <= 25
        True
    """
    global _default_roller  # noqa: PLW0603
    if _default_roller is None:
        _default_roller = DiceRoller()
    return _default_roller.roll(expression)


__all__ = [
    "DiceExpression",
    "DiceRoller",
    "roll",
]
