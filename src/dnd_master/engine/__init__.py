"""Game engine: dice, map, encounters, combat and the session controller.

Example:
    >>> from dnd_master.engine import DiceRoller, MapService
    >>> world = MapService()
    >>> world.try_move("north")
    (True, 'loc_0_1')
"""

from __future__ import annotations

from dnd_master.engine.combat import CombatResolver, EscapeResult
from dnd_master.engine.commands import (
    CommandParser,
    EncounterChoice,
    Intent,
    ParsedCommand,
)
from dnd_master.engine.controller import (
    ControllerState,
    SessionController,
    TurnOutcome,
)
from dnd_master.engine.dice import DiceExpression, DiceRoller, roll
from dnd_master.engine.encounters import EncounterGenerator
from dnd_master.engine.map import MapService, normalize_direction
from dnd_master.engine.narrative_state import NpcScanner, RollingSummary


__all__ = [
    # Dice
    "DiceExpression",
    "DiceRoller",
    "roll",
    # Map
    "MapService",
    "normalize_direction",
    # Encounters & combat
    "EncounterGenerator",
    "CombatResolver",
    "EscapeResult",
    # Narrative state
    "NpcScanner",
    "RollingSummary",
    # Commands
    "CommandParser",
    "EncounterChoice",
    "Intent",
    "ParsedCommand",
    # Controller
    "ControllerState",
    "SessionController",
    "TurnOutcome",
]
