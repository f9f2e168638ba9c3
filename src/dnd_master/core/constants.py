"""Application-wide constants for DnD Master AI.

Game tables, default stats and fixed strings shared by the engine,
the storage layer and the console front-end.
"""

from __future__ import annotations

# =============================================================================
# Player Defaults
# =============================================================================

DEFAULT_PLAYER_HP = 10
"""Starting hit points of a freshly created character."""

DEFAULT_PLAYER_STRENGTH = 8
DEFAULT_PLAYER_DEXTERITY = 12
DEFAULT_PLAYER_INTELLIGENCE = 10

DEFAULT_ITEM_NAME = "Unknown item"
"""Name given to items whose stored name is blank or missing."""

# =============================================================================
# Map
# =============================================================================

START_LOCATION_KEY = "start"
START_LOCATION_NAME = "Starting point"
START_LOCATION_DESCRIPTION = "The place where your adventure began."

NEW_LOCATION_NAME = "Unexplored area"
NEW_LOCATION_DESCRIPTION = "A place you have yet to explore."

UNKNOWN_LOCATION_NAME = "Unknown location"
UNKNOWN_LOCATION_DESCRIPTION = "You don't know where you are."

# =============================================================================
# Encounters
# =============================================================================

ENEMY_NAMES = ("Goblin", "Scorpion", "Plundering thief", "Feral wolf")
"""Adversaries produced by exploring."""

LOOT_NAMES = (
    "Rough dagger",
    "Steel helmet",
    "Small fur cloak",
    "Rare ore file",
    "Mysterious bracelet",
)

MIN_ENEMY_HP = 3
MIN_ENEMY_STRENGTH = 4
MIN_ENEMY_DEXTERITY = 4
MIN_ENEMY_INTELLIGENCE = 3

LOOT_MAX_WEIGHT = 2.5
LOOT_MIN_VALUE = 5
LOOT_MAX_VALUE = 24

# =============================================================================
# Combat
# =============================================================================

PLAYER_DAMAGE_DIE = 6
ENEMY_DAMAGE_DIE = 4
PLAYER_MIN_DAMAGE_BONUS = 1
ENEMY_MIN_DAMAGE_BONUS = 0

# =============================================================================
# Narrative
# =============================================================================

NEUTRAL_FILLER = "Nothing unusual happens."
"""Story text used when the narrator returns nothing usable."""

NPC_VOCABULARY = (
    "Goblin",
    "Scorpion",
    "Skerpioen",
    "Plundering thief",
    "Plunderende dief",
    "Feral wolf",
    "Verwilderde wolf",
    "Orc",
    "Zombie",
    "Ghost",
    "Geest",
    "Dragon",
    "Draak",
    "Troll",
    "Trol",
    "Bandit",
    "Knight",
    "Ridder",
    "Merchant",
    "Koopman",
    "Soldier",
    "Soldaat",
    "Priest",
    "Priester",
    "Witch",
    "Heks",
    "Thief",
    "Dief",
    "Bard",
)
"""Names the presence scanner looks for in generated story text."""

SENTENCE_TERMINATORS = (".", "!", "?")


__all__ = [
    "DEFAULT_PLAYER_HP",
    "DEFAULT_PLAYER_STRENGTH",
    "DEFAULT_PLAYER_DEXTERITY",
    "DEFAULT_PLAYER_INTELLIGENCE",
    "DEFAULT_ITEM_NAME",
    "START_LOCATION_KEY",
    "START_LOCATION_NAME",
    "START_LOCATION_DESCRIPTION",
    "NEW_LOCATION_NAME",
    "NEW_LOCATION_DESCRIPTION",
    "UNKNOWN_LOCATION_NAME",
    "UNKNOWN_LOCATION_DESCRIPTION",
    "ENEMY_NAMES",
    "LOOT_NAMES",
    "MIN_ENEMY_HP",
    "MIN_ENEMY_STRENGTH",
    "MIN_ENEMY_DEXTERITY",
    "MIN_ENEMY_INTELLIGENCE",
    "LOOT_MAX_WEIGHT",
    "LOOT_MIN_VALUE",
    "LOOT_MAX_VALUE",
    "PLAYER_DAMAGE_DIE",
    "ENEMY_DAMAGE_DIE",
    "PLAYER_MIN_DAMAGE_BONUS",
    "ENEMY_MIN_DAMAGE_BONUS",
    "NEUTRAL_FILLER",
    "NPC_VOCABULARY",
    "SENTENCE_TERMINATORS",
]
