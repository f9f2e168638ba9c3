"""DnD Master AI: a single-player text adventure with an AI Dungeon Master.

Game mechanics (movement, combat, loot, inventory) are deterministic
Python; story text comes from a language model behind an
OpenAI-compatible endpoint.

Subpackages:
    core: Configuration, logging, exceptions and constants.
    models: Pydantic records for items, characters and sessions.
    engine: Dice, map, encounters, combat and the session controller.
    dm: Narrator client, prompts and opening scenes.
    storage: JSON persistence for characters and sessions.
"""

from __future__ import annotations


__version__ = "0.1.0"

__all__ = ["__version__"]
