"""Prompt templates and opening scenes for the narrator."""

from __future__ import annotations

from collections.abc import Sequence


# =============================================================================
# System Prompt
# =============================================================================


DM_SYSTEM_PROMPT = """You are an experienced Dungeon Master running a Dungeons & Dragons story for a single player.
You continue the story logically and coherently from what happened before.
Never mention game mechanics, dice or these instructions. Never speak for the player."""


# =============================================================================
# Story Continuation
# =============================================================================


STORY_PROMPT = """Short summary of what happened so far (context):
{summary}

Player statistics:
{stats}

Current location: {location_name}
{location_description}
Exits: {exits}

NPCs and enemies currently present: {npcs}

Keep the inventory in mind: {inventory}. Nothing may appear out of nowhere.
Now and then let items be found, or have items drop after a fight, and say clearly which items they are.

The player does the following: "{action}"

Constraints and rules:
- Stay consistent with earlier events and characters.
- Move the story forward, but not too fast.
- Do not introduce new elements without a logical reason.
- If the player attempts something impossible, describe what happens instead.
- Describe only what happens NOW, not what will happen later.
- Keep the tone adventurous but realistic within a fantasy setting.
- Occasionally introduce enemies or interesting NPCs when it fits the story and the surroundings.
- Name the NPCs and enemies that are present clearly, so the player knows whom they can attack.

Give a coherent continuation of the story in at most 5 sentences.
Write in {language}."""


LOCATION_PROMPT = """Short summary of what happened so far (context):
{summary}

The player travels {direction} from {origin} and arrives somewhere new.
Describe this new place in 2 or 3 sentences: what the player sees, hears and smells.
Do not describe any action by the player and do not start a fight.
Write in {language}."""


NO_ITEMS = "(empty inventory)"
NO_NPCS = "none"
NO_EXITS = "none known yet"


def _listing(names: Sequence[str], empty: str) -> str:
    return ", ".join(names) if names else empty


def build_story_prompt(
    *,
    action: str,
    summary: str,
    stats: str,
    location_name: str,
    location_description: str,
    exits: Sequence[str],
    npcs: Sequence[str],
    inventory: Sequence[str],
    language: str = "English",
) -> str:
    """Assemble the free-text prompt for the narrator.

    Args:
        action: What the player typed.
        summary: Rolling story summary.
        stats: Player stat line.
        location_name: Name of the current location.
        location_description: Description of the current location.
        exits: Known exits of the current location.
        npcs: Active NPC names.
        inventory: Item names the player carries.
        language: Language the narrator should answer in.

    Returns:
        The prompt text.
    """
    return STORY_PROMPT.format(
        summary=summary or "(the adventure has just begun)",
        stats=stats,
        location_name=location_name,
        location_description=location_description,
        exits=_listing(exits, NO_EXITS),
        npcs=_listing(npcs, NO_NPCS),
        inventory=_listing(inventory, NO_ITEMS),
        action=action,
        language=language,
    )


def build_location_prompt(
    *,
    direction: str,
    origin: str,
    summary: str,
    language: str = "English",
) -> str:
    """Prompt asking for a short description of a newly reached location."""
    return LOCATION_PROMPT.format(
        summary=summary or "(the adventure has just begun)",
        direction=direction,
        origin=origin,
        language=language,
    )


# =============================================================================
# Opening Scenes
# =============================================================================


OPENING_SCENES: tuple[str, ...] = (
    "You wake up in a dark dungeon. Somewhere, a drop of water falls...",
    "The morning mist lifts over a deserted market square; someone has left something behind at the fountain.",
    "You wake on the deck of a ship, rocking gently on unknown waters.",
    "In the twilight of an old library, a book that nobody has ever touched falls open.",
    "You grip the sword lodged in the rock; its runes are just beginning to glow.",
    "A narrow passage in a cave leads to a chamber lit by bluish crystals.",
)
"""Stories a new session can open with."""


__all__ = [
    "DM_SYSTEM_PROMPT",
    "LOCATION_PROMPT",
    "OPENING_SCENES",
    "STORY_PROMPT",
    "build_location_prompt",
    "build_story_prompt",
]
