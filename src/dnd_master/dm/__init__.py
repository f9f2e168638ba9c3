"""The narrator: client, prompt templates and opening scenes.

Example:
    >>> from dnd_master.dm import OpenAINarrator, SafeNarrator
    >>> narrator = SafeNarrator(OpenAINarrator())
"""

from __future__ import annotations

from dnd_master.dm.narrator import NarrativeGenerator, OpenAINarrator, SafeNarrator
from dnd_master.dm.prompts import (
    OPENING_SCENES,
    build_location_prompt,
    build_story_prompt,
)


__all__ = [
    "NarrativeGenerator",
    "OpenAINarrator",
    "SafeNarrator",
    "OPENING_SCENES",
    "build_location_prompt",
    "build_story_prompt",
]
