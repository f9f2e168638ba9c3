"""JSON file persistence for characters and the play session."""

from __future__ import annotations

from dnd_master.storage.characters import CharacterStore, character_filename
from dnd_master.storage.sessions import SessionStore


__all__ = [
    "CharacterStore",
    "SessionStore",
    "character_filename",
]
