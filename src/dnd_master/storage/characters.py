"""Character records: one JSON file per character.

Loading never fails. A record is decoded in layers: first strictly
against the current schema, then tolerantly (older files store the
inventory as bare item names and use PascalCase keys such as "HP"), and
finally a fresh default character is returned when nothing is usable.
"""

from __future__ import annotations

import hashlib
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dnd_master.core.config import get_settings
from dnd_master.core.exceptions import CharacterStoreError
from dnd_master.core.logging import get_logger
from dnd_master.models import Item, PlayerState
from dnd_master.storage._json import read_json, snake_keys, write_json


logger = get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w\- ]")

_STAT_FIELDS = ("hp", "strength", "dexterity", "intelligence")


def character_filename(name: str) -> str:
    """File name for a character.

    Characters outside word, dash and space become "_". When that changes the
    name, a short hash of the real name is appended so "A.B" and "A_B" get
    separate files.
    """
    name = name.strip()
    safe = _UNSAFE_FILENAME_CHARS.sub("_", name)
    if safe != name:
        digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
        safe = f"{safe}-{digest}"
    return f"{safe}.json"


class CharacterStore:
    """Reads and writes character records under one directory.

    Args:
        directory: Directory holding the records; defaults to
            ``storage.characters_path``.

    Example:
        >>> store = CharacterStore(Path("data/characters"))
        >>> hero = store.load("Aria")
        >>> store.save(hero)
    """

    def __init__(self, directory: Path | None = None) -> None:
        self._directory = directory or get_settings().storage.characters_path

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, name: str) -> Path:
        return self._directory / character_filename(name)

    def exists(self, name: str) -> bool:
        return bool(name.strip()) and self.path_for(name).is_file()

    def list_names(self) -> list[str]:
        """Names of the stored characters, sorted case-insensitively.

        The name is read from each record so that loading it finds the same
        file; records without a usable name are listed by file stem.
        """
        if not self._directory.is_dir():
            return []
        return sorted((self._stored_name(path) for path in self._directory.glob("*.json")), key=str.lower)

    def _stored_name(self, path: Path) -> str:
        try:
            data = read_json(path)
        except (OSError, ValueError):
            return path.stem
        if isinstance(data, dict):
            name = data.get("name", data.get("Name"))
            if isinstance(name, str) and name.strip() and character_filename(name) == path.name:
                return name.strip()
        return path.stem

    def load(self, name: str) -> PlayerState:
        """Load a character, falling back to a fresh record.

        Args:
            name: Character name.

        Returns:
            The stored character, a tolerant reading of an older record,
            or a new character with default stats.

        Raises:
            ValueError: If the name is blank.
        """
        name = name.strip()
        if not name:
            raise ValueError("Character name must not be blank")

        path = self.path_for(name)
        if not path.is_file():
            logger.info("New character", name=name)
            return PlayerState(name=name)

        try:
            data = read_json(path)
        except (OSError, ValueError) as e:
            logger.warning("Unreadable character file, using defaults", path=str(path), error=str(e))
            return PlayerState(name=name)

        if not isinstance(data, dict):
            logger.warning("Character file is not an object, using defaults", path=str(path))
            return PlayerState(name=name)

        if set(data) <= set(PlayerState.model_fields):
            try:
                return PlayerState.model_validate({**data, "name": name})
            except ValidationError:
                pass
        logger.info("Character record needs tolerant decoding", path=str(path))

        player = self._decode_tolerant(name, data)
        logger.info("Character loaded from older record", name=name, items=len(player.inventory))
        return player

    def _decode_tolerant(self, name: str, data: dict[str, Any]) -> PlayerState:
        fields = snake_keys(data)
        player = PlayerState(name=name)
        for field in _STAT_FIELDS:
            value = fields.get(field)
            if value is None:
                continue
            try:
                setattr(player, field, value)
            except ValidationError:
                logger.debug("Dropping invalid stat", field=field, value=value)

        raw_inventory = fields.get("inventory")
        if isinstance(raw_inventory, list):
            player.add_items([item for entry in raw_inventory if (item := _decode_item(entry))])
        return player

    def save(self, player: PlayerState) -> Path:
        """Write a character record, replacing any previous one.

        Raises:
            CharacterStoreError: If the file cannot be written.
        """
        path = self.path_for(player.name)
        try:
            write_json(path, player.model_dump(mode="json"))
        except OSError as e:
            raise CharacterStoreError(
                f"Could not save character: {e}",
                path=str(path),
                details={"name": player.name},
            ) from e
        logger.debug("Character saved", name=player.name, path=str(path))
        return path

    def delete(self, name: str) -> bool:
        """Remove a character record.

        Returns:
            True if a record was removed.

        Raises:
            CharacterStoreError: If the file exists but cannot be removed.
        """
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise CharacterStoreError(f"Could not delete character: {e}", path=str(path)) from e
        logger.info("Character deleted", name=name)
        return True


def _decode_item(entry: Any) -> Item | None:
    if isinstance(entry, str):
        return Item(name=entry)
    if not isinstance(entry, dict):
        return None
    fields = snake_keys(entry)
    try:
        return Item.model_validate(fields)
    except ValidationError:
        pass
    # Keep the item under its name even when the other fields are unusable.
    try:
        return Item(name=fields.get("name"))
    except ValidationError:
        return None


__all__ = [
    "CharacterStore",
    "character_filename",
]
