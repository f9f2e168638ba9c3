"""The session file: the story so far, where the player stands, and the map.

Only one session is kept. Loading is forgiving: a missing or unreadable
file simply means there is no session to continue.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from dnd_master.core.config import get_settings
from dnd_master.core.exceptions import SessionPersistenceError
from dnd_master.core.logging import get_logger
from dnd_master.models import SessionRecord
from dnd_master.storage._json import read_json, snake_keys, write_json


logger = get_logger(__name__)


class SessionStore:
    """Reads and writes the single session record.

    Args:
        path: Session file; defaults to ``storage.session_file``.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or get_settings().storage.session_file

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> SessionRecord | None:
        """Read the session record.

        Returns:
            The record, or None when the file is missing or malformed.
        """
        if not self._path.is_file():
            return None
        try:
            data = read_json(self._path)
        except (OSError, ValueError) as e:
            logger.warning("Unreadable session file", path=str(self._path), error=str(e))
            return None
        if not isinstance(data, dict):
            logger.warning("Session file is not an object", path=str(self._path))
            return None
        try:
            record = SessionRecord.model_validate(snake_keys(data))
        except ValidationError as e:
            logger.warning("Malformed session file", path=str(self._path), errors=e.error_count())
            return None
        logger.debug("Session loaded", player=record.player_name, location=record.current_location)
        return record

    def save(self, record: SessionRecord) -> SessionRecord:
        """Overwrite the session file, stamping the save time.

        Returns:
            The record as written.

        Raises:
            SessionPersistenceError: If the file cannot be written.
        """
        stamped = record.model_copy(update={"saved_at": datetime.now(UTC)})
        try:
            write_json(self._path, stamped.model_dump(mode="json"))
        except OSError as e:
            raise SessionPersistenceError(f"Could not save session: {e}", path=str(self._path)) from e
        logger.debug("Session saved", player=stamped.player_name, location=stamped.current_location)
        return stamped

    def delete(self) -> None:
        """Remove the session file; a missing file is not an error.

        Raises:
            SessionPersistenceError: If the file exists but cannot be removed.
        """
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise SessionPersistenceError(f"Could not delete session: {e}", path=str(self._path)) from e
        logger.info("Session deleted", path=str(self._path))

    def peek_player_name(self) -> str | None:
        """Name of the player in the stored session, if there is one."""
        record = self.load()
        if record is None or not record.player_name.strip():
            return None
        return record.player_name.strip()


__all__ = [
    "SessionStore",
]
