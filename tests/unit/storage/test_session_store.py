"""Tests for the session store."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from dnd_master.core.constants import START_LOCATION_KEY
from dnd_master.core.exceptions import SessionPersistenceError
from dnd_master.models import SessionRecord
from dnd_master.storage import SessionStore


class TestSessionStore:
    """Tests for reading and writing the session file."""

    def test_missing_file(self, session_store: SessionStore) -> None:
        assert session_store.load() is None
        assert session_store.peek_player_name() is None

    def test_round_trip(self, session_store: SessionStore) -> None:
        saved = session_store.save(
            SessionRecord(story="A gate creaks.", story_summary="A gate creaks.", player_name="Aria")
        )

        loaded = session_store.load()

        assert loaded is not None
        assert loaded.story == "A gate creaks."
        assert loaded.player_name == "Aria"
        assert loaded.saved_at is not None
        assert loaded.saved_at == saved.saved_at

    def test_pascal_case_keys(self, session_store: SessionStore) -> None:
        session_store.path.write_text(
            json.dumps(
                {
                    "Story": "Rain falls.",
                    "StorySummary": "It began. Rain falls.",
                    "PlayerName": "Borin",
                    "CurrentLocation": None,
                }
            ),
            encoding="utf-8",
        )

        record = session_store.load()

        assert record is not None
        assert record.story_summary == "It began. Rain falls."
        assert record.player_name == "Borin"
        assert record.current_location == START_LOCATION_KEY

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]", '{"story": 5}'])
    def test_malformed_file(self, session_store: SessionStore, content: str) -> None:
        session_store.path.write_text(content, encoding="utf-8")

        assert session_store.load() is None

    def test_peek_player_name(self, session_store: SessionStore) -> None:
        session_store.save(SessionRecord(player_name="  Aria "))

        assert session_store.peek_player_name() == "Aria"

    def test_peek_blank_player(self, session_store: SessionStore) -> None:
        session_store.save(SessionRecord(story="Somewhere."))

        assert session_store.peek_player_name() is None

    def test_delete(self, session_store: SessionStore) -> None:
        session_store.save(SessionRecord(player_name="Aria"))

        session_store.delete()

        assert not session_store.exists()
        session_store.delete()

    def test_save_failure(self, session_store: SessionStore) -> None:
        with patch("dnd_master.storage.sessions.write_json", side_effect=OSError("read-only")):
            with pytest.raises(SessionPersistenceError):
                session_store.save(SessionRecord(player_name="Aria"))

    def test_save_creates_directory(self, tmp_path: Path) -> None:
        store = SessionStore(tmp_path / "data" / "session.json")

        store.save(SessionRecord(player_name="Aria"))

        assert store.exists()
