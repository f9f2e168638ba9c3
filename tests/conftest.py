"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the DnD Master AI test suite.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from dnd_master.core.config import GameSettings, clear_settings_cache
from dnd_master.engine.controller import SessionController
from dnd_master.engine.dice import DiceRoller
from dnd_master.models import PlayerState
from dnd_master.storage import CharacterStore, SessionStore


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Run every test in its own directory with a fresh settings cache.

    Settings create their data directories relative to the working
    directory, so tests must never touch the real one.
    """
    monkeypatch.chdir(tmp_path)
    for key in ("DND_MASTER_LOG_LEVEL", "DND_MASTER_DATA_PATH", "DND_MASTER_GAME_SEED", "DND_MASTER_AI_MODEL"):
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def game_settings() -> GameSettings:
    """Game settings with defaults."""
    return GameSettings()


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def dice_roller() -> DiceRoller:
    """A seeded dice roller for reproducible tests."""
    return DiceRoller(seed=42)


class FakeNarrator:
    """Narrator double that replays scripted answers and records prompts."""

    def __init__(self, responses: list[str] | None = None, default: str = "The wind howls.") -> None:
        self.responses = list(responses or [])
        self.default = default
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.responses:
            return self.responses.pop(0)
        return self.default


class FailingNarrator:
    """Narrator double that always raises."""

    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls = 0

    def generate(self, prompt: str) -> str:
        self.calls += 1
        raise self.error


@pytest.fixture
def narrator() -> FakeNarrator:
    return FakeNarrator()


@pytest.fixture
def make_narrator() -> type[FakeNarrator]:
    """The scripted narrator class, for tests that need custom answers."""
    return FakeNarrator


@pytest.fixture
def make_failing_narrator() -> type[FailingNarrator]:
    return FailingNarrator


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def character_store(tmp_path: Path) -> CharacterStore:
    directory = tmp_path / "characters"
    directory.mkdir()
    return CharacterStore(directory)


@pytest.fixture
def session_store(tmp_path: Path) -> SessionStore:
    return SessionStore(tmp_path / "session.json")


@pytest.fixture
def player() -> PlayerState:
    """A fresh character with default stats."""
    return PlayerState(name="Aria")


@pytest.fixture
def controller(
    player: PlayerState,
    narrator: FakeNarrator,
    character_store: CharacterStore,
    session_store: SessionStore,
    game_settings: GameSettings,
) -> SessionController:
    """A started session controller on temporary storage."""
    session = SessionController(
        player,
        narrator=narrator,
        character_store=character_store,
        session_store=session_store,
        settings=game_settings,
        roller=DiceRoller(seed=7),
    )
    session.start()
    return session


@pytest.fixture
def make_controller(
    player: PlayerState,
    character_store: CharacterStore,
    session_store: SessionStore,
    game_settings: GameSettings,
) -> Callable[..., SessionController]:
    """Factory for controllers with a custom narrator, settings or seed."""

    def factory(
        *,
        narrator: object | None = None,
        settings: GameSettings | None = None,
        seed: int = 7,
        hero: PlayerState | None = None,
        start: bool = True,
    ) -> SessionController:
        session = SessionController(
            hero or player,
            narrator=narrator or FakeNarrator(),
            character_store=character_store,
            session_store=session_store,
            settings=settings or game_settings,
            roller=DiceRoller(seed=seed),
        )
        if start:
            session.start()
        return session

    return factory
