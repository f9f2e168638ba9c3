"""Tests for the console front-end."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterable
from unittest.mock import patch

import pytest
from rich.console import Console

from dnd_master.cli import main, render_outcome, run_login_menu, run_play_loop
from dnd_master.engine.controller import ControllerState, SessionController, TurnOutcome
from dnd_master.models import PlayerState, SessionRecord
from dnd_master.storage import CharacterStore, SessionStore


def _console() -> Console:
    return Console(file=io.StringIO(), width=100, color_system=None)


def _output(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


@pytest.fixture
def feed(monkeypatch: pytest.MonkeyPatch) -> Callable[[Iterable[str]], None]:
    """Script the lines typed at the console; running out means end of input."""

    def script(lines: Iterable[str]) -> None:
        answers = iter(lines)

        def fake_input(*args: object) -> str:
            try:
                return next(answers)
            except StopIteration:
                raise EOFError from None

        monkeypatch.setattr("builtins.input", fake_input)

    return script


class TestLoginMenu:
    """Tests for choosing a character."""

    def test_new_character(
        self,
        feed: Callable[[Iterable[str]], None],
        character_store: CharacterStore,
        session_store: SessionStore,
    ) -> None:
        feed(["new", "", "Aria"])
        console = _console()

        player = run_login_menu(console, character_store, session_store)

        assert player is not None
        assert player.name == "Aria"
        assert character_store.exists("Aria")
        assert "must not be empty" in _output(console)

    def test_exit(
        self,
        feed: Callable[[Iterable[str]], None],
        character_store: CharacterStore,
        session_store: SessionStore,
    ) -> None:
        feed(["quit"])

        assert run_login_menu(_console(), character_store, session_store) is None

    def test_continue_session(
        self,
        feed: Callable[[Iterable[str]], None],
        character_store: CharacterStore,
        session_store: SessionStore,
    ) -> None:
        character_store.save(PlayerState(name="Borin", hp=6))
        session_store.save(SessionRecord(story="Rain.", player_name="Borin"))
        feed(["1"])
        console = _console()

        player = run_login_menu(console, character_store, session_store)

        assert player is not None
        assert player.name == "Borin"
        assert player.hp == 6
        assert "Continue last session (Borin)" in _output(console)

    def test_load_by_number(
        self,
        feed: Callable[[Iterable[str]], None],
        character_store: CharacterStore,
        session_store: SessionStore,
    ) -> None:
        character_store.save(PlayerState(name="Aria"))
        character_store.save(PlayerState(name="Borin"))
        feed(["existing", "2"])

        player = run_login_menu(_console(), character_store, session_store)

        assert player is not None
        assert player.name == "Borin"

    def test_load_keeps_punctuated_name(
        self,
        feed: Callable[[Iterable[str]], None],
        character_store: CharacterStore,
        session_store: SessionStore,
    ) -> None:
        character_store.save(PlayerState(name="Sir.Bob", hp=3))
        feed(["load", "1"])

        player = run_login_menu(_console(), character_store, session_store)

        assert player is not None
        assert (player.name, player.hp) == ("Sir.Bob", 3)

    def test_load_without_characters(
        self,
        feed: Callable[[Iterable[str]], None],
        character_store: CharacterStore,
        session_store: SessionStore,
    ) -> None:
        feed(["load", "exit"])
        console = _console()

        assert run_login_menu(console, character_store, session_store) is None
        assert "No characters found." in _output(console)

    def test_delete(
        self,
        feed: Callable[[Iterable[str]], None],
        character_store: CharacterStore,
        session_store: SessionStore,
    ) -> None:
        character_store.save(PlayerState(name="Borin"))
        feed(["delete", "Borin", "y", "exit"])

        run_login_menu(_console(), character_store, session_store)

        assert not character_store.exists("Borin")

    def test_delete_declined(
        self,
        feed: Callable[[Iterable[str]], None],
        character_store: CharacterStore,
        session_store: SessionStore,
    ) -> None:
        character_store.save(PlayerState(name="Borin"))
        feed(["delete", "1", "n", "exit"])

        run_login_menu(_console(), character_store, session_store)

        assert character_store.exists("Borin")

    def test_invalid_choice(
        self,
        feed: Callable[[Iterable[str]], None],
        character_store: CharacterStore,
        session_store: SessionStore,
    ) -> None:
        feed(["dance", "exit"])
        console = _console()

        run_login_menu(console, character_store, session_store)

        assert "Invalid choice" in _output(console)


class TestPlayLoop:
    """Tests for the interactive loop."""

    def test_commands_until_exit(
        self,
        feed: Callable[[Iterable[str]], None],
        controller: SessionController,
    ) -> None:
        feed(["inventory", "exit"])
        console = _console()

        run_play_loop(console, controller)

        output = _output(console)
        assert "Inventory of Aria" in output
        assert "Game saved. Until next time!" in output
        assert controller.state == ControllerState.EXITED

    def test_end_of_input_saves(
        self,
        feed: Callable[[Iterable[str]], None],
        controller: SessionController,
        session_store: SessionStore,
    ) -> None:
        feed([])

        run_play_loop(_console(), controller)

        assert controller.state == ControllerState.EXITED
        assert session_store.exists()

    def test_markup_is_not_interpreted(self) -> None:
        console = _console()
        outcome = TurnOutcome(intent=None, state=ControllerState.EXPLORING, messages=["[@] You are here [bold]"])

        render_outcome(console, outcome)

        assert "[@] You are here [bold]" in _output(console)


class TestMain:
    """Tests for the entry point."""

    def test_exit_from_menu(self, feed: Callable[[Iterable[str]], None], capsys: pytest.CaptureFixture[str]) -> None:
        feed(["exit"])

        with patch("dnd_master.cli.configure_logging") as configure:
            assert main(["--log-level", "debug"]) == 0

        assert configure.call_args.kwargs["level"] == "DEBUG"
        assert "Goodbye!" in capsys.readouterr().out

    def test_configuration_error(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setenv("DND_MASTER_GAME_VOCABULARY_FILE", "missing.json")

        assert main([]) == 2
        assert "Configuration error" in capsys.readouterr().out
