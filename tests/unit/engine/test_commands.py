"""Tests for command classification."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dnd_master.core.exceptions import ConfigurationError
from dnd_master.engine.commands import CommandParser, EncounterChoice, Intent


@pytest.fixture
def parser() -> CommandParser:
    return CommandParser()


class TestParse:
    """Tests for intent classification."""

    @pytest.mark.parametrize(
        ("line", "intent"),
        [
            ("exit", Intent.EXIT),
            ("  QUIT ", Intent.EXIT),
            ("afsluiten", Intent.EXIT),
            ("startnewgame", Intent.RESET),
            ("new game", Intent.RESET),
            ("Nieuw Spel", Intent.RESET),
            ("help", Intent.HELP),
            ("?", Intent.HELP),
            ("map", Intent.MAP),
            ("kaart", Intent.MAP),
            ("m", Intent.MAP),
            ("inv", Intent.INVENTORY),
            ("inventaris", Intent.INVENTORY),
            ("stats", Intent.STATUS),
            ("go north", Intent.MOVE),
            ("loop zuid", Intent.MOVE),
            ("pick up the lamp", Intent.PICKUP),
            ("neem zwaard", Intent.PICKUP),
            ("attack goblin", Intent.ATTACK),
            ("val aan dief", Intent.ATTACK),
            ("search", Intent.SEARCH),
            ("verken de grot", Intent.SEARCH),
            ("roll 2d6", Intent.ROLL),
            ("I wave at the innkeeper", Intent.FREE_TEXT),
        ],
    )
    def test_intents(self, parser: CommandParser, line: str, intent: Intent) -> None:
        assert parser.parse(line).intent == intent

    def test_argument_keeps_casing(self, parser: CommandParser) -> None:
        command = parser.parse("Pick Up  Rusty Key")

        assert command.intent == Intent.PICKUP
        assert command.argument == "Rusty Key"
        assert command.phrase == "pick up"

    def test_longest_phrase_wins(self, parser: CommandParser) -> None:
        command = parser.parse("val aan de trol")

        assert command.intent == Intent.ATTACK
        assert command.argument == "de trol"

    def test_whole_line_intents_need_exact_match(self, parser: CommandParser) -> None:
        assert parser.parse("stop the thief").intent == Intent.FREE_TEXT
        assert parser.parse("map of the world").intent == Intent.FREE_TEXT

    def test_missing_argument(self, parser: CommandParser) -> None:
        command = parser.parse("pick up")

        assert command.intent == Intent.PICKUP
        assert not command.has_argument

    def test_free_text_keeps_line(self, parser: CommandParser) -> None:
        command = parser.parse("  Sing a song  ")

        assert command.argument == "Sing a song"
        assert command.raw == "Sing a song"

    def test_prefix_must_be_whole_word(self, parser: CommandParser) -> None:
        assert parser.parse("gossip with the bard").intent == Intent.FREE_TEXT

    def test_empty_line(self, parser: CommandParser) -> None:
        command = parser.parse("   ")

        assert command.intent == Intent.FREE_TEXT
        assert command.raw == ""


class TestAnswers:
    """Tests for encounter and loot answers."""

    @pytest.mark.parametrize(
        ("line", "choice"),
        [
            ("fight", EncounterChoice.FIGHT),
            ("F", EncounterChoice.FIGHT),
            ("vecht", EncounterChoice.FIGHT),
            ("run", EncounterChoice.FLEE),
            ("vlucht", EncounterChoice.FLEE),
            ("dance", None),
        ],
    )
    def test_encounter_choice(self, parser: CommandParser, line: str, choice: EncounterChoice | None) -> None:
        assert parser.parse_encounter_choice(line) == choice

    @pytest.mark.parametrize(
        ("line", "picked"),
        [
            ("all", [0, 1, 2]),
            ("ja", [0, 1, 2]),
            ("n", []),
            ("nee", []),
            ("2", [1]),
            ("1,3", [0, 2]),
            ("3 1", [0, 2]),
            ("2, 2", [1]),
            ("4", None),
            ("0", None),
            ("maybe", None),
            ("1;2", None),
        ],
    )
    def test_loot_choice(self, parser: CommandParser, line: str, picked: list[int] | None) -> None:
        assert parser.parse_loot_choice(line, 3) == picked


class TestVocabularyOverrides:
    """Tests for configurable synonyms."""

    def test_extra_phrases_merge(self) -> None:
        parser = CommandParser({"pickup": ["loot"], "flee": ["scram"]})

        assert parser.parse("loot the chest").intent == Intent.PICKUP
        assert parser.parse("take the chest").intent == Intent.PICKUP
        assert parser.parse_encounter_choice("scram") == EncounterChoice.FLEE

    def test_unknown_group(self) -> None:
        with pytest.raises(ConfigurationError):
            CommandParser({"dance": ["boogie"]})

    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "vocabulary.json"
        path.write_text(json.dumps({"move": ["travel"]}), encoding="utf-8")

        parser = CommandParser.from_file(path)

        assert parser.parse("travel east").intent == Intent.MOVE
        assert "travel" in parser.phrases(Intent.MOVE)

    def test_from_file_none(self) -> None:
        assert CommandParser.from_file(None).parse("go n").intent == Intent.MOVE

    @pytest.mark.parametrize("content", ["not json", "[1, 2]", '{"move": "travel"}'])
    def test_bad_file(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "vocabulary.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigurationError):
            CommandParser.from_file(path)
