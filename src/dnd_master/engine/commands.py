"""Command vocabulary and input classification.

Player input is matched against a synonym table: every intent owns a set
of English and Dutch phrases, and a JSON file can add more. Whole-line
intents (exit, map, inventory, ...) only match when the line is exactly
one of their phrases; the others match a leading phrase and keep the
remainder as their argument, with the player's casing preserved.

When several phrases match, the longest wins and ties go to the intent
that comes first in precedence order.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from dnd_master.core.exceptions import ConfigurationError
from dnd_master.core.logging import get_logger


logger = get_logger(__name__)


# =============================================================================
# Intents
# =============================================================================


class Intent(StrEnum):
    """What a line of player input asks for, in precedence order."""

    EXIT = "exit"
    RESET = "reset"
    HELP = "help"
    MAP = "map"
    INVENTORY = "inventory"
    STATUS = "status"
    MOVE = "move"
    PICKUP = "pickup"
    ATTACK = "attack"
    SEARCH = "search"
    ROLL = "roll"
    FREE_TEXT = "free_text"
    """Anything else; handed to the narrator."""


class EncounterChoice(StrEnum):
    """Answer to a pending encounter."""

    FIGHT = "fight"
    FLEE = "flee"


WHOLE_LINE_INTENTS = frozenset(
    {Intent.EXIT, Intent.RESET, Intent.HELP, Intent.MAP, Intent.INVENTORY, Intent.STATUS}
)

TAKE_ALL = "take_all"
TAKE_NONE = "take_none"

DEFAULT_VOCABULARY: dict[str, tuple[str, ...]] = {
    Intent.EXIT: ("exit", "quit", "stop", "afsluiten"),
    Intent.RESET: ("startnewgame", "new game", "nieuw spel"),
    Intent.HELP: ("help", "?", "hulp"),
    Intent.MAP: ("map", "kaart", "m"),
    Intent.INVENTORY: ("inventory", "inv", "inventaris"),
    Intent.STATUS: ("status", "stats"),
    Intent.MOVE: ("go", "walk", "move", "ga", "loop"),
    Intent.PICKUP: ("pick up", "pickup", "take", "grab", "neem", "pak"),
    Intent.ATTACK: ("attack", "hit", "strike", "val aan", "sla"),
    Intent.SEARCH: ("search", "explore", "zoek", "verken"),
    Intent.ROLL: ("roll", "gooi"),
    EncounterChoice.FIGHT: ("fight", "f", "vecht"),
    EncounterChoice.FLEE: ("flee", "run", "vlucht"),
    TAKE_ALL: ("all", "yes", "y", "ja", "j", "alles"),
    TAKE_NONE: ("none", "no", "n", "nee"),
}
"""Phrase table keyed by intent or answer group."""

_INDEX_LIST = re.compile(r"^\d+(?:\s*[,\s]\s*\d+)*$")


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


@dataclass(frozen=True)
class ParsedCommand:
    """A classified line of input.

    Attributes:
        intent: The matched intent.
        argument: Text after the command phrase, original casing; empty if none.
        raw: The stripped input line.
        phrase: The phrase that matched, empty for free text.
    """

    intent: Intent
    argument: str
    raw: str
    phrase: str = ""

    @property
    def has_argument(self) -> bool:
        return bool(self.argument)


# =============================================================================
# Parser
# =============================================================================


class CommandParser:
    """Classifies input lines against a synonym table.

    Args:
        vocabulary: Extra phrases per group; merged into the defaults.

    Example:
        >>> parser = CommandParser()
        >>> parser.parse("Pick up Rusty Key").argument
        'Rusty Key'
    """

    def __init__(self, vocabulary: Mapping[str, Iterable[str]] | None = None) -> None:
        merged: dict[str, list[str]] = {
            group: [_normalize(phrase) for phrase in phrases]
            for group, phrases in DEFAULT_VOCABULARY.items()
        }
        for group, phrases in (vocabulary or {}).items():
            if group not in merged:
                raise ConfigurationError(
                    f"Unknown vocabulary group: {group!r}",
                    config_key="game.vocabulary_file",
                    details={"known_groups": sorted(merged)},
                )
            for phrase in phrases:
                normalized = _normalize(str(phrase))
                if normalized and normalized not in merged[group]:
                    merged[group].append(normalized)
        self._vocabulary = {group: tuple(phrases) for group, phrases in merged.items()}

    @classmethod
    def from_file(cls, path: Path | str | None) -> CommandParser:
        """Build a parser with phrases from a JSON file merged in.

        The file maps group names ("pickup", "fight", "take_all", ...) to
        lists of phrases.

        Raises:
            ConfigurationError: If the file cannot be read or has the wrong shape.
        """
        if path is None:
            return cls()
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Cannot read vocabulary file: {e}",
                config_key="game.vocabulary_file",
            ) from e
        if not isinstance(data, dict) or not all(
            isinstance(phrases, list) for phrases in data.values()
        ):
            raise ConfigurationError(
                "Vocabulary file must map group names to lists of phrases",
                config_key="game.vocabulary_file",
            )
        logger.info("Vocabulary overrides loaded", path=str(path), groups=sorted(data))
        return cls(data)

    def phrases(self, group: str) -> tuple[str, ...]:
        return self._vocabulary.get(group, ())

    def parse(self, line: str) -> ParsedCommand:
        """Classify one line of input.

        Args:
            line: Raw player input.

        Returns:
            The ParsedCommand; unmatched input is FREE_TEXT with the whole
            line as argument.
        """
        raw = (line or "").strip()
        tokens = raw.split()
        lowered = [token.lower() for token in tokens]

        best: tuple[int, Intent, str] | None = None
        for intent in Intent:
            if intent is Intent.FREE_TEXT:
                continue
            for phrase in self._vocabulary.get(intent, ()):
                words = phrase.split()
                if lowered[: len(words)] != words:
                    continue
                if intent in WHOLE_LINE_INTENTS and len(words) != len(lowered):
                    continue
                if best is None or len(words) > best[0]:
                    best = (len(words), intent, phrase)

        if best is None:
            return ParsedCommand(intent=Intent.FREE_TEXT, argument=raw, raw=raw)

        length, intent, phrase = best
        return ParsedCommand(
            intent=intent,
            argument=" ".join(tokens[length:]),
            raw=raw,
            phrase=phrase,
        )

    def parse_encounter_choice(self, line: str) -> EncounterChoice | None:
        """Read a fight/flee answer; None when the answer is neither."""
        answer = _normalize(line or "")
        for choice in EncounterChoice:
            if answer in self._vocabulary[choice]:
                return choice
        return None

    def parse_loot_choice(self, line: str, count: int) -> list[int] | None:
        """Read which loot items to take.

        Args:
            line: The answer, e.g. "all", "no", "1,3" or "2 3".
            count: Number of items on offer.

        Returns:
            Zero-based indexes of the items to take (empty for none, in
            offer order, without repeats), or None if the answer is not
            understood or names an item that is not on offer.
        """
        answer = _normalize(line or "")
        if answer in self._vocabulary[TAKE_ALL]:
            return list(range(count))
        if answer in self._vocabulary[TAKE_NONE]:
            return []
        if not _INDEX_LIST.match(answer):
            return None
        picked = {int(number) for number in re.findall(r"\d+", answer)}
        if any(number < 1 or number > count for number in picked):
            return None
        return sorted(number - 1 for number in picked)


__all__ = [
    "DEFAULT_VOCABULARY",
    "TAKE_ALL",
    "TAKE_NONE",
    "WHOLE_LINE_INTENTS",
    "CommandParser",
    "EncounterChoice",
    "Intent",
    "ParsedCommand",
]
