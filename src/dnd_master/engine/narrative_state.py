"""Narrative bookkeeping: the rolling story summary and NPC presence.

The narrator has no memory of its own, so every prompt carries a bounded
summary of what happened so far. The NPC scanner decides which characters
the player may attack by looking for known names in the latest story text.
It is a lookup-table heuristic, not a parser: "the goblin's shadow" counts
as a goblin being present.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from dnd_master.core.constants import NPC_VOCABULARY, SENTENCE_TERMINATORS
from dnd_master.core.logging import get_logger


logger = get_logger(__name__)

DEFAULT_SUMMARY_LENGTH = 1200

_ARTICLES = ("the ", "a ", "an ", "de ", "het ", "een ")

# A whole run of terminators ends a sentence: "...", "?!".
_SENTENCE_END = re.compile("[" + re.escape("".join(SENTENCE_TERMINATORS)) + "]+")


# =============================================================================
# Rolling Summary
# =============================================================================


class RollingSummary:
    """Append-only story summary capped at ``max_length`` characters.

    When the text grows past the cap, the oldest part is cut off and the
    remainder is trimmed to start at a sentence boundary.

    Example:
        >>> summary = RollingSummary(max_length=40)
        >>> summary.update("You wake up. A goblin watches you from the trees.")
        'A goblin watches you from the trees.'
    """

    def __init__(self, text: str = "", *, max_length: int = DEFAULT_SUMMARY_LENGTH) -> None:
        if max_length < 1:
            raise ValueError("max_length must be positive")
        self._max_length = max_length
        self._text = ""
        self.update(text)

    @property
    def text(self) -> str:
        return self._text

    @property
    def max_length(self) -> int:
        return self._max_length

    def update(self, new_text: str) -> str:
        """Append text and enforce the length cap.

        Args:
            new_text: Story text to fold in.

        Returns:
            The summary after the update.
        """
        addition = (new_text or "").strip()
        if addition:
            self._text = f"{self._text} {addition}" if self._text else addition
        if len(self._text) > self._max_length:
            self._text = self._truncate(self._text)
        return self._text

    def reset(self, text: str = "") -> None:
        self._text = ""
        self.update(text)

    def _truncate(self, text: str) -> str:
        tail = text[-self._max_length :]
        boundary = _SENTENCE_END.search(tail)
        if boundary is None:
            return tail.strip()
        trimmed = tail[boundary.end() :].strip()
        # A tail holding a single sentence keeps that sentence.
        return trimmed or tail.strip()

    def __str__(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)


# =============================================================================
# NPC Presence
# =============================================================================


class NpcScanner:
    """Finds known character names in story text.

    Matching is case-insensitive on word boundaries and accepts a plural
    "s"/"es" ending.

    Args:
        vocabulary: Names to look for, in reporting order.
    """

    def __init__(self, vocabulary: Iterable[str] = NPC_VOCABULARY) -> None:
        self._vocabulary = tuple(dict.fromkeys(name.strip() for name in vocabulary if name.strip()))
        self._patterns = {
            name: re.compile(rf"\b{re.escape(name)}(?:s|es)?\b", re.IGNORECASE)
            for name in self._vocabulary
        }

    @property
    def vocabulary(self) -> tuple[str, ...]:
        return self._vocabulary

    def scan(self, text: str) -> list[str]:
        """Return the vocabulary names mentioned in ``text``."""
        if not text:
            return []
        found = [name for name, pattern in self._patterns.items() if pattern.search(text)]
        logger.debug("NPC scan", found=found)
        return found

    @staticmethod
    def match(target: str, active: Iterable[str]) -> str | None:
        """Resolve an attack target against the active NPC names.

        Leading articles and a trailing plural are ignored, so "the goblins"
        finds an active "Goblin".

        Returns:
            The active name the target refers to, or None.
        """
        wanted = " ".join(target.lower().split())
        for article in _ARTICLES:
            if wanted.startswith(article):
                wanted = wanted[len(article) :]
                break
        if not wanted:
            return None
        for name in active:
            lowered = name.lower()
            if wanted in (lowered, f"{lowered}s", f"{lowered}es"):
                return name
        return None


__all__ = [
    "DEFAULT_SUMMARY_LENGTH",
    "NpcScanner",
    "RollingSummary",
]
