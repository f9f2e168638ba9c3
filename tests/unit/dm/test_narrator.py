"""Tests for the narrator client and prompt builders."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from dnd_master.core.config import AIProviderSettings
from dnd_master.core.constants import NEUTRAL_FILLER
from dnd_master.core.exceptions import (
    AIConnectionError,
    AIRateLimitError,
    AIResponseError,
)
from dnd_master.dm.narrator import NarrativeGenerator, OpenAINarrator, SafeNarrator
from dnd_master.dm.prompts import NO_ITEMS, NO_NPCS, build_location_prompt, build_story_prompt


_REQUEST = httpx.Request("POST", "http://localhost:11434/v1/chat/completions")


def _response(*contents: str | None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content)) for content in contents]
    )


def _narrator(client: Any, **overrides: Any) -> OpenAINarrator:
    settings = AIProviderSettings(max_retries=0, model="test-model", **overrides)
    return OpenAINarrator(settings, client=client)


# =============================================================================
# OpenAINarrator
# =============================================================================


class TestOpenAINarrator:
    """Tests for the chat completions narrator."""

    def test_returns_stripped_content(self) -> None:
        client = MagicMock()
        client.chat.completions.create.return_value = _response("  The door opens.  ")

        assert _narrator(client).generate("open the door") == "The door opens."

    def test_sends_system_and_user_messages(self) -> None:
        client = MagicMock()
        client.chat.completions.create.return_value = _response("Ok.")

        _narrator(client, temperature=0.3).generate("look")

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.3
        assert [m["role"] for m in kwargs["messages"]] == ["system", "user"]
        assert kwargs["messages"][1]["content"] == "look"

    def test_null_content_is_empty(self) -> None:
        client = MagicMock()
        client.chat.completions.create.return_value = _response(None)

        assert _narrator(client).generate("look") == ""

    def test_no_choices(self) -> None:
        client = MagicMock()
        client.chat.completions.create.return_value = _response()

        with pytest.raises(AIResponseError):
            _narrator(client).generate("look")

    def test_connection_error(self) -> None:
        client = MagicMock()
        client.chat.completions.create.side_effect = openai.APIConnectionError(request=_REQUEST)

        with pytest.raises(AIConnectionError) as exc_info:
            _narrator(client).generate("look")

        assert exc_info.value.details["model"] == "test-model"

    def test_rate_limit(self) -> None:
        client = MagicMock()
        client.chat.completions.create.side_effect = openai.RateLimitError(
            "slow down",
            response=httpx.Response(429, request=_REQUEST),
            body=None,
        )

        with pytest.raises(AIRateLimitError):
            _narrator(client).generate("look")

    def test_retries_connection_errors(self) -> None:
        client = MagicMock()
        client.chat.completions.create.side_effect = [
            openai.APIConnectionError(request=_REQUEST),
            _response("Back online."),
        ]

        text = _narrator(client, max_retries=1).generate("look")

        assert text == "Back online."
        assert client.chat.completions.create.call_count == 2

    def test_is_a_narrative_generator(self) -> None:
        assert isinstance(_narrator(MagicMock()), NarrativeGenerator)


# =============================================================================
# SafeNarrator
# =============================================================================


class TestSafeNarrator:
    """Tests for the filler-on-failure wrapper."""

    def test_passes_text_through(self, make_narrator: type) -> None:
        assert SafeNarrator(make_narrator(["  A crow caws. "])).generate("p") == "A crow caws."

    @pytest.mark.parametrize("answer", ["", "  \n "])
    def test_blank_answer(self, make_narrator: type, answer: str) -> None:
        assert SafeNarrator(make_narrator([answer])).generate("p") == NEUTRAL_FILLER

    @pytest.mark.parametrize(
        "error",
        [AIConnectionError("down", model="m"), RuntimeError("boom")],
    )
    def test_failure(self, make_failing_narrator: type, error: Exception) -> None:
        inner = make_failing_narrator(error)

        assert SafeNarrator(inner).generate("p") == NEUTRAL_FILLER
        assert inner.calls == 1

    def test_custom_filler(self, make_failing_narrator: type) -> None:
        narrator = SafeNarrator(make_failing_narrator(RuntimeError()), filler="...")

        assert narrator.generate("p") == "..."


# =============================================================================
# Prompts
# =============================================================================


class TestPrompts:
    """Tests for the prompt builders."""

    def test_story_prompt(self) -> None:
        prompt = build_story_prompt(
            action="open the chest",
            summary="You found a chest.",
            stats="HP: 10, STR: 8, DEX: 12, INT: 10",
            location_name="Old cellar",
            location_description="Damp walls.",
            exits=["north", "up"],
            npcs=["Goblin"],
            inventory=["Torch"],
            language="Dutch",
        )

        assert '"open the chest"' in prompt
        assert "You found a chest." in prompt
        assert "Current location: Old cellar" in prompt
        assert "Exits: north, up" in prompt
        assert "present: Goblin" in prompt
        assert "Torch" in prompt
        assert prompt.endswith("Write in Dutch.")

    def test_story_prompt_empty_lists(self) -> None:
        prompt = build_story_prompt(
            action="wait",
            summary="",
            stats="HP: 1",
            location_name="Nowhere",
            location_description="",
            exits=[],
            npcs=[],
            inventory=[],
        )

        assert NO_ITEMS in prompt
        assert f"present: {NO_NPCS}" in prompt
        assert "(the adventure has just begun)" in prompt

    def test_location_prompt(self) -> None:
        prompt = build_location_prompt(direction="west", origin="Starting point", summary="It began.")

        assert "travels west from Starting point" in prompt
        assert prompt.endswith("Write in English.")
