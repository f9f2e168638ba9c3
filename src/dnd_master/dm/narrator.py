"""Narrative generation through an OpenAI-compatible chat endpoint.

The game treats the narrator as slow and unreliable: it may time out,
answer with nothing, or fail outright. `OpenAINarrator` reports those
failures as AIControlError; `SafeNarrator` turns every failure and every
blank answer into neutral filler text so gameplay never stops on it.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import openai
from openai import OpenAI
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from dnd_master.core.config import AIProviderSettings, get_settings
from dnd_master.core.constants import NEUTRAL_FILLER
from dnd_master.core.exceptions import (
    AIConnectionError,
    AIControlError,
    AIRateLimitError,
    AIResponseError,
)
from dnd_master.core.logging import get_logger
from dnd_master.dm.prompts import DM_SYSTEM_PROMPT


logger = get_logger(__name__)

# Local servers such as Ollama ignore the key but the client requires one.
PLACEHOLDER_API_KEY = "ollama"


@runtime_checkable
class NarrativeGenerator(Protocol):
    """Anything that turns a prompt into story text."""

    def generate(self, prompt: str) -> str:
        ...


class OpenAINarrator:
    """Narrator backed by the OpenAI chat completions API.

    The default settings point at a local Ollama server; any compatible
    endpoint works by changing ``ai.base_url`` and ``ai.model``.

    Args:
        settings: Endpoint settings; read from the environment when omitted.
        client: Pre-built client, mainly for tests.
    """

    def __init__(
        self,
        settings: AIProviderSettings | None = None,
        *,
        client: Any | None = None,
    ) -> None:
        self._settings = settings or get_settings().ai
        self._client = client
        self._request = retry(
            retry=retry_if_exception_type((openai.APIConnectionError, openai.APITimeoutError)),
            stop=stop_after_attempt(self._settings.max_retries + 1),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            reraise=True,
        )(self._complete)

        logger.info(
            "OpenAINarrator initialized",
            model=self._settings.model,
            base_url=self._settings.base_url,
        )

    @property
    def model(self) -> str:
        return self._settings.model

    def _get_client(self) -> Any:
        """Get or create the OpenAI client."""
        if self._client is None:
            api_key = PLACEHOLDER_API_KEY
            if self._settings.api_key:
                api_key = self._settings.api_key.get_secret_value()
            self._client = OpenAI(
                api_key=api_key,
                base_url=self._settings.base_url,
                timeout=self._settings.timeout_seconds,
                max_retries=0,
            )
        return self._client

    def _complete(self, prompt: str) -> str:
        response = self._get_client().chat.completions.create(
            model=self._settings.model,
            messages=[
                {"role": "system", "content": DM_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self._settings.temperature,
            max_tokens=self._settings.max_tokens,
        )
        if not response.choices:
            raise AIResponseError(
                "Narrative endpoint returned no choices",
                model=self._settings.model,
                provider=self._settings.base_url,
            )
        return (response.choices[0].message.content or "").strip()

    def generate(self, prompt: str) -> str:
        """Generate story text for a prompt.

        Args:
            prompt: The full prompt.

        Returns:
            The generated text, stripped; may be empty.

        Raises:
            AIConnectionError: If the endpoint is unreachable or times out.
            AIRateLimitError: If the endpoint rate limits the request.
            AIResponseError: If the endpoint rejects the request.
        """
        context = {"model": self._settings.model, "provider": self._settings.base_url}
        try:
            text = self._request(prompt)
        except (openai.APIConnectionError, openai.APITimeoutError) as e:
            raise AIConnectionError(f"Narrative endpoint unreachable: {e}", **context) from e
        except openai.RateLimitError as e:
            raise AIRateLimitError(f"Narrative endpoint rate limited: {e}", **context) from e
        except openai.APIError as e:
            raise AIResponseError(f"Narrative request failed: {e}", **context) from e

        logger.debug("Narrative generated", prompt_length=len(prompt), length=len(text))
        return text


class SafeNarrator:
    """Wraps a narrator so it always returns usable text.

    Args:
        inner: The narrator doing the real work.
        filler: Text returned on failure or blank output.
    """

    def __init__(self, inner: NarrativeGenerator, *, filler: str = NEUTRAL_FILLER) -> None:
        self._inner = inner
        self._filler = filler

    @property
    def filler(self) -> str:
        return self._filler

    def generate(self, prompt: str) -> str:
        try:
            text = self._inner.generate(prompt)
        except AIControlError as e:
            logger.warning("Narrator failed, using filler", error=e.message, **e.details)
            return self._filler
        except Exception:
            logger.exception("Unexpected narrator failure, using filler")
            return self._filler

        if not isinstance(text, str) or not text.strip():
            logger.info("Narrator returned no text, using filler")
            return self._filler
        return text.strip()


__all__ = [
    "NarrativeGenerator",
    "OpenAINarrator",
    "SafeNarrator",
]
