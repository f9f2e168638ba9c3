"""Exception hierarchy for DnD Master AI.

Everything raised on purpose derives from DndMasterError, so the session
controller can contain failures at one boundary and still log what went
wrong. Domain subclasses accept their context as keyword arguments and
fold it into ``details``:

    DndMasterError
    ├── GameEngineError
    │   ├── InvalidGameStateError
    │   ├── CombatError
    │   ├── DiceRollError
    │   └── MapError
    ├── AIControlError
    │   ├── AIConnectionError
    │   ├── AIResponseError
    │   └── AIRateLimitError
    ├── StorageError
    │   ├── SessionPersistenceError
    │   └── CharacterStoreError
    └── ConfigurationError

Example:
    >>> from dnd_master.core.exceptions import DiceRollError
    >>> raise DiceRollError("Invalid die", expression="1d0")
"""

from __future__ import annotations

from typing import Any


def _with_context(details: dict[str, Any] | None, **context: Any) -> dict[str, Any]:
    """Merge keyword context into a copy of ``details``, skipping unset values."""
    merged = dict(details or {})
    merged.update({key: value for key, value in context.items() if value not in (None, "", [], ())})
    return merged


class DndMasterError(Exception):
    """Base exception for all DnD Master AI errors.

    Attributes:
        message: Human-readable error description.
        details: Context for logging, e.g. ``{"path": "data/session.json"}``.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = dict(details or {})
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} [{context}]"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Game Engine
# =============================================================================


class GameEngineError(DndMasterError):
    """Failure inside the game rules: dice, map, combat or controller state."""


class InvalidGameStateError(GameEngineError):
    """The session controller was asked to act in a state that forbids it.

    Args:
        message: What was attempted.
        current_state: Controller state at the time.
        expected_states: States in which the action is allowed.
        details: Extra context.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            details=_with_context(details, current_state=current_state, expected_states=expected_states),
        )


class CombatError(GameEngineError):
    """A fight could not be resolved (defeated attacker, runaway fight)."""

    def __init__(
        self,
        message: str,
        *,
        combatant: str | None = None,
        turn_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            details=_with_context(details, combatant=combatant, turn_number=turn_number),
        )


class DiceRollError(GameEngineError):
    """A die or dice expression cannot be rolled."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, expression=expression))


class MapError(GameEngineError):
    """The location graph is missing a location or holds inconsistent data."""

    def __init__(
        self,
        message: str,
        *,
        location_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, location_key=location_key))


# =============================================================================
# Narrative Generator
# =============================================================================


class AIControlError(DndMasterError):
    """The narrative endpoint failed.

    Args:
        message: What went wrong.
        model: Model the request was for.
        provider: Base URL of the endpoint.
        details: Extra context.
    """

    def __init__(
        self,
        message: str,
        *,
        model: str | None = None,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, model=model, provider=provider))


class AIConnectionError(AIControlError):
    """The endpoint could not be reached or timed out."""


class AIResponseError(AIControlError):
    """The endpoint rejected the request or answered with nothing usable."""


class AIRateLimitError(AIControlError):
    """The endpoint kept rate limiting the request."""

    def __init__(
        self,
        message: str,
        *,
        retry_after_seconds: float | None = None,
        model: str | None = None,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            model=model,
            provider=provider,
            details=_with_context(details, retry_after_seconds=retry_after_seconds),
        )


# =============================================================================
# Storage
# =============================================================================


class StorageError(DndMasterError):
    """A character or session file could not be written or removed."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, path=path))


class SessionPersistenceError(StorageError):
    """The session file could not be written or removed."""


class CharacterStoreError(StorageError):
    """A character record could not be written or removed."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(DndMasterError):
    """Settings or the vocabulary file are invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, config_key=config_key))


__all__ = [
    "DndMasterError",
    # Game engine
    "GameEngineError",
    "InvalidGameStateError",
    "CombatError",
    "DiceRollError",
    "MapError",
    # Narrative generator
    "AIControlError",
    "AIConnectionError",
    "AIResponseError",
    "AIRateLimitError",
    # Storage
    "StorageError",
    "SessionPersistenceError",
    "CharacterStoreError",
    # Configuration
    "ConfigurationError",
]
