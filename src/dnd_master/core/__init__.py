"""Settings, logging and the exception hierarchy shared by every package.

Game tables and fixed strings live in `dnd_master.core.constants` and are
imported from there directly.
"""

from __future__ import annotations

from dnd_master.core.config import (
    AIProviderSettings,
    GameSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from dnd_master.core.exceptions import (
    AIConnectionError,
    AIControlError,
    AIRateLimitError,
    AIResponseError,
    CharacterStoreError,
    CombatError,
    ConfigurationError,
    DiceRollError,
    DndMasterError,
    GameEngineError,
    InvalidGameStateError,
    MapError,
    SessionPersistenceError,
    StorageError,
)
from dnd_master.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "DndMasterError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidGameStateError",
    "CombatError",
    "DiceRollError",
    "MapError",
    # AI control exceptions
    "AIControlError",
    "AIConnectionError",
    "AIResponseError",
    "AIRateLimitError",
    # Storage exceptions
    "StorageError",
    "SessionPersistenceError",
    "CharacterStoreError",
    # Configuration
    "ConfigurationError",
    "Settings",
    "AIProviderSettings",
    "StorageSettings",
    "GameSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
