"""Configuration management for DnD Master AI.

Settings come from environment variables and an optional .env file, one
BaseSettings class per concern. API keys are held as SecretStr.

Example:
    >>> from dnd_master.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.game.summary_max_length)
    1200

Environment Variables:
    DND_MASTER_AI_BASE_URL: OpenAI-compatible endpoint for narrative text
    DND_MASTER_AI_MODEL: Model used for narrative text
    DND_MASTER_AI_API_KEY: API key for the endpoint (optional for local servers)
    DND_MASTER_DATA_PATH: Root directory for saved characters and sessions
    DND_MASTER_GAME_SEED: Fixed seed for reproducible dice
    DND_MASTER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dnd_master.core.exceptions import ConfigurationError


class AIProviderSettings(BaseSettings):
    """Configuration for the narrative generator endpoint.

    The defaults target a local Ollama server through its OpenAI-compatible
    API, so the game runs without any hosted account.

    Attributes:
        api_key: API key for the endpoint. Local servers accept any value.
        base_url: Base URL of the OpenAI-compatible API.
        model: Model identifier used for narrative requests.
        temperature: Sampling temperature.
        max_tokens: Upper bound on generated tokens per request.
        max_retries: Retry attempts on connection errors and timeouts.
        timeout_seconds: Per-request timeout; slow answers become filler text.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_MASTER_AI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: SecretStr | None = Field(
        default=None,
        description="API key for the narrative endpoint",
    )
    base_url: str = Field(
        default="http://localhost:11434/v1",
        description="OpenAI-compatible base URL",
    )
    model: str = Field(
        default="llama3",
        description="Narrative model",
    )
    temperature: float = Field(
        default=0.8,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    max_tokens: int = Field(
        default=400,
        ge=16,
        le=4096,
        description="Maximum generated tokens",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Maximum retry attempts",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Request timeout",
    )


class StorageSettings(BaseSettings):
    """Configuration for file storage paths.

    Attributes:
        data_path: Root data directory.
        characters_path: Directory holding one JSON file per character;
            defaults to ``<data_path>/characters``.
        session_file: JSON file holding the last session; defaults to
            ``<data_path>/session.json``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_MASTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_path: Path = Field(
        default=Path("data"),
        description="Root data directory",
    )
    characters_path: Path = Field(
        default=Path("data/characters"),
        description="Directory for character records",
    )
    session_file: Path = Field(
        default=Path("data/session.json"),
        description="Session record file",
    )

    @model_validator(mode="before")
    @classmethod
    def derive_paths_from_data_path(cls, data: Any) -> Any:
        if isinstance(data, dict):
            root = Path(data.get("data_path") or "data")
            data = {
                "characters_path": root / "characters",
                "session_file": root / "session.json",
                **data,
            }
        return data

    @field_validator("data_path", "characters_path", mode="after")
    @classmethod
    def ensure_directory_exists(cls, value: Path) -> Path:
        """Ensure storage directories exist, creating them if necessary.

        Args:
            value: The path to validate and potentially create.

        Returns:
            The validated path.
        """
        value.mkdir(parents=True, exist_ok=True)
        return value


class GameSettings(BaseSettings):
    """Configuration for game engine behavior.

    Attributes:
        summary_max_length: Character budget of the rolling summary.
        loot_chance: Probability that an encounter carries loot.
        revive_hp: HP the player wakes up with after a defeat.
        clear_inventory_on_defeat: Whether a defeat empties the inventory.
        narrative_language: Language the narrator is asked to answer in.
        seed: Optional fixed seed for the dice.
        vocabulary_file: Optional JSON file with extra command synonyms.
        max_combat_turns: Safety bound on the number of turns in one fight.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_MASTER_GAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    summary_max_length: int = Field(
        default=1200,
        ge=100,
        le=20000,
        description="Rolling summary budget in characters",
    )
    loot_chance: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Chance an encounter drops loot",
    )
    revive_hp: int = Field(
        default=1,
        ge=1,
        description="HP after a defeat",
    )
    clear_inventory_on_defeat: bool = Field(
        default=True,
        description="Empty the inventory on defeat",
    )
    narrative_language: str = Field(
        default="English",
        min_length=1,
        description="Language of generated narrative",
    )
    seed: int | None = Field(
        default=None,
        description="Fixed dice seed",
    )
    vocabulary_file: Path | None = Field(
        default=None,
        description="Extra command synonyms (JSON)",
    )
    max_combat_turns: int = Field(
        default=1000,
        ge=10,
        description="Maximum turns in a single fight",
    )

    @model_validator(mode="after")
    def validate_vocabulary_file(self) -> "GameSettings":
        """Ensure a configured vocabulary file exists.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the vocabulary file is missing.
        """
        if self.vocabulary_file is not None and not self.vocabulary_file.is_file():
            raise ConfigurationError(
                f"Vocabulary file not found: {self.vocabulary_file}",
                config_key="vocabulary_file",
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        debug: Log at DEBUG regardless of ``log_level``.
        log_level: Application logging level.
        log_json: Render logs as JSON instead of console output.
        log_file: Optional log file path.
        ai: Narrative generator settings.
        storage: File storage settings.
        game: Game engine settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_MASTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    debug: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="JSON log output",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path",
    )

    ai: AIProviderSettings = Field(default_factory=AIProviderSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    game: GameSettings = Field(default_factory=GameSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "AIProviderSettings",
    "StorageSettings",
    "GameSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
