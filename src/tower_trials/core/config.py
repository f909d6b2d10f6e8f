"""Configuration management for the Tower Trials client core.

Settings are loaded with pydantic-settings from environment variables and an
optional ``.env`` file. Secrets (the backend API key) are held in SecretStr.

Example:
    >>> from tower_trials.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.cache.character_ttl_seconds
    30.0

Environment Variables:
    TOWER_TRIALS_RPC_BASE_URL: Backend base URL (PostgREST-style RPC endpoint)
    TOWER_TRIALS_RPC_API_KEY: Backend anon/service API key
    TOWER_TRIALS_CACHE_CHARACTER_TTL_SECONDS: Character cache lifetime
    TOWER_TRIALS_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tower_trials.core.exceptions import ConfigurationError


class RpcSettings(BaseSettings):
    """Configuration for the backend RPC connection.

    Attributes:
        base_url: Root URL of the backend (``/rest/v1/rpc`` is appended).
        api_key: API key sent as ``apikey`` and bearer token.
        timeout_seconds: Per-request timeout.
        max_retries: Retry attempts for read-only procedures on transport errors.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOWER_TRIALS_RPC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:54321",
        description="Backend base URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Backend API key",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="RPC request timeout",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retry attempts for read-only procedures",
    )

    @field_validator("base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the base URL so paths can be appended safely.

        Args:
            value: The configured URL.

        Returns:
            The URL without trailing slashes.

        Raises:
            ConfigurationError: If the URL has no http(s) scheme.
        """
        if not value.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"base_url must start with http:// or https:// (got {value!r})",
                config_key="base_url",
            )
        return value.rstrip("/")


class CacheSettings(BaseSettings):
    """Lifetimes and limits for the client caches.

    Attributes:
        character_ttl_seconds: Character record lifetime.
        user_characters_ttl_seconds: Per-user character list lifetime.
        monster_ttl_seconds: Monster-by-floor lifetime.
        floor_ttl_seconds: Floor data lifetime.
        spells_ttl_seconds: Equipped spells lifetime.
        ranking_ttl_seconds: Global ranking page lifetime.
        user_ranking_ttl_seconds: Per-user ranking history/stats lifetime.
        max_character_entries: Size at which expired character entries are swept.
        clear_throttle_seconds: Minimum gap between effective global clears.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOWER_TRIALS_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    character_ttl_seconds: float = Field(default=30.0, gt=0, description="Character TTL")
    user_characters_ttl_seconds: float = Field(default=15.0, gt=0, description="User list TTL")
    monster_ttl_seconds: float = Field(default=30.0, gt=0, description="Monster TTL")
    floor_ttl_seconds: float = Field(default=30.0, gt=0, description="Floor TTL")
    spells_ttl_seconds: float = Field(default=30.0, gt=0, description="Equipped spells TTL")
    ranking_ttl_seconds: float = Field(default=120.0, gt=0, description="Global ranking TTL")
    user_ranking_ttl_seconds: float = Field(default=300.0, gt=0, description="User ranking TTL")
    max_character_entries: int = Field(
        default=100,
        ge=1,
        description="Entry count that triggers an expired-entry sweep",
    )
    clear_throttle_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Minimum seconds between effective global cache clears",
    )


class GameSettings(BaseSettings):
    """Configuration for client-side game rules.

    Attributes:
        heal_duration_seconds: Time for auto-heal to go from 0.1% to 100%.
        hp_mana_upper_bound: Largest HP/Mana value accepted client-side.
        max_floor: Highest floor number that can be requested.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOWER_TRIALS_GAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    heal_duration_seconds: int = Field(
        default=7200,
        ge=1,
        description="Seconds for a full auto-heal",
    )
    hp_mana_upper_bound: int = Field(
        default=9999,
        ge=1,
        description="Upper bound for HP/Mana writes",
    )
    max_floor: int = Field(
        default=1000,
        ge=1,
        description="Highest floor number",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        rpc: Backend connection settings.
        cache: Cache lifetimes.
        game: Client game rules.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOWER_TRIALS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="Tower Trials", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    rpc: RpcSettings = Field(default_factory=RpcSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    game: GameSettings = Field(default_factory=GameSettings)

    @model_validator(mode="after")
    def validate_user_list_ttl(self) -> "Settings":
        """Ensure user character lists never outlive the characters they hold.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the list TTL exceeds the character TTL.
        """
        if self.cache.user_characters_ttl_seconds > self.cache.character_ttl_seconds:
            raise ConfigurationError(
                "user_characters_ttl_seconds must not exceed character_ttl_seconds",
                config_key="cache.user_characters_ttl_seconds",
            )
        return self


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
    """Clear the settings cache, forcing a reload on next access.

    Example:
        >>> clear_settings_cache()
        >>> settings = get_settings()  # Reloads from environment
    """
    get_settings.cache_clear()


__all__ = [
    "RpcSettings",
    "CacheSettings",
    "GameSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
