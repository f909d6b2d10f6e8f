"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        TowerTrialsError: Base exception for all application errors.
        RpcError, RpcTransportError, RpcResponseError: Backend call failures.
        InvalidGameStateError: Game state invariant violations.
        ValidationError, InvalidCheckpointError: Client-side input rejection.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        configure_logging_from_settings: Set up logging from Settings.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from tower_trials.core.config import (
    CacheSettings,
    GameSettings,
    RpcSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from tower_trials.core.exceptions import (
    CacheError,
    ConfigurationError,
    GameEngineError,
    InvalidCheckpointError,
    InvalidGameStateError,
    RpcError,
    RpcResponseError,
    RpcTransportError,
    TowerTrialsError,
    ValidationError,
)
from tower_trials.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)


__all__ = [
    # Base exception
    "TowerTrialsError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    "InvalidCheckpointError",
    # RPC exceptions
    "RpcError",
    "RpcTransportError",
    "RpcResponseError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidGameStateError",
    "CacheError",
    # Configuration
    "Settings",
    "RpcSettings",
    "CacheSettings",
    "GameSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
