"""Structured logging for the Tower Trials client core.

Every service logs through structlog with keyword context rather than
formatted strings, so a session can be followed by ``character_id``:

    >>> from tower_trials.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Battle initialized", character_id="c-1", floor=12)

The orchestrator binds the active character with ``bind_context`` when a
character is selected and clears it on return to the menu. Backend
credentials never reach the output: ``redact_secrets`` masks them wherever
they appear in an event.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from tower_trials.core.config import Settings


REDACTED = "***"

# Keys holding RPC credentials, compared case-insensitively.
SECRET_KEYS = frozenset({"api_key", "apikey", "authorization", "access_token"})

# Chatty libraries used under the RPC client.
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")

_app_context: dict[str, str] = {"app": "tower_trials"}


def _redact(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            key: REDACTED if str(key).lower() in SECRET_KEYS else _redact(item)
            for key, item in value.items()
        }
    return value


def redact_secrets(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Mask credential values, including inside logged headers and params.

    Returns:
        The event dictionary with secret values replaced.
    """
    return _redact(event_dict)


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag entries with the application name and version."""
    for key, value in _app_context.items():
        event_dict.setdefault(key, value)
    return event_dict


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
    app_name: str = "tower_trials",
    app_version: str | None = None,
) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        json_format: Render JSON lines instead of the colored console format.
        log_file: Optional path that also receives standard library records.
        app_name: Value of the ``app`` field on every entry.
        app_version: Value of the ``version`` field, omitted when None.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    _app_context.clear()
    _app_context["app"] = app_name
    if app_version:
        _app_context["version"] = app_version

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=numeric_level,
        stream=sys.stdout,
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        logging.getLogger().addHandler(file_handler)


def configure_logging_from_settings(settings: Settings, *, log_file: str | None = None) -> None:
    """Configure logging from application settings.

    Debug mode forces DEBUG and the console renderer; otherwise entries are
    JSON at the configured level.

    Args:
        settings: Application settings.
        log_file: Optional log file path.
    """
    configure_logging(
        level="DEBUG" if settings.debug else settings.log_level,
        json_format=not settings.debug,
        log_file=log_file,
        app_name=settings.app_name,
        app_version=settings.app_version,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind values included in every later entry of this context.

    Example:
        >>> bind_context(character_id="c-1")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "REDACTED",
    "redact_secrets",
    "add_app_context",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
