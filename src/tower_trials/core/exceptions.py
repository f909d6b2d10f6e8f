"""Custom exception hierarchy for the Tower Trials client core.

All exceptions inherit from TowerTrialsError so the orchestration layer can
catch every domain failure at the hook boundary while keeping the
domain-specific context in ``details``.

Example:
    >>> from tower_trials.core.exceptions import InvalidCheckpointError
    >>> raise InvalidCheckpointError("Floor is not a checkpoint", floor=7)
"""

from __future__ import annotations

from typing import Any


class TowerTrialsError(Exception):
    """Base exception for all Tower Trials errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# RPC Exceptions
# =============================================================================


class RpcError(TowerTrialsError):
    """Base exception for failures talking to the backend stored procedures."""

    def __init__(
        self,
        message: str,
        *,
        procedure: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize RPC error with the procedure name.

        Args:
            message: Human-readable error description.
            procedure: Name of the stored procedure that failed.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if procedure:
            combined_details["procedure"] = procedure
        super().__init__(message, details=combined_details)


class RpcTransportError(RpcError):
    """Raised when the request never produced a response (network, timeout).

    Only this class is retried, and only for read-only procedures.
    """


class RpcResponseError(RpcError):
    """Raised when the backend answered with an error payload."""

    def __init__(
        self,
        message: str,
        *,
        procedure: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize response error with HTTP status context.

        Args:
            message: Human-readable error description.
            procedure: Name of the stored procedure that failed.
            status_code: HTTP status code returned by the backend.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if status_code is not None:
            combined_details["status_code"] = status_code
        super().__init__(message, procedure=procedure, details=combined_details)


# =============================================================================
# Game Engine Exceptions
# =============================================================================


class GameEngineError(TowerTrialsError):
    """Base exception for client game engine errors."""


class InvalidGameStateError(GameEngineError):
    """Raised when a store update would break a game state invariant.

    Examples are entering battle without an enemy or an illegal mode change.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current state identifier.
            expected_states: List of states that would have been valid.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class CacheError(TowerTrialsError):
    """Raised when a cache is used incorrectly (unknown name, bad TTL)."""


# =============================================================================
# Configuration / Validation Exceptions
# =============================================================================


class ConfigurationError(TowerTrialsError):
    """Raised when application configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(TowerTrialsError):
    """Raised when client-side input validation rejects a request.

    Validation failures are raised before any RPC is sent.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


class InvalidCheckpointError(ValidationError):
    """Raised when a checkpoint floor is not valid or not yet unlocked."""

    def __init__(
        self,
        message: str,
        *,
        floor: int | None = None,
        highest_floor: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize checkpoint error with floor context.

        Args:
            message: Human-readable error description.
            floor: The requested checkpoint floor.
            highest_floor: The character's highest reached floor, if known.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if highest_floor is not None:
            combined_details["highest_floor"] = highest_floor
        super().__init__(
            message,
            field_name="floor",
            invalid_value=floor,
            details=combined_details,
        )


__all__ = [
    "TowerTrialsError",
    "RpcError",
    "RpcTransportError",
    "RpcResponseError",
    "GameEngineError",
    "InvalidGameStateError",
    "CacheError",
    "ConfigurationError",
    "ValidationError",
    "InvalidCheckpointError",
]
