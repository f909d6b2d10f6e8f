"""Service result envelope.

Every service call returns a ``ServiceResult`` rather than raising, so the
orchestration layer can decide how a failure surfaces. ``error_kind`` keeps
the exception class name for callers that branch on the failure type.

Example:
    >>> result = ServiceResult.ok(checkpoints)
    >>> result.success
    True
    >>> ServiceResult.fail(InvalidCheckpointError("Locked", floor=30)).error_kind
    'InvalidCheckpointError'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Outcome of a service call.

    Attributes:
        data: Payload on success.
        error: Human-readable error on failure.
        error_kind: Exception class name that caused the failure.
    """

    data: T | None = None
    error: str | None = None
    error_kind: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, data: T | None = None) -> ServiceResult[T]:
        return cls(data=data)

    @classmethod
    def fail(cls, error: str | Exception) -> ServiceResult[T]:
        """Build a failed result.

        Args:
            error: Message, or the exception that caused the failure.

        Returns:
            ServiceResult with ``data`` unset.
        """
        if isinstance(error, Exception):
            message = getattr(error, "message", None) or str(error)
            return cls(error=message, error_kind=type(error).__name__)
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the payload or raise when the call failed.

        Returns:
            The payload.

        Raises:
            ValueError: If the result is a failure or carries no data.
        """
        if self.error is not None or self.data is None:
            raise ValueError(self.error or "Service result has no data")
        return self.data


__all__ = ["ServiceResult"]
