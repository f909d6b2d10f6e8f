"""RPC transport protocol.

Services depend on this protocol rather than on a concrete client, so tests
and alternative backends can plug in any object with a matching ``call``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RpcTransport(Protocol):
    """Invoke a backend stored procedure by name."""

    async def call(
        self,
        procedure: str,
        params: Mapping[str, Any] | None = None,
        *,
        read_only: bool = False,
    ) -> Any:
        """Invoke a stored procedure.

        Args:
            procedure: Stored procedure name.
            params: Named parameters (``p_`` prefixed).
            read_only: Whether the procedure has no side effects; only
                read-only calls may be retried.

        Returns:
            The decoded JSON result.

        Raises:
            RpcTransportError: If no response was received.
            RpcResponseError: If the backend returned an error.
        """
        ...


__all__ = ["RpcTransport"]
