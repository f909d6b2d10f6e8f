"""Shared plumbing for the stored-procedure services."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from tower_trials.core.logging import get_logger


if TYPE_CHECKING:
    from tower_trials.rpc.transport import RpcTransport
    from tower_trials.storage.cache import CacheRegistry

logger = get_logger(__name__)


def first_row(data: Any) -> Mapping[str, Any] | None:
    """Unwrap a single-row RPC result.

    Procedures returning ``SETOF`` come back as lists; scalar-row procedures
    come back as objects.

    Args:
        data: Decoded RPC result.

    Returns:
        The first row, or None if there is none.
    """
    if isinstance(data, list):
        data = data[0] if data else None
    if isinstance(data, Mapping):
        return data
    return None


def rows(data: Any) -> list[Mapping[str, Any]]:
    """Normalize a multi-row RPC result into a list of mappings."""
    if data is None:
        return []
    if isinstance(data, Mapping):
        return [data]
    return [row for row in data if isinstance(row, Mapping)]


class BaseService:
    """Base class holding the transport and the session caches.

    Attributes:
        rpc: Stored procedure transport.
        caches: Session cache registry.
    """

    def __init__(self, rpc: RpcTransport, caches: CacheRegistry) -> None:
        self.rpc = rpc
        self.caches = caches

    async def _call(
        self,
        procedure: str,
        params: Mapping[str, Any] | None = None,
        *,
        read_only: bool = False,
    ) -> Any:
        """Invoke a procedure, logging failures before they propagate.

        Raises:
            RpcError: Propagated from the transport.
        """
        try:
            return await self.rpc.call(procedure, params, read_only=read_only)
        except Exception as exc:
            logger.warning(
                "RPC failed",
                service=type(self).__name__,
                procedure=procedure,
                error=str(exc),
            )
            raise


__all__ = ["BaseService", "first_row", "rows"]
