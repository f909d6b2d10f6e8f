"""Per-key deduplication of concurrent async operations.

When an operation for a key is already running, later callers await the
same task instead of starting a second one, and all of them observe the same
result or exception. The key is released as soon as the operation finishes,
so the next call after completion starts fresh.

Example:
    >>> inflight = InFlightRegistry[tuple[str, str], GameState]()
    >>> await inflight.run(("battle", character_id), lambda: start_battle(character_id))
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

from tower_trials.core.logging import get_logger


logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


class InFlightRegistry(Generic[K, T]):
    """Share one running task per key between concurrent callers."""

    def __init__(self) -> None:
        self._pending: dict[K, asyncio.Task[T]] = {}

    async def _run_and_release(self, key: K, factory: Callable[[], Awaitable[T]]) -> T:
        try:
            return await factory()
        finally:
            self._pending.pop(key, None)

    async def run(self, key: K, factory: Callable[[], Awaitable[T]]) -> T:
        """Run ``factory`` for ``key`` or join the run already in progress.

        Args:
            key: Operation identity.
            factory: Zero-argument callable returning the awaitable to run.

        Returns:
            The shared result.

        Raises:
            Exception: Whatever the shared operation raised.
        """
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run_and_release(key, factory))
            self._pending[key] = task
        else:
            logger.debug("Joining in-flight operation", key=str(key))
        # Shielded so one cancelled caller does not cancel the shared task.
        return await asyncio.shield(task)

    def is_pending(self, key: K) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)


__all__ = ["InFlightRegistry"]
