"""Tests for in-flight request deduplication."""

from __future__ import annotations

import asyncio

from tower_trials.storage.inflight import InFlightRegistry


class TestInFlightRegistry:
    """Tests for InFlightRegistry."""

    def test_concurrent_callers_share_one_run(self) -> None:
        """Test that overlapping calls for one key run the factory once."""
        registry: InFlightRegistry[str, int] = InFlightRegistry()
        runs = 0

        async def work() -> int:
            nonlocal runs
            runs += 1
            await asyncio.sleep(0)
            return 42

        async def scenario() -> list[int]:
            return await asyncio.gather(*(registry.run("k", work) for _ in range(3)))

        assert asyncio.run(scenario()) == [42, 42, 42]
        assert runs == 1
        assert len(registry) == 0

    def test_different_keys_run_separately(self) -> None:
        """Test that keys do not share runs."""
        registry: InFlightRegistry[str, str] = InFlightRegistry()

        async def scenario() -> list[str]:
            async def echo(value: str) -> str:
                await asyncio.sleep(0)
                return value

            return await asyncio.gather(
                registry.run("a", lambda: echo("a")),
                registry.run("b", lambda: echo("b")),
            )

        assert asyncio.run(scenario()) == ["a", "b"]

    def test_key_released_after_completion(self) -> None:
        """Test that a finished run does not serve later callers."""
        registry: InFlightRegistry[str, int] = InFlightRegistry()
        runs = 0

        async def work() -> int:
            nonlocal runs
            runs += 1
            return runs

        async def scenario() -> tuple[int, int]:
            first = await registry.run("k", work)
            second = await registry.run("k", work)
            return first, second

        assert asyncio.run(scenario()) == (1, 2)

    def test_exception_shared_and_released(self) -> None:
        """Test that every joined caller sees the failure and the key is freed."""
        registry: InFlightRegistry[str, int] = InFlightRegistry()

        async def fail() -> int:
            await asyncio.sleep(0)
            raise RuntimeError("boom")

        async def scenario() -> list[BaseException | int]:
            return await asyncio.gather(
                registry.run("k", fail),
                registry.run("k", fail),
                return_exceptions=True,
            )

        results = asyncio.run(scenario())

        assert all(isinstance(result, RuntimeError) for result in results)
        assert not registry.is_pending("k")

    def test_is_pending_while_running(self) -> None:
        """Test pending state during a run."""
        registry: InFlightRegistry[str, bool] = InFlightRegistry()

        async def scenario() -> bool:
            gate = asyncio.Event()

            async def wait() -> bool:
                await gate.wait()
                return True

            task = asyncio.ensure_future(registry.run("k", wait))
            await asyncio.sleep(0)
            pending = registry.is_pending("k")
            gate.set()
            await task
            return pending

        assert asyncio.run(scenario()) is True
