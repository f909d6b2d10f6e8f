"""Pytest configuration and shared fixtures.

This module provides common fixtures for the Tower Trials test suite: a
controllable clock for the caches, a fixed wall clock for auto-heal and a
scripted in-memory RPC transport that records every call.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator

    from tower_trials.core.config import Settings
    from tower_trials.services.container import ServiceContainer


FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Test Doubles
# =============================================================================


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class RecordedCall:
    procedure: str
    params: dict[str, Any]
    read_only: bool


@dataclass
class FakeRpcTransport:
    """In-memory stored-procedure transport.

    Responses are scripted per procedure. A queue of several responses is
    consumed in order and its last element repeats; an exception in the
    queue is raised instead of returned. Unscripted procedures return None.
    Every call yields to the event loop once, so concurrent callers overlap.
    """

    calls: list[RecordedCall] = field(default_factory=list)
    responses: dict[str, list[Any]] = field(default_factory=dict)

    def respond(self, procedure: str, *results: Any) -> None:
        self.responses[procedure] = list(results)

    async def call(
        self,
        procedure: str,
        params: Mapping[str, Any] | None = None,
        *,
        read_only: bool = False,
    ) -> Any:
        self.calls.append(RecordedCall(procedure, dict(params or {}), read_only))
        await asyncio.sleep(0)
        queue = self.responses.get(procedure)
        if not queue:
            return None
        result = queue[0] if len(queue) == 1 else queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return copy.deepcopy(result)

    def calls_to(self, procedure: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.procedure == procedure]

    def count(self, procedure: str) -> int:
        return len(self.calls_to(procedure))

    def procedures(self) -> list[str]:
        return [call.procedure for call in self.calls]

    def reset_calls(self) -> None:
        self.calls.clear()


def make_character_row(**overrides: Any) -> dict[str, Any]:
    """Build a backend character row (wire field names).

    Args:
        **overrides: Fields to replace.

    Returns:
        A row as ``get_character_full_stats`` would return it.
    """
    row: dict[str, Any] = {
        "id": "char-1",
        "user_id": "user-1",
        "name": "Aria",
        "level": 5,
        "xp": 120,
        "xp_next_level": 200,
        "gold": 50,
        "hp": 80,
        "max_hp": 100,
        "mana": 30,
        "max_mana": 40,
        "atk": 12,
        "def": 7,
        "speed": 9,
        "strength": 12,
        "dexterity": 11,
        "intelligence": 10,
        "wisdom": 10,
        "vitality": 13,
        "luck": 10,
        "attribute_points": 3,
        "floor": 3,
        "highest_floor": 3,
        "is_alive": True,
        "last_activity": None,
    }
    row.update(overrides)
    return row


def make_monster_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": "monster-goblin",
        "name": "Goblin",
        "level": 2,
        "hp": 40,
        "atk": 8,
        "def": 3,
        "speed": 6,
        "mana": 0,
        "behavior": "aggressive",
        "reward_xp": 12,
        "reward_gold": 6,
    }
    row.update(overrides)
    return row


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from tower_trials.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    """Provide default settings independent of the environment."""
    from tower_trials.core.config import Settings

    return Settings()


# =============================================================================
# Runtime Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rpc() -> FakeRpcTransport:
    return FakeRpcTransport()


@pytest.fixture
def services(rpc: FakeRpcTransport, settings: Settings, clock: FakeClock) -> ServiceContainer:
    """Provide services wired to the fake transport and clocks."""
    from tower_trials.services.container import ServiceContainer

    return ServiceContainer.create(rpc, settings=settings, clock=clock, now=lambda: FIXED_NOW)


@pytest.fixture
def character_row() -> dict[str, Any]:
    return make_character_row()


@pytest.fixture
def monster_row() -> dict[str, Any]:
    return make_monster_row()
