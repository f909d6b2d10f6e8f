"""Tests for HP/Mana persistence and auto-heal writes."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import pytest

from tower_trials.core.exceptions import RpcResponseError, RpcTransportError
from tower_trials.models.character import Character

from conftest import FIXED_NOW


if TYPE_CHECKING:
    from conftest import FakeRpcTransport
    from tower_trials.services.container import ServiceContainer


def idle_character(seconds: int, **overrides: Any) -> Character:
    fields: dict[str, Any] = {
        "id": "c-1",
        "hp": 0,
        "max_hp": 1000,
        "mana": 0,
        "max_mana": 100,
        "last_activity": FIXED_NOW - timedelta(seconds=seconds),
    }
    fields.update(overrides)
    return Character(**fields)


class TestUpdateCharacterHpMana:
    """Tests for HealingService.update_character_hp_mana."""

    def test_values_are_floored(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that fractional values are floored before sending."""
        result = asyncio.run(services.healing.update_character_hp_mana("c-1", 150.7, 20.2))

        assert result.success
        assert rpc.calls_to("update_character_stats")[0].params == {
            "p_character_id": "c-1",
            "p_hp": 150,
            "p_mana": 20,
        }

    @pytest.mark.parametrize("hp", [-1, 10000, float("nan"), float("inf"), True, "50"])
    def test_invalid_values_rejected_before_rpc(
        self, services: ServiceContainer, rpc: FakeRpcTransport, hp: Any
    ) -> None:
        """Test that out-of-range or non-numeric values never reach the backend."""
        result = asyncio.run(services.healing.update_character_hp_mana("c-1", hp, 10))

        assert not result.success
        assert result.error_kind == "ValidationError"
        assert rpc.calls == []

    def test_missing_character_id(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that an empty id is rejected."""
        result = asyncio.run(services.healing.update_character_hp_mana("", 10, 10))

        assert not result.success
        assert rpc.calls == []

    def test_success_invalidates_character(
        self, services: ServiceContainer, rpc: FakeRpcTransport
    ) -> None:
        """Test that a write drops the cached character."""
        services.caches.characters.set("c-1", Character(id="c-1"))

        asyncio.run(services.healing.update_character_hp_mana("c-1", 10, None))

        assert services.caches.characters.get("c-1") is None

    def test_rpc_failure_is_reported(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that a backend error becomes a failed result."""
        rpc.respond("update_character_stats", RpcResponseError("denied"))

        result = asyncio.run(services.healing.update_character_hp_mana("c-1", 10, 10))

        assert not result.success
        assert result.error_kind == "RpcResponseError"


class TestApplyAutoHeal:
    """Tests for HealingService.apply_auto_heal."""

    def test_nothing_to_heal_sends_nothing(
        self, services: ServiceContainer, rpc: FakeRpcTransport
    ) -> None:
        """Test that a full character is not written."""
        character = idle_character(3600, hp=1000, mana=100)

        result = asyncio.run(services.healing.apply_auto_heal(character))

        assert result.success
        assert result.data is not None
        assert result.data.healed is False
        assert rpc.calls == []

    def test_heal_is_written_then_activity_refreshed(
        self, services: ServiceContainer, rpc: FakeRpcTransport
    ) -> None:
        """Test the write order and values after an hour of rest."""
        result = asyncio.run(services.healing.apply_auto_heal(idle_character(3600)))

        assert result.success
        assert result.data is not None
        assert result.data.healed is True
        assert result.data.new_hp == 500
        assert result.data.character.hp == 500
        assert result.data.character.last_activity == FIXED_NOW
        assert rpc.procedures() == ["update_character_stats", "update_character_last_activity"]
        assert rpc.calls[0].params["p_hp"] == 500

    def test_forced_heal(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test healing to max regardless of elapsed time."""
        result = asyncio.run(services.healing.apply_auto_heal(idle_character(0), True))

        assert result.data is not None
        assert (result.data.new_hp, result.data.new_mana) == (1000, 100)

    def test_activity_failure_does_not_fail_heal(
        self, services: ServiceContainer, rpc: FakeRpcTransport
    ) -> None:
        """Test that a failed last-activity refresh is only logged."""
        rpc.respond("update_character_last_activity", RpcTransportError("down"))

        result = asyncio.run(services.healing.apply_auto_heal(idle_character(3600)))

        assert result.success

    def test_write_failure_fails_heal(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that a failed HP/Mana write fails the heal."""
        rpc.respond("update_character_stats", RpcTransportError("down"))

        result = asyncio.run(services.healing.apply_auto_heal(idle_character(3600)))

        assert not result.success
        assert rpc.count("update_character_last_activity") == 0
