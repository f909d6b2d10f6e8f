"""Tests for floor data, monsters and consumables."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from tower_trials.core.exceptions import RpcTransportError
from tower_trials.models.enums import FloorType
from tower_trials.services.floors import build_fallback_floor, calculate_floor_rewards, floor_type_for
from tower_trials.services.monsters import build_fallback_enemy

from conftest import make_monster_row


if TYPE_CHECKING:
    from conftest import FakeClock, FakeRpcTransport
    from tower_trials.services.container import ServiceContainer


class TestFloorRules:
    """Tests for floor classification and rewards."""

    @pytest.mark.parametrize(
        ("floor", "expected"),
        [
            (1, FloorType.COMMON),
            (5, FloorType.BOSS),
            (10, FloorType.BOSS),
            (15, FloorType.ELITE),
            (23, FloorType.COMMON),
        ],
    )
    def test_floor_type(self, floor: int, expected: FloorType) -> None:
        """Test the floor type schedule."""
        assert floor_type_for(floor) == expected

    def test_fallback_floor(self) -> None:
        """Test generated floor data."""
        floor = build_fallback_floor(20)

        assert floor.type == FloorType.BOSS
        assert floor.is_checkpoint is True
        assert "Boss" in floor.description

    def test_rewards_scale_with_type(self) -> None:
        """Test reward multipliers."""
        assert calculate_floor_rewards(10, 4, FloorType.COMMON) == (10, 4)
        assert calculate_floor_rewards(10, 4, FloorType.BOSS) == (25, 10)
        assert calculate_floor_rewards(10, 4, FloorType.ELITE) == (18, 7)


class TestFloorService:
    """Tests for FloorService.get_floor_data."""

    def test_backend_row(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test floor data from the backend."""
        rpc.respond("get_floor_data", [{"type": "elite", "description": "Crystal hall"}])

        result = asyncio.run(services.floors.get_floor_data(7))

        assert result.data is not None
        assert result.data.floor_number == 7
        assert result.data.type == FloorType.ELITE

    def test_fallback_on_failure(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that a backend failure still yields floor data."""
        rpc.respond("get_floor_data", RpcTransportError("down"))

        result = asyncio.run(services.floors.get_floor_data(10))

        assert result.success
        assert result.data == build_fallback_floor(10)

    def test_out_of_range_is_clamped(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that floors below 1 are served as floor 1."""
        result = asyncio.run(services.floors.get_floor_data(-4))

        assert result.data is not None
        assert result.data.floor_number == 1
        assert rpc.calls[0].params == {"p_floor_number": 1}

    def test_cached(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test the floor cache."""
        asyncio.run(services.floors.get_floor_data(3))
        asyncio.run(services.floors.get_floor_data(3))

        assert rpc.count("get_floor_data") == 1


class TestMonsterService:
    """Tests for MonsterService."""

    def test_row_is_sanitized(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that monster rows become full-HP enemies."""
        rpc.respond("get_monster_for_floor", [make_monster_row(hp=40, atk=float("nan"))])

        result = asyncio.run(services.monsters.get_enemy_for_floor(3))

        assert result.data is not None
        assert result.data.name == "Goblin"
        assert result.data.hp == result.data.max_hp == 40
        assert result.data.attack == 1

    def test_fallback_when_backend_has_none(
        self, services: ServiceContainer, rpc: FakeRpcTransport
    ) -> None:
        """Test the generated enemy."""
        rpc.respond("get_monster_for_floor", [])

        result = asyncio.run(services.monsters.get_enemy_for_floor(10))

        assert result.data == build_fallback_enemy(10)
        assert result.data is not None
        assert result.data.is_boss is True

    @pytest.mark.parametrize("floor", [1, 5, 10, 15, 20, 23])
    def test_fallback_enemy_matches_floor_type(self, floor: int) -> None:
        """Test that generated bosses appear exactly on boss floors."""
        enemy = build_fallback_enemy(floor)

        assert enemy.is_boss is (build_fallback_floor(floor).type == FloorType.BOSS)

    @pytest.mark.parametrize("floor", [0, -1])
    def test_invalid_floor(self, services: ServiceContainer, rpc: FakeRpcTransport, floor: int) -> None:
        """Test that floors below 1 fail without an RPC."""
        result = asyncio.run(services.monsters.get_enemy_for_floor(floor))

        assert not result.success
        assert rpc.calls == []

    def test_callers_get_independent_copies(
        self, services: ServiceContainer, rpc: FakeRpcTransport, monster_row: dict[str, Any]
    ) -> None:
        """Test that mutating a returned enemy does not touch the cache."""
        rpc.respond("get_monster_for_floor", [monster_row])

        first = asyncio.run(services.monsters.get_enemy_for_floor(3)).unwrap()
        first.hp = 0
        second = asyncio.run(services.monsters.get_enemy_for_floor(3)).unwrap()

        assert second.hp == second.max_hp
        assert rpc.count("get_monster_for_floor") == 1

    def test_cache_expires(
        self,
        services: ServiceContainer,
        rpc: FakeRpcTransport,
        clock: FakeClock,
        monster_row: dict[str, Any],
    ) -> None:
        """Test the 30 second monster cache."""
        rpc.respond("get_monster_for_floor", [monster_row])

        asyncio.run(services.monsters.get_enemy_for_floor(3))
        clock.advance(30)
        asyncio.run(services.monsters.get_enemy_for_floor(3))

        assert rpc.count("get_monster_for_floor") == 2

    def test_preload_nearby_floors(
        self, services: ServiceContainer, rpc: FakeRpcTransport, monster_row: dict[str, Any]
    ) -> None:
        """Test warming the cache for the next floors."""
        rpc.respond("get_monster_for_floor", [monster_row])

        asyncio.run(services.monsters.preload_nearby_floors(4))

        assert sorted(call.params["p_floor"] for call in rpc.calls) == [5, 6]
        assert 5 in services.caches.monsters
        assert 6 in services.caches.monsters


class TestConsumableService:
    """Tests for ConsumableService.use_consumable."""

    def test_use(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test a successful use."""
        rpc.respond(
            "use_consumable",
            [{"success": True, "message": "Healed", "new_hp": 90, "new_mana": 30, "remaining_quantity": 2}],
        )

        result = asyncio.run(services.consumables.use_consumable("char-1", "potion-1"))

        assert result.data is not None
        assert result.data.new_hp == 90
        assert rpc.calls[0].params == {"p_character_id": "char-1", "p_consumable_id": "potion-1"}

    def test_refused(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test a backend refusal."""
        rpc.respond("use_consumable", [{"success": False, "message": "None left"}])

        result = asyncio.run(services.consumables.use_consumable("char-1", "potion-1"))

        assert result.error == "None left"

    def test_missing_id(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that an empty consumable id is rejected before any RPC."""
        result = asyncio.run(services.consumables.use_consumable("char-1", ""))

        assert result.error_kind == "ValidationError"
        assert rpc.calls == []
