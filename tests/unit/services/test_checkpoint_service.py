"""Tests for checkpoint and floor progression."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from tower_trials.core.exceptions import RpcResponseError

from conftest import make_character_row


if TYPE_CHECKING:
    from conftest import FakeRpcTransport
    from tower_trials.services.container import ServiceContainer


WRITES = ("update_character_floor", "update_character_stats")


@pytest.fixture
def veteran(rpc: FakeRpcTransport) -> None:
    """Script a character that reached floor 23."""
    rpc.respond(
        "get_character_full_stats",
        [make_character_row(floor=23, highest_floor=23, hp=10, mana=5)],
    )


class TestUpdateCharacterFloor:
    """Tests for CheckpointService.update_character_floor."""

    @pytest.mark.parametrize("floor", [0, -3, 1001])
    def test_out_of_range_rejected(
        self, services: ServiceContainer, rpc: FakeRpcTransport, floor: int
    ) -> None:
        """Test that floors outside 1..max_floor never reach the backend."""
        result = asyncio.run(services.checkpoints.update_character_floor("char-1", floor))

        assert result.error_kind == "ValidationError"
        assert rpc.calls == []

    def test_update(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test the RPC parameters."""
        result = asyncio.run(services.checkpoints.update_character_floor("char-1", 4))

        assert result.success
        assert rpc.calls[0].params == {"p_character_id": "char-1", "p_floor": 4}
        assert rpc.calls[0].read_only is False


class TestUnlockedCheckpoints:
    """Tests for CheckpointService.get_unlocked_checkpoints."""

    @pytest.mark.usefixtures("veteran")
    def test_floor_23(self, services: ServiceContainer) -> None:
        """Test the checkpoints of a character on floor 23."""
        result = asyncio.run(services.checkpoints.get_unlocked_checkpoints("char-1"))

        assert result.data is not None
        assert [checkpoint.floor for checkpoint in result.data] == [1, 5, 20]

    def test_fresh_character(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that a new character only has floor 1."""
        rpc.respond("get_character_full_stats", [make_character_row(floor=1, highest_floor=None)])

        result = asyncio.run(services.checkpoints.get_unlocked_checkpoints("char-1"))

        assert result.data is not None
        assert [checkpoint.floor for checkpoint in result.data] == [1]

    @pytest.mark.usefixtures("veteran")
    def test_ignores_stale_cache(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that checkpoints are computed from a fresh read."""
        asyncio.run(services.characters.get_character("char-1"))

        asyncio.run(services.checkpoints.get_unlocked_checkpoints("char-1"))

        assert rpc.count("get_character_full_stats") == 2


@pytest.mark.usefixtures("veteran")
class TestStartFromCheckpoint:
    """Tests for CheckpointService.start_from_checkpoint."""

    def test_moves_then_heals(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test the write order and the healed result."""
        result = asyncio.run(services.checkpoints.start_from_checkpoint("char-1", 20))

        assert result.success
        assert result.data is not None
        assert result.data.floor == 20
        assert result.data.hp == result.data.max_hp
        writes = [call for call in rpc.calls if call.procedure in WRITES]
        assert [call.procedure for call in writes] == list(WRITES)
        assert writes[1].params["p_hp"] == 100
        assert writes[1].params["p_mana"] == 40

    def test_not_a_checkpoint(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that an off-schedule floor fails before any backend call."""
        result = asyncio.run(services.checkpoints.start_from_checkpoint("char-1", 7))

        assert result.error_kind == "InvalidCheckpointError"
        assert rpc.calls == []

    def test_locked_checkpoint(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test that a checkpoint above the highest floor fails without writes."""
        result = asyncio.run(services.checkpoints.start_from_checkpoint("char-1", 30))

        assert result.error_kind == "InvalidCheckpointError"
        assert not any(call.procedure in WRITES for call in rpc.calls)

    def test_failed_floor_update_skips_heal(
        self, services: ServiceContainer, rpc: FakeRpcTransport
    ) -> None:
        """Test that no heal is sent when the floor change fails."""
        rpc.respond("update_character_floor", RpcResponseError("conflict"))

        result = asyncio.run(services.checkpoints.start_from_checkpoint("char-1", 20))

        assert not result.success
        assert rpc.count("update_character_stats") == 0

    def test_unwritable_heal_leaves_floor_alone(
        self, services: ServiceContainer, rpc: FakeRpcTransport
    ) -> None:
        """Test that a max HP above the write bound fails before the floor moves."""
        rpc.respond(
            "get_character_full_stats",
            [make_character_row(floor=23, highest_floor=23, hp=10, max_hp=12000)],
        )

        result = asyncio.run(services.checkpoints.start_from_checkpoint("char-1", 20))

        assert result.error_kind == "ValidationError"
        assert not any(call.procedure in WRITES for call in rpc.calls)

    def test_reset_progress(self, services: ServiceContainer, rpc: FakeRpcTransport) -> None:
        """Test resetting a character to floor 1 fully healed."""
        result = asyncio.run(services.checkpoints.reset_character_progress("char-1"))

        assert result.data is not None
        assert result.data.floor == 1
        assert rpc.calls_to("update_character_floor")[0].params["p_floor"] == 1
        assert rpc.count("update_character_stats") == 1
