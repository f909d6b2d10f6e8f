"""Integration tests for checkpoints and attribute distribution through the hooks."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from tower_trials.engine.store import GameStateStore
from tower_trials.hooks.orchestrator import GameOrchestrator
from tower_trials.models.enums import GameMode
from tower_trials.models.progression import AttributeDistribution

from conftest import make_character_row


if TYPE_CHECKING:
    from conftest import FakeRpcTransport
    from tower_trials.services.container import ServiceContainer


WRITES = ("update_character_floor", "update_character_stats")


@pytest.fixture
def veteran_hooks(services: ServiceContainer, rpc: FakeRpcTransport) -> GameOrchestrator:
    """Provide an orchestrator in the hub with a character that reached floor 23."""
    rpc.respond(
        "get_character_full_stats",
        [make_character_row(floor=23, highest_floor=23, hp=20, mana=5)],
    )
    hooks = GameOrchestrator(services, GameStateStore())
    asyncio.run(hooks.select_character("char-1"))
    rpc.reset_calls()
    return hooks


class TestCheckpointFlow:
    """Tests for restarting from checkpoints."""

    def test_unlocked_checkpoints(self, veteran_hooks: GameOrchestrator) -> None:
        """Test listing checkpoints for the selected character."""
        result = asyncio.run(veteran_hooks.services.checkpoints.get_unlocked_checkpoints("char-1"))

        assert result.data is not None
        assert [checkpoint.floor for checkpoint in result.data] == [1, 5, 20]

    def test_start_from_unlocked_checkpoint(
        self, veteran_hooks: GameOrchestrator, rpc: FakeRpcTransport
    ) -> None:
        """Test moving to floor 20 healed to max."""
        result = asyncio.run(veteran_hooks.start_from_checkpoint(20))

        player = veteran_hooks.store.state.player
        assert result.success
        assert player is not None
        assert player.floor == 20
        assert player.hp == player.max_hp
        assert player.mana == player.max_mana
        assert veteran_hooks.store.state.mode == GameMode.HUB
        assert [call.procedure for call in rpc.calls if call.procedure in WRITES] == list(WRITES)

    def test_locked_checkpoint_surfaces_error(
        self, veteran_hooks: GameOrchestrator, rpc: FakeRpcTransport
    ) -> None:
        """Test that a locked checkpoint is reported and nothing is written."""
        commits_before = veteran_hooks.store.commit_count

        result = asyncio.run(veteran_hooks.start_from_checkpoint(30))

        assert not result.success
        assert result.error_kind == "InvalidCheckpointError"
        assert veteran_hooks.store.error
        assert veteran_hooks.store.commit_count == commits_before
        assert not any(call.procedure in WRITES for call in rpc.calls)

    def test_off_schedule_floor(
        self, veteran_hooks: GameOrchestrator, rpc: FakeRpcTransport
    ) -> None:
        """Test that a non-checkpoint floor fails before any backend call."""
        result = asyncio.run(veteran_hooks.start_from_checkpoint(15))

        assert result.error_kind == "InvalidCheckpointError"
        assert rpc.calls == []

    def test_successful_hook_clears_error(self, veteran_hooks: GameOrchestrator) -> None:
        """Test that a later success clears the previous error."""
        asyncio.run(veteran_hooks.start_from_checkpoint(30))
        asyncio.run(veteran_hooks.start_from_checkpoint(5))

        assert veteran_hooks.store.error is None


class TestAttributeFlow:
    """Tests for spending attribute points."""

    def test_distribute_and_refresh(
        self, veteran_hooks: GameOrchestrator, rpc: FakeRpcTransport
    ) -> None:
        """Test that the player is reloaded after distributing points."""
        rpc.respond("distribute_attribute_points", [{"success": True, "message": "Stronger!"}])
        rpc.respond(
            "get_character_full_stats",
            [make_character_row(floor=23, highest_floor=23, strength=15, attribute_points=0)],
        )

        result = asyncio.run(
            veteran_hooks.distribute_attribute_points(AttributeDistribution(strength=3))
        )

        player = veteran_hooks.store.state.player
        assert result.success
        assert player is not None
        assert player.strength == 15
        assert player.attribute_points == 0
        assert veteran_hooks.store.state.game_message == "Stronger!"
        assert rpc.count("update_character_stats") == 0

    def test_refused_distribution(
        self, veteran_hooks: GameOrchestrator, rpc: FakeRpcTransport
    ) -> None:
        """Test that a refusal leaves the player unchanged."""
        rpc.respond(
            "distribute_attribute_points",
            [{"success": False, "message": "Not enough points"}],
        )
        before = veteran_hooks.store.state.player

        result = asyncio.run(
            veteran_hooks.distribute_attribute_points(AttributeDistribution(luck=10))
        )

        assert not result.success
        assert veteran_hooks.store.error == "Not enough points"
        assert veteran_hooks.store.state.player == before
