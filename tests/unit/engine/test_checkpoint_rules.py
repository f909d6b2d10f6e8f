"""Tests for the checkpoint schedule."""

from __future__ import annotations

import pytest

from tower_trials.engine.checkpoints import (
    build_checkpoints,
    is_checkpoint_unlocked,
    is_valid_checkpoint_floor,
)


class TestCheckpointSchedule:
    """Tests for is_valid_checkpoint_floor."""

    @pytest.mark.parametrize("floor", [1, 5, 20, 30, 100, 990])
    def test_checkpoint_floors(self, floor: int) -> None:
        """Test floors on the schedule."""
        assert is_valid_checkpoint_floor(floor)

    @pytest.mark.parametrize("floor", [0, 2, 7, 10, 15, 25, 31])
    def test_other_floors(self, floor: int) -> None:
        """Test floors off the schedule (10 is a boss floor, not a checkpoint)."""
        assert not is_valid_checkpoint_floor(floor)


class TestBuildCheckpoints:
    """Tests for build_checkpoints."""

    def test_fresh_character(self) -> None:
        """Test that a fresh character only has floor 1."""
        assert [c.floor for c in build_checkpoints(1)] == [1]

    def test_floor_23(self) -> None:
        """Test the checkpoints unlocked at floor 23."""
        assert [c.floor for c in build_checkpoints(23)] == [1, 5, 20]

    def test_floor_45(self) -> None:
        """Test the decade checkpoints."""
        assert [c.floor for c in build_checkpoints(45)] == [1, 5, 20, 30, 40]

    def test_ascending_and_all_valid(self) -> None:
        """Test ordering and validity for a long run."""
        floors = [c.floor for c in build_checkpoints(250)]

        assert floors == sorted(floors)
        assert all(is_valid_checkpoint_floor(floor) for floor in floors)
        assert all(floor <= 250 for floor in floors)

    def test_descriptions(self) -> None:
        """Test that each checkpoint has a description."""
        checkpoints = build_checkpoints(20)

        assert checkpoints[0].description.startswith("Floor 1")
        assert all(c.description for c in checkpoints)


class TestIsCheckpointUnlocked:
    """Tests for is_checkpoint_unlocked."""

    def test_reached_checkpoint(self) -> None:
        """Test a checkpoint below the highest floor."""
        assert is_checkpoint_unlocked(20, 23)

    def test_locked_checkpoint(self) -> None:
        """Test a checkpoint above the highest floor."""
        assert not is_checkpoint_unlocked(30, 23)

    def test_floor_one_always_unlocked(self) -> None:
        """Test that floor 1 is always available."""
        assert is_checkpoint_unlocked(1, 1)

    def test_non_checkpoint_floor(self) -> None:
        """Test that reached floors off the schedule are rejected."""
        assert not is_checkpoint_unlocked(7, 23)
