"""Tests for the auto-heal calculation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tower_trials.engine.healing import (
    HealAmounts,
    calculate_auto_heal,
    elapsed_seconds,
    heal_stat,
)
from tower_trials.models.character import Character


NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
DURATION = 7200


def make_character(*, hp: int, max_hp: int, mana: int, max_mana: int, idle_seconds: int | None) -> Character:
    return Character(
        id="c-1",
        hp=hp,
        max_hp=max_hp,
        mana=mana,
        max_mana=max_mana,
        last_activity=None if idle_seconds is None else NOW - timedelta(seconds=idle_seconds),
    )


class TestHealStat:
    """Tests for heal_stat."""

    def test_full_window_reaches_max(self) -> None:
        """Test that the whole heal window restores exactly the maximum."""
        assert heal_stat(0, 100, DURATION, DURATION) == 100
        assert heal_stat(0, 1000, DURATION, DURATION) == 1000

    def test_half_window(self) -> None:
        """Test linear regeneration over half the window."""
        assert heal_stat(0, 1000, DURATION // 2, DURATION) == 500

    def test_minimum_floor_applied(self) -> None:
        """Test that the current percentage is first raised to 0.1%."""
        assert heal_stat(0, 5000, 1, DURATION) == 5

    def test_floored_once_from_percentage(self) -> None:
        """Test that the 0.1% floor is not rounded up to a whole point."""
        assert heal_stat(0, 100, 1, DURATION) == 0
        assert heal_stat(0, 100, 64, DURATION) == 0
        assert heal_stat(0, 100, 65, DURATION) == 1

    def test_never_exceeds_max(self) -> None:
        """Test capping at the maximum."""
        assert heal_stat(90, 100, DURATION * 10, DURATION) == 100

    def test_no_time_no_change(self) -> None:
        """Test that less than a second changes nothing."""
        assert heal_stat(10, 100, 0, DURATION) == 10

    @pytest.mark.parametrize("elapsed", [1, 60, 600, 3600, 7199])
    def test_monotonic_in_elapsed(self, elapsed: int) -> None:
        """Test that more elapsed time never heals less."""
        assert heal_stat(20, 300, elapsed + 1, DURATION) >= heal_stat(20, 300, elapsed, DURATION)


class TestCalculateAutoHeal:
    """Tests for calculate_auto_heal."""

    def test_force_full_heal(self) -> None:
        """Test that a forced heal returns the maximums."""
        character = make_character(hp=1, max_hp=100, mana=0, max_mana=40, idle_seconds=None)

        assert calculate_auto_heal(character, NOW, True) == HealAmounts(hp=100, mana=40)

    def test_no_last_activity(self) -> None:
        """Test that a character without activity is not healed."""
        character = make_character(hp=10, max_hp=100, mana=0, max_mana=40, idle_seconds=None)

        amounts = calculate_auto_heal(character, NOW, duration_seconds=DURATION)

        assert not amounts.changed_from(character)

    def test_full_character_unchanged(self) -> None:
        """Test that a full character is left alone."""
        character = make_character(hp=100, max_hp=100, mana=40, max_mana=40, idle_seconds=3600)

        assert not calculate_auto_heal(character, NOW, duration_seconds=DURATION).changed_from(character)

    def test_full_window_heals_to_max(self) -> None:
        """Test that two hours of inactivity restore everything."""
        character = make_character(hp=0, max_hp=100, mana=0, max_mana=40, idle_seconds=DURATION)

        assert calculate_auto_heal(character, NOW, duration_seconds=DURATION) == HealAmounts(
            hp=100, mana=40
        )

    def test_repeated_calls_agree(self) -> None:
        """Test that the calculation is deterministic for a fixed now."""
        character = make_character(hp=13, max_hp=257, mana=3, max_mana=91, idle_seconds=1234)

        first = calculate_auto_heal(character, NOW, duration_seconds=DURATION)
        second = calculate_auto_heal(character, NOW, duration_seconds=DURATION)

        assert first == second

    def test_result_within_bounds(self) -> None:
        """Test that healed values stay within [current, max]."""
        character = make_character(hp=13, max_hp=257, mana=3, max_mana=91, idle_seconds=1234)

        amounts = calculate_auto_heal(character, NOW, duration_seconds=DURATION)

        assert character.hp <= amounts.hp <= character.max_hp
        assert character.mana <= amounts.mana <= character.max_mana

    def test_future_activity_is_ignored(self) -> None:
        """Test that a last activity after now heals nothing."""
        character = make_character(hp=10, max_hp=100, mana=0, max_mana=40, idle_seconds=-60)

        assert not calculate_auto_heal(character, NOW, duration_seconds=DURATION).changed_from(character)


class TestElapsedSeconds:
    """Tests for elapsed_seconds."""

    def test_naive_datetimes_are_utc(self) -> None:
        """Test that naive timestamps are taken as UTC."""
        naive = datetime(2024, 6, 1, 11, 0, 0)
        assert elapsed_seconds(naive, NOW) == 3600

    def test_floors_fractions(self) -> None:
        """Test that partial seconds are dropped."""
        assert elapsed_seconds(NOW - timedelta(milliseconds=1500), NOW) == 1
