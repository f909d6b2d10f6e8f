"""Time-based HP and Mana regeneration.

Out of combat, a character regenerates linearly from 0.1% to 100% of its
maximum over the heal window (two hours by default), measured from the
server's ``last_activity`` timestamp. The calculation is pure; persisting
the result is the job of ``HealingService``.

All arithmetic is done on integers so a full window always lands exactly on
the maximum and repeated calls with the same ``now`` agree.

Example:
    >>> amounts = calculate_auto_heal(character, now=datetime.now(UTC))
    >>> amounts.changed_from(character)
    True
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from tower_trials.core.config import get_settings
from tower_trials.core.constants import HEAL_SPAN_PERMILLE, MIN_HEAL_PERMILLE
from tower_trials.engine.validation import validate_hp, validate_mana


if TYPE_CHECKING:
    from tower_trials.models.character import Character


@dataclass(frozen=True)
class HealAmounts:
    """HP and Mana after auto-heal."""

    hp: int
    mana: int

    def changed_from(self, character: Character) -> bool:
        """Check whether these amounts differ from the character's values.

        Args:
            character: The character before healing.

        Returns:
            True if HP or Mana changed.
        """
        return self.hp != character.hp or self.mana != character.mana


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def elapsed_seconds(last_activity: datetime, now: datetime) -> int:
    """Whole seconds between two instants.

    Naive datetimes are taken as UTC.

    Args:
        last_activity: Earlier instant.
        now: Later instant.

    Returns:
        Floored elapsed seconds (negative if ``now`` precedes ``last_activity``).
    """
    if last_activity.tzinfo is None:
        last_activity = last_activity.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return math.floor((now - last_activity).total_seconds())


def heal_stat(current: int, maximum: int, elapsed: int, duration: int) -> int:
    """Regenerate a single stat.

    The current percentage is raised to at least 0.1%, then
    ``elapsed * 99.9% / duration`` is added. The value is floored once, from
    the summed percentage, and capped at the maximum.

    Args:
        current: Current value, already within ``[0, maximum]``.
        maximum: Maximum value.
        elapsed: Whole seconds since the last activity.
        duration: Seconds for a full heal.

    Returns:
        The regenerated value.
    """
    if maximum <= 0 or current >= maximum or elapsed < 1:
        return current

    # Percentages in permille, scaled by ``duration`` to stay integral.
    current_permille = max(1000 * current, MIN_HEAL_PERMILLE * maximum)
    healed = current_permille * duration + elapsed * HEAL_SPAN_PERMILLE * maximum
    return min(maximum, healed // (1000 * duration))


def calculate_auto_heal(
    character: Character,
    now: datetime,
    force_full_heal: bool = False,
    *,
    duration_seconds: int | None = None,
) -> HealAmounts:
    """Compute HP and Mana after passive regeneration.

    Args:
        character: Character with hp/mana, their maximums and last_activity.
        now: Current time.
        force_full_heal: Return the maximums regardless of elapsed time.
        duration_seconds: Heal window; defaults to the configured value.

    Returns:
        The healed amounts. Unchanged when there is no last activity, the
        character is already full, or less than a second has passed.
    """
    hp, max_hp = validate_hp(character.hp, character.max_hp)
    mana, max_mana = validate_mana(character.mana, character.max_mana)

    if force_full_heal:
        return HealAmounts(hp=max_hp, mana=max_mana)

    if character.last_activity is None or (hp >= max_hp and mana >= max_mana):
        return HealAmounts(hp=hp, mana=mana)

    elapsed = elapsed_seconds(character.last_activity, now)
    if elapsed < 1:
        return HealAmounts(hp=hp, mana=mana)

    duration = duration_seconds or get_settings().game.heal_duration_seconds
    return HealAmounts(
        hp=heal_stat(hp, max_hp, elapsed, duration),
        mana=heal_stat(mana, max_mana, elapsed, duration),
    )


__all__ = [
    "HealAmounts",
    "utc_now",
    "elapsed_seconds",
    "heal_stat",
    "calculate_auto_heal",
]
