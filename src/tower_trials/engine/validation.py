"""Numeric sanitation for values coming off the wire or out of arithmetic.

Every function here is total: any input (NaN, infinities, None, strings,
arbitrary objects) produces an integer, substituting a default where the
input is unusable and clamping into the requested range. Substitutions are
logged as warnings so broken payloads are visible without crashing the UI.

Example:
    >>> validate_number(float("nan"), default=5)
    5
    >>> validate_hp(150, 120)
    120
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from tower_trials.core.logging import get_logger


logger = get_logger(__name__)


def _to_finite(value: Any) -> float | int | None:
    """Convert a value to a finite number, or None if impossible."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def validate_number(
    value: Any,
    default: int = 0,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Sanitize a value into a bounded integer.

    Args:
        value: Anything; numbers and numeric strings are accepted.
        default: Replacement when ``value`` is not a finite number.
        min_value: Optional inclusive lower bound.
        max_value: Optional inclusive upper bound.

    Returns:
        ``floor(clamp(value or default, min_value, max_value))``.
    """
    number = _to_finite(value)
    if number is None:
        logger.warning("Invalid numeric value replaced", value=repr(value), default=default)
        number = default

    if min_value is not None and number < min_value:
        number = min_value
    if max_value is not None and number > max_value:
        number = max_value

    return math.floor(number)


def validate_hp(hp: Any, max_hp: Any) -> tuple[int, int]:
    """Sanitize an HP pair.

    Args:
        hp: Current HP.
        max_hp: Maximum HP.

    Returns:
        ``(hp, max_hp)`` with ``max_hp >= 1`` and ``0 <= hp <= max_hp``.
    """
    valid_max = validate_number(max_hp, default=1, min_value=1)
    return validate_number(hp, default=1, min_value=0, max_value=valid_max), valid_max


def validate_mana(mana: Any, max_mana: Any) -> tuple[int, int]:
    """Sanitize a Mana pair.

    Args:
        mana: Current Mana.
        max_mana: Maximum Mana.

    Returns:
        ``(mana, max_mana)`` with ``max_mana >= 0`` and ``0 <= mana <= max_mana``.
    """
    valid_max = validate_number(max_mana, default=1, min_value=0)
    return validate_number(mana, default=0, min_value=0, max_value=valid_max), valid_max


def validate_attack(value: Any) -> int:
    return validate_number(value, default=1, min_value=1)


def validate_defense(value: Any) -> int:
    return validate_number(value, default=0, min_value=0)


def validate_speed(value: Any) -> int:
    return validate_number(value, default=1, min_value=1)


def validate_player_stats(stats: Mapping[str, Any]) -> dict[str, Any]:
    """Sanitize the numeric fields of a character row.

    Non-numeric fields are copied through untouched.

    Args:
        stats: Raw character mapping (wire field names, ``def`` included).

    Returns:
        A new mapping with hp/mana pairs, combat stats, level, xp, gold and
        floor sanitized.
    """
    result = dict(stats)
    result["hp"], result["max_hp"] = validate_hp(stats.get("hp"), stats.get("max_hp"))
    result["mana"], result["max_mana"] = validate_mana(stats.get("mana"), stats.get("max_mana"))
    result["atk"] = validate_attack(stats.get("atk"))
    result["def"] = validate_defense(stats.get("def", stats.get("defense")))
    result.pop("defense", None)
    result["speed"] = validate_speed(stats.get("speed"))
    result["level"] = validate_number(stats.get("level"), default=1, min_value=1)
    result["xp"] = validate_number(stats.get("xp"), default=0, min_value=0)
    result["gold"] = validate_number(stats.get("gold"), default=0, min_value=0)
    result["floor"] = validate_number(stats.get("floor"), default=1, min_value=1)
    return result


def validate_enemy_stats(stats: Mapping[str, Any]) -> dict[str, Any]:
    """Sanitize the numeric fields of an enemy row.

    A missing ``max_hp`` falls back to ``hp`` since monster rows only carry
    one HP column.

    Args:
        stats: Raw enemy mapping.

    Returns:
        A new mapping with sanitized combat and reward fields.
    """
    result = dict(stats)
    result["hp"], result["max_hp"] = validate_hp(
        stats.get("hp"), stats.get("max_hp", stats.get("hp"))
    )
    result["attack"] = validate_attack(stats.get("attack", stats.get("atk")))
    result["defense"] = validate_defense(stats.get("defense", stats.get("def")))
    result["speed"] = validate_speed(stats.get("speed"))
    result["level"] = validate_number(stats.get("level"), default=1, min_value=1)
    result["mana"] = validate_number(stats.get("mana"), default=0, min_value=0)
    result["reward_xp"] = validate_number(stats.get("reward_xp"), default=1, min_value=0)
    result["reward_gold"] = validate_number(stats.get("reward_gold"), default=0, min_value=0)
    return result


def log_validation(
    context: str,
    original: Mapping[str, Any],
    validated: Mapping[str, Any],
) -> None:
    """Log the fields a sanitation pass changed.

    Args:
        context: Where the values came from (for the log entry).
        original: Mapping before sanitation.
        validated: Mapping after sanitation.
    """
    changed = {
        key: {"from": original.get(key), "to": value}
        for key, value in validated.items()
        if original.get(key) != value
    }
    if changed:
        logger.warning("Values corrected by validation", context=context, changed=changed)


__all__ = [
    "validate_number",
    "validate_hp",
    "validate_mana",
    "validate_attack",
    "validate_defense",
    "validate_speed",
    "validate_player_stats",
    "validate_enemy_stats",
    "log_validation",
]
