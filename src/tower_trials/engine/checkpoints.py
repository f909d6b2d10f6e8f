"""Checkpoint rules.

A checkpoint is a floor a character may restart a run from. Floor 1 is
always available, floor 5 unlocks once reached, and from floor 20 on every
tenth floor is a checkpoint. Checkpoints are derived from the character's
highest floor on demand and never stored.

Example:
    >>> [c.floor for c in build_checkpoints(23)]
    [1, 5, 20]
"""

from __future__ import annotations

from tower_trials.core.constants import (
    DECADE_CHECKPOINT_START,
    DECADE_CHECKPOINT_STEP,
    EARLY_CHECKPOINT_FLOOR,
    FIRST_CHECKPOINT_FLOOR,
)
from tower_trials.models.progression import Checkpoint


def is_valid_checkpoint_floor(floor: int) -> bool:
    """Check whether a floor is on the checkpoint schedule.

    Args:
        floor: Floor number.

    Returns:
        True for floor 1, floor 5 and multiples of 10 from 20 on.
    """
    if floor in (FIRST_CHECKPOINT_FLOOR, EARLY_CHECKPOINT_FLOOR):
        return True
    return floor >= DECADE_CHECKPOINT_START and floor % DECADE_CHECKPOINT_STEP == 0


def describe_checkpoint(floor: int) -> str:
    if floor == FIRST_CHECKPOINT_FLOOR:
        return "Floor 1 - Tower entrance"
    if floor == EARLY_CHECKPOINT_FLOOR:
        return "Floor 5 - First challenge"
    return f"Floor {floor} - Checkpoint"


def build_checkpoints(highest_floor: int) -> list[Checkpoint]:
    """List the checkpoints unlocked up to a floor.

    Args:
        highest_floor: Highest floor the character reached.

    Returns:
        Checkpoints in ascending floor order; always contains floor 1.
    """
    floors = [FIRST_CHECKPOINT_FLOOR]
    if highest_floor >= EARLY_CHECKPOINT_FLOOR:
        floors.append(EARLY_CHECKPOINT_FLOOR)
    floors.extend(range(DECADE_CHECKPOINT_START, highest_floor + 1, DECADE_CHECKPOINT_STEP))
    return [Checkpoint(floor=floor, description=describe_checkpoint(floor)) for floor in floors]


def is_checkpoint_unlocked(floor: int, highest_floor: int) -> bool:
    """Check whether a checkpoint floor is valid and already reached.

    Args:
        floor: Requested checkpoint floor.
        highest_floor: Highest floor the character reached.

    Returns:
        True if the character may start from ``floor``.
    """
    return is_valid_checkpoint_floor(floor) and floor <= max(highest_floor, FIRST_CHECKPOINT_FLOOR)


__all__ = [
    "is_valid_checkpoint_floor",
    "describe_checkpoint",
    "build_checkpoints",
    "is_checkpoint_unlocked",
]
