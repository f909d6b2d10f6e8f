"""Client game engine.

Pure game rules (numeric sanitation, auto-heal, derived stats, checkpoint
schedule) and the game state store.
"""

from tower_trials.engine.checkpoints import (
    build_checkpoints,
    is_checkpoint_unlocked,
    is_valid_checkpoint_floor,
)
from tower_trials.engine.healing import HealAmounts, calculate_auto_heal
from tower_trials.engine.stats import StatsAggregator, calculate_derived_stats
from tower_trials.engine.store import GameStateStore, can_transition
from tower_trials.engine.validation import (
    validate_enemy_stats,
    validate_hp,
    validate_mana,
    validate_number,
    validate_player_stats,
)

__all__ = [
    # Validation
    "validate_number",
    "validate_hp",
    "validate_mana",
    "validate_player_stats",
    "validate_enemy_stats",
    # Healing
    "HealAmounts",
    "calculate_auto_heal",
    # Stats
    "calculate_derived_stats",
    "StatsAggregator",
    # Checkpoints
    "is_valid_checkpoint_floor",
    "is_checkpoint_unlocked",
    "build_checkpoints",
    # Store
    "GameStateStore",
    "can_transition",
]
