"""Game-wide constants for the Tower Trials client core.

Values here mirror the backend's rules and are not configurable; tunable
lifetimes and limits live in ``tower_trials.core.config``.
"""

from __future__ import annotations

# =============================================================================
# Auto-Heal
# =============================================================================

MIN_HEAL_PERMILLE = 1
"""Floor for the current value during auto-heal, in thousandths of max (0.1%)."""

HEAL_SPAN_PERMILLE = 999
"""Permille of max restored over a full heal window (0.1% to 100%)."""

# =============================================================================
# Checkpoints
# =============================================================================

FIRST_CHECKPOINT_FLOOR = 1
"""Floor 1 is always a checkpoint."""

EARLY_CHECKPOINT_FLOOR = 5
"""Early checkpoint unlocked once floor 5 is reached."""

DECADE_CHECKPOINT_START = 20
"""First floor of the every-ten-floors checkpoint run."""

DECADE_CHECKPOINT_STEP = 10
"""Spacing between checkpoints from DECADE_CHECKPOINT_START on."""

# =============================================================================
# Floor Generation
# =============================================================================

BOSS_FLOOR_INTERVAL = 10
"""Every tenth floor (and floor 5) holds a boss."""

ELITE_FLOOR_INTERVAL = 5
"""Multiples of five that are not boss floors hold an elite."""

# =============================================================================
# Derived Stats
# =============================================================================

DEFAULT_ATTRIBUTE = 10
"""Attribute value assumed when the backend omits one."""

DEFAULT_MASTERY = 1
"""Mastery level assumed when the backend omits one."""

MAX_CRITICAL_CHANCE = 60.0
"""Upper bound for critical hit chance, in percent."""

MAX_CRITICAL_DAMAGE = 200.0
"""Upper bound for critical damage multiplier, in percent."""

MAX_MAGIC_DAMAGE_BONUS = 150.0
"""Upper bound for magic damage bonus, in percent."""

MAGIC_DAMAGE_SOFT_CAP = 50.0
"""Magic damage bonus above this value is halved."""

MAX_DOUBLE_ATTACK_CHANCE = 25.0
"""Upper bound for double attack chance, in percent."""

# =============================================================================
# Ranking
# =============================================================================

DEFAULT_RANKING_LIMIT = 100
"""Default number of rows per ranking page."""

MAX_RANKING_LIMIT = 500
"""Largest ranking page size accepted."""
