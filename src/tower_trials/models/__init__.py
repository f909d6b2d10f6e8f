"""Pydantic V2 models for the Tower Trials client core.

Submodules:
    enums: GameMode, FloorType, RankingMode and friends.
    effects: Spells and active effects.
    inventory: Consumables.
    character: Character, GamePlayer and stats aggregation records.
    tower: Floors, enemies and rewards.
    progression: Checkpoints and attribute distribution.
    ranking: Ranking rows, queries and user stats.
    game_state: Store snapshot models.
    result: ServiceResult envelope.
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from tower_trials.models.enums import (
    ConsumableType,
    FloorType,
    GameMode,
    ModificationType,
    MonsterBehavior,
    RankingMode,
    RankingStatus,
    SpellEffectType,
)

# =============================================================================
# Records
# =============================================================================
from tower_trials.models.effects import (
    ActiveEffects,
    AttributeModification,
    PlayerSpell,
    Spell,
    SpellEffect,
)
from tower_trials.models.inventory import (
    CharacterConsumable,
    Consumable,
    ConsumableUseResult,
)
from tower_trials.models.character import (
    Character,
    CoreStats,
    DerivedStats,
    EquipmentBonuses,
    GamePlayer,
    HealResult,
    StatsCalculation,
)
from tower_trials.models.tower import BattleRewards, Enemy, Floor
from tower_trials.models.progression import (
    AttributeDistribution,
    AttributeDistributionResult,
    Checkpoint,
)
from tower_trials.models.ranking import (
    RankingEntry,
    RankingQuery,
    SaveRankingData,
    UserStats,
)
from tower_trials.models.game_state import GameState, LoadingState
from tower_trials.models.result import ServiceResult


__all__ = [
    # Enums
    "GameMode",
    "FloorType",
    "MonsterBehavior",
    "SpellEffectType",
    "ModificationType",
    "ConsumableType",
    "RankingMode",
    "RankingStatus",
    # Effects
    "SpellEffect",
    "AttributeModification",
    "ActiveEffects",
    "Spell",
    "PlayerSpell",
    # Inventory
    "Consumable",
    "CharacterConsumable",
    "ConsumableUseResult",
    # Character
    "Character",
    "EquipmentBonuses",
    "DerivedStats",
    "CoreStats",
    "StatsCalculation",
    "HealResult",
    "GamePlayer",
    # Tower
    "Floor",
    "Enemy",
    "BattleRewards",
    # Progression
    "Checkpoint",
    "AttributeDistribution",
    "AttributeDistributionResult",
    # Ranking
    "RankingEntry",
    "SaveRankingData",
    "RankingQuery",
    "UserStats",
    # State
    "GameState",
    "LoadingState",
    "ServiceResult",
]
