"""Tower models: floors, enemies and battle rewards."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tower_trials.models.effects import ActiveEffects
from tower_trials.models.enums import FloorType, MonsterBehavior


class Floor(BaseModel):
    """Static description of a tower floor.

    Attributes:
        floor_number: 1-based floor index.
        type: Encounter class.
        is_checkpoint: Whether the floor can be started from directly.
        min_level: Suggested minimum character level.
        description: Display text.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    floor_number: int = Field(ge=1)
    type: FloorType = FloorType.COMMON
    is_checkpoint: bool = False
    min_level: int = Field(default=1, ge=1)
    description: str = ""


class Enemy(BaseModel):
    """A monster instantiated for a floor.

    Stats are sanitized with ``validate_enemy_stats`` before construction,
    so ``0 <= hp <= max_hp`` always holds.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    level: int = Field(default=1, ge=1)
    hp: int = Field(ge=0)
    max_hp: int = Field(ge=1)
    attack: int = Field(default=1, ge=1)
    defense: int = Field(default=0, ge=0)
    speed: int = Field(default=1, ge=1)
    mana: int = Field(default=0, ge=0)
    behavior: MonsterBehavior = MonsterBehavior.BALANCED
    reward_xp: int = Field(default=1, ge=0)
    reward_gold: int = Field(default=0, ge=0)
    tier: int = Field(default=1, ge=1)
    is_boss: bool = False
    active_effects: ActiveEffects = Field(default_factory=ActiveEffects)


class BattleRewards(BaseModel):
    """XP, gold and drops granted after a victory."""

    model_config = ConfigDict(extra="ignore")

    xp: int = Field(default=0, ge=0)
    gold: int = Field(default=0, ge=0)
    drops: list[dict[str, int | str]] = Field(default_factory=list)
    leveled_up: bool = False
    new_level: int | None = None


__all__ = ["Floor", "Enemy", "BattleRewards"]
