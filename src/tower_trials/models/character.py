"""Character models.

``Character`` is the server-owned record and is only ever mutated through
RPCs. ``GamePlayer`` is the client-composed projection used while playing:
the character plus equipment totals, derived extras, active effects and
turn flags. A GamePlayer is rebuilt on every load and never persisted.

Example:
    >>> character = Character.model_validate(row)
    >>> character.defense  # the wire field is ``def``
    7
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from tower_trials.models.effects import ActiveEffects, PlayerSpell
from tower_trials.models.inventory import CharacterConsumable


# =============================================================================
# Server Record
# =============================================================================


class Character(BaseModel):
    """A character as returned by the backend.

    The wire field ``def`` is exposed as ``defense`` since ``def`` is a
    Python keyword; dump with ``by_alias=True`` to get the wire shape back.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    user_id: str = ""
    name: str = ""
    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)
    xp_next_level: int = Field(default=100, ge=0)
    gold: int = Field(default=0, ge=0)

    hp: int = Field(default=1, ge=0)
    max_hp: int = Field(default=1, ge=1)
    mana: int = Field(default=0, ge=0)
    max_mana: int = Field(default=0, ge=0)
    atk: int = Field(default=1, ge=0)
    defense: int = Field(default=0, ge=0, alias="def")
    speed: int = Field(default=1, ge=0)

    strength: int = 10
    dexterity: int = 10
    intelligence: int = 10
    wisdom: int = 10
    vitality: int = 10
    luck: int = 10
    attribute_points: int = Field(default=0, ge=0)

    sword_mastery: int = 1
    axe_mastery: int = 1
    blunt_mastery: int = 1
    defense_mastery: int = 1
    magic_mastery: int = 1
    sword_mastery_xp: int = 0
    axe_mastery_xp: int = 0
    blunt_mastery_xp: int = 0
    defense_mastery_xp: int = 0
    magic_mastery_xp: int = 0

    floor: int = Field(default=1, ge=1)
    highest_floor: int | None = Field(default=None, ge=1)
    critical_chance: float | None = None
    critical_damage: float | None = None
    is_alive: bool = True

    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_activity: datetime | None = None

    @property
    def reached_floor(self) -> int:
        """Get the highest floor this character has ever stood on.

        Returns:
            ``max(floor, highest_floor)``.
        """
        return max(self.floor, self.highest_floor or 1)

    @property
    def is_full_health(self) -> bool:
        """Check whether HP and Mana are both at their maximum.

        Returns:
            True when no auto-heal would change anything.
        """
        return self.hp >= self.max_hp and self.mana >= self.max_mana


# =============================================================================
# Stats Aggregation Records
# =============================================================================


class EquipmentBonuses(BaseModel):
    """Summed stat bonuses from a character's equipped items."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    total_atk_bonus: int = 0
    total_def_bonus: int = 0
    total_mana_bonus: int = 0
    total_speed_bonus: int = 0
    total_hp_bonus: int = 0
    total_critical_chance_bonus: float = 0
    total_critical_damage_bonus: float = 0

    @field_validator("*")
    @classmethod
    def clamp_negative(cls, value: float) -> float:
        """Equipment never lowers a stat."""
        return value if value >= 0 else type(value)(0)

    @classmethod
    def zero(cls) -> EquipmentBonuses:
        """Build the all-zero bonus record used when equipment cannot be loaded.

        Returns:
            EquipmentBonuses with every field at 0.
        """
        return cls()


class DerivedStats(BaseModel):
    """Stats computed from level, attributes and masteries."""

    model_config = ConfigDict(frozen=True)

    hp: int
    max_hp: int
    mana: int
    max_mana: int
    atk: int
    magic_attack: int
    defense: int
    speed: int
    critical_chance: float
    critical_damage: float
    magic_damage_bonus: float
    double_attack_chance: float


class CoreStats(BaseModel):
    """Stats equipment can modify."""

    model_config = ConfigDict(frozen=True)

    hp: int
    max_hp: int
    mana: int
    max_mana: int
    atk: int
    defense: int
    speed: int
    critical_chance: float = 0.0
    critical_damage: float = 0.0


class StatsCalculation(BaseModel):
    """Base, total and derived stats for one character.

    Attributes:
        base_stats: Stats without equipment.
        total_stats: Stats with equipment bonuses applied.
        derived_stats: Formula output from attributes and masteries.
        equipment_bonuses: The bonuses that were applied.
    """

    model_config = ConfigDict(frozen=True)

    base_stats: CoreStats
    total_stats: CoreStats
    derived_stats: DerivedStats
    equipment_bonuses: EquipmentBonuses


class HealResult(BaseModel):
    """Outcome of persisting an auto-heal.

    Attributes:
        healed: Whether anything changed and was written.
        old_hp: HP before healing.
        new_hp: HP after healing.
        old_mana: Mana before healing.
        new_mana: Mana after healing.
        character: The character with the healed values.
    """

    healed: bool
    old_hp: int
    new_hp: int
    old_mana: int
    new_mana: int
    character: Character


# =============================================================================
# Client Projection
# =============================================================================


class GamePlayer(Character):
    """A character composed for play.

    Carries equipment totals, derived extras, active effects and turn flags
    on top of every Character field.
    """

    magic_attack: int = 0
    magic_damage_bonus: float = 0
    double_attack_chance: float = 0

    base_hp: int = 0
    base_max_hp: int = 0
    base_mana: int = 0
    base_max_mana: int = 0
    base_atk: int = 0
    base_def: int = 0
    base_speed: int = 0

    equipment_hp_bonus: int = 0
    equipment_mana_bonus: int = 0
    equipment_atk_bonus: int = 0
    equipment_def_bonus: int = 0
    equipment_speed_bonus: int = 0

    is_player_turn: bool = True
    special_cooldown: int = Field(default=0, ge=0)
    defense_cooldown: int = Field(default=0, ge=0)
    is_defending: bool = False
    potion_used_this_turn: bool = False

    spells: list[PlayerSpell] = Field(default_factory=list)
    consumables: list[CharacterConsumable] = Field(default_factory=list)
    active_effects: ActiveEffects = Field(default_factory=ActiveEffects)

    @computed_field(description="Sum of all equipment stat bonuses")
    @property
    def total_equipment_bonus(self) -> int:
        """Sum the flat equipment bonuses for display.

        Returns:
            Sum of HP, Mana, ATK, DEF and Speed bonuses.
        """
        return (
            self.equipment_hp_bonus
            + self.equipment_mana_bonus
            + self.equipment_atk_bonus
            + self.equipment_def_bonus
            + self.equipment_speed_bonus
        )


__all__ = [
    "Character",
    "EquipmentBonuses",
    "DerivedStats",
    "CoreStats",
    "StatsCalculation",
    "HealResult",
    "GamePlayer",
]
