"""Spell and active-effect models.

Active effects are carried on players and enemies for display only; their
durations and values are resolved by the backend.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tower_trials.models.enums import ModificationType, SpellEffectType


ModifiableAttribute = Literal[
    "atk",
    "def",
    "speed",
    "magic_attack",
    "critical_chance",
    "critical_damage",
]


class SpellEffect(BaseModel):
    """A running buff, debuff, damage-over-time or heal-over-time.

    Attributes:
        type: Effect kind.
        value: Magnitude per tick (or flat bonus for buffs).
        duration: Remaining turns.
        source_spell: ID of the spell that applied it.
    """

    model_config = ConfigDict(extra="ignore")

    type: SpellEffectType
    value: float = 0
    duration: int = Field(default=0, ge=0)
    source_spell: str = ""


class AttributeModification(BaseModel):
    """A temporary change to a single combat attribute.

    Attributes:
        attribute: The attribute being modified.
        value: Flat amount or percentage.
        type: Whether ``value`` is flat or a percentage.
        duration: Remaining turns.
        source_spell: ID of the spell that applied it.
        applied_at: Epoch milliseconds when applied.
    """

    model_config = ConfigDict(extra="ignore")

    attribute: ModifiableAttribute
    value: float
    type: ModificationType = ModificationType.FLAT
    duration: int = Field(default=0, ge=0)
    source_spell: str = ""
    applied_at: int = 0


class ActiveEffects(BaseModel):
    """Bag of effects currently active on a combatant."""

    model_config = ConfigDict(extra="ignore")

    buffs: list[SpellEffect] = Field(default_factory=list)
    debuffs: list[SpellEffect] = Field(default_factory=list)
    dots: list[SpellEffect] = Field(default_factory=list)
    hots: list[SpellEffect] = Field(default_factory=list)
    attribute_modifications: list[AttributeModification] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Check whether no effect of any kind is active.

        Returns:
            True if every list is empty.
        """
        return not (
            self.buffs
            or self.debuffs
            or self.dots
            or self.hots
            or self.attribute_modifications
        )


class Spell(BaseModel):
    """A spell definition as stored by the backend."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str = ""
    effect_type: SpellEffectType
    mana_cost: int = Field(default=0, ge=0)
    cooldown: int = Field(default=0, ge=0)
    effect_value: float = 0
    duration: int = Field(default=0, ge=0)
    unlocked_at_level: int = Field(default=1, ge=1)


class PlayerSpell(Spell):
    """A spell equipped by a player, with its live cooldown."""

    current_cooldown: int = Field(default=0, ge=0)


__all__ = [
    "ModifiableAttribute",
    "SpellEffect",
    "AttributeModification",
    "ActiveEffects",
    "Spell",
    "PlayerSpell",
]
