"""Consumable item models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tower_trials.models.enums import ConsumableType


class Consumable(BaseModel):
    """A consumable item definition."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str = ""
    type: ConsumableType
    effect_value: int = Field(default=0, ge=0)
    price: int = Field(default=0, ge=0)
    level_requirement: int = Field(default=1, ge=1)


class CharacterConsumable(BaseModel):
    """A stack of a consumable owned by a character."""

    model_config = ConfigDict(extra="ignore")

    id: str
    character_id: str
    consumable_id: str
    quantity: int = Field(default=0, ge=0)
    consumable: Consumable | None = None


class ConsumableUseResult(BaseModel):
    """Outcome of using a consumable, as resolved by the backend.

    Attributes:
        success: Whether the item was consumed.
        message: Message for the game log.
        new_hp: HP after the effect.
        new_mana: Mana after the effect.
        remaining_quantity: Items left in the stack.
    """

    model_config = ConfigDict(extra="ignore")

    success: bool = True
    message: str = ""
    new_hp: int | None = None
    new_mana: int | None = None
    remaining_quantity: int = Field(default=0, ge=0)


__all__ = ["Consumable", "CharacterConsumable", "ConsumableUseResult"]
