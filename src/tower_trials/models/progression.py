"""Progression models: checkpoints and attribute distribution."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from tower_trials.core.exceptions import ValidationError


class Checkpoint(BaseModel):
    """A floor a character may restart from.

    Checkpoints are computed from ``highest_floor`` and never stored.
    """

    model_config = ConfigDict(frozen=True)

    floor: int = Field(ge=1)
    description: str


class AttributeDistribution(BaseModel):
    """Attribute points to spend, per attribute.

    Raises:
        ValidationError: If no point is being spent.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    strength: int = Field(default=0, ge=0)
    dexterity: int = Field(default=0, ge=0)
    intelligence: int = Field(default=0, ge=0)
    wisdom: int = Field(default=0, ge=0)
    vitality: int = Field(default=0, ge=0)
    luck: int = Field(default=0, ge=0)

    @computed_field(description="Total points spent")
    @property
    def total_points(self) -> int:
        return (
            self.strength
            + self.dexterity
            + self.intelligence
            + self.wisdom
            + self.vitality
            + self.luck
        )

    @model_validator(mode="after")
    def validate_not_empty(self) -> "AttributeDistribution":
        """Reject a distribution that spends nothing.

        Returns:
            Self if validation passes.

        Raises:
            ValidationError: If every attribute is 0.
        """
        if self.total_points == 0:
            raise ValidationError(
                "At least one attribute point must be distributed",
                field_name="total_points",
                invalid_value=0,
            )
        return self

    def to_rpc_params(self, character_id: str) -> dict[str, str | int]:
        """Build the ``distribute_attribute_points`` parameters.

        Args:
            character_id: Character receiving the points.

        Returns:
            Parameter mapping with ``p_`` prefixed names.
        """
        return {
            "p_character_id": character_id,
            "p_strength": self.strength,
            "p_dexterity": self.dexterity,
            "p_intelligence": self.intelligence,
            "p_wisdom": self.wisdom,
            "p_vitality": self.vitality,
            "p_luck": self.luck,
        }


class AttributeDistributionResult(BaseModel):
    """Backend answer to an attribute distribution."""

    model_config = ConfigDict(extra="ignore")

    success: bool
    message: str = ""
    new_stats: dict[str, int] = Field(default_factory=dict)


__all__ = [
    "Checkpoint",
    "AttributeDistribution",
    "AttributeDistributionResult",
]
