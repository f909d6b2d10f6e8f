"""Consumable use.

The backend resolves the item's effect and returns the character's new
HP/Mana; the client never computes the final values itself.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from tower_trials.core.exceptions import TowerTrialsError, ValidationError
from tower_trials.core.logging import get_logger
from tower_trials.models.inventory import ConsumableUseResult
from tower_trials.models.result import ServiceResult
from tower_trials.services.base import BaseService, first_row


logger = get_logger(__name__)


class ConsumableService(BaseService):
    """Consume items from a character's inventory."""

    async def use_consumable(
        self,
        character_id: str,
        consumable_id: str,
    ) -> ServiceResult[ConsumableUseResult]:
        """Use one item of a consumable stack.

        Args:
            character_id: Character using the item.
            consumable_id: Consumable to use.

        Returns:
            ServiceResult with the backend's resolution.
        """
        try:
            if not consumable_id:
                raise ValidationError("consumable_id is required", field_name="consumable_id")
            data = await self._call(
                "use_consumable",
                {"p_character_id": character_id, "p_consumable_id": consumable_id},
            )
            row = first_row(data)
            if row is None:
                return ServiceResult.fail("Consumable use returned no result")
            result = ConsumableUseResult.model_validate(row)
        except (TowerTrialsError, PydanticValidationError) as exc:
            return ServiceResult.fail(exc)

        self.caches.invalidate_character(character_id)
        if not result.success:
            return ServiceResult.fail(result.message or "Consumable could not be used")
        logger.info(
            "Consumable used",
            character_id=character_id,
            consumable_id=consumable_id,
            remaining=result.remaining_quantity,
        )
        return ServiceResult.ok(result)


__all__ = ["ConsumableService"]
