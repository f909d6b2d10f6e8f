"""Equipment bonus lookup."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from tower_trials.core.exceptions import TowerTrialsError
from tower_trials.models.character import EquipmentBonuses
from tower_trials.models.result import ServiceResult
from tower_trials.services.base import BaseService, first_row


class EquipmentService(BaseService):
    """Read the summed bonuses of a character's equipped items."""

    async def calculate_equipment_bonuses(
        self, character_id: str
    ) -> ServiceResult[EquipmentBonuses]:
        """Fetch equipment bonuses.

        An empty result means nothing is equipped and yields zero bonuses.

        Args:
            character_id: Character whose equipment is summed.

        Returns:
            ServiceResult with the bonuses, or a failure if the RPC failed.
        """
        try:
            data = await self._call(
                "calculate_equipment_bonuses",
                {"p_character_id": character_id},
                read_only=True,
            )
            row = first_row(data)
            if row is None:
                return ServiceResult.ok(EquipmentBonuses.zero())
            return ServiceResult.ok(EquipmentBonuses.model_validate(row))
        except (TowerTrialsError, PydanticValidationError) as exc:
            return ServiceResult.fail(exc)


__all__ = ["EquipmentService"]
