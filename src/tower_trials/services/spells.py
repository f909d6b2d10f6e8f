"""Equipped spell lookup with a short-lived cache."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from tower_trials.core.exceptions import TowerTrialsError
from tower_trials.core.logging import get_logger
from tower_trials.models.effects import PlayerSpell
from tower_trials.models.result import ServiceResult
from tower_trials.services.base import BaseService, rows


logger = get_logger(__name__)


def reset_cooldowns(spells: list[PlayerSpell]) -> list[PlayerSpell]:
    """Return copies of the spells with every cooldown cleared."""
    return [spell.model_copy(update={"current_cooldown": 0}) for spell in spells]


class SpellService(BaseService):
    """Load the spells a character has equipped."""

    async def get_character_equipped_spells(
        self, character_id: str
    ) -> ServiceResult[list[PlayerSpell]]:
        """Fetch equipped spells, served from cache when fresh.

        Args:
            character_id: Character whose spells are loaded.

        Returns:
            ServiceResult with spells ready for battle (cooldowns at 0).
        """
        cached = self.caches.spells.get(character_id)
        if cached is not None:
            return ServiceResult.ok(cached)

        try:
            data = await self._call(
                "get_character_equipped_spells",
                {"p_character_id": character_id},
                read_only=True,
            )
            spells = [
                PlayerSpell.model_validate({**row, "current_cooldown": 0}) for row in rows(data)
            ]
        except (TowerTrialsError, PydanticValidationError) as exc:
            return ServiceResult.fail(exc)

        self.caches.spells.set(character_id, spells)
        logger.debug("Equipped spells loaded", character_id=character_id, count=len(spells))
        return ServiceResult.ok(spells)


__all__ = ["SpellService", "reset_cooldowns"]
