"""Persistence of HP/Mana changes and auto-heal.

``HealingService`` turns the pure auto-heal calculation into server writes:
it only calls the backend when the computed values differ from the stored
ones, and it refreshes ``last_activity`` afterwards so the next heal window
starts from now.

Example:
    >>> result = await healing.apply_auto_heal(character)
    >>> result.data.healed
    True
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from tower_trials.core.exceptions import RpcError, TowerTrialsError, ValidationError
from tower_trials.core.logging import get_logger
from tower_trials.engine.healing import calculate_auto_heal, utc_now
from tower_trials.models.character import HealResult
from tower_trials.models.result import ServiceResult
from tower_trials.services.base import BaseService


if TYPE_CHECKING:
    from tower_trials.core.config import GameSettings
    from tower_trials.models.character import Character
    from tower_trials.rpc.transport import RpcTransport
    from tower_trials.storage.cache import CacheRegistry

logger = get_logger(__name__)


class HealingService(BaseService):
    """Write HP/Mana and apply passive regeneration.

    Attributes:
        game_settings: Heal window and HP/Mana bounds.
    """

    def __init__(
        self,
        rpc: RpcTransport,
        caches: CacheRegistry,
        game_settings: GameSettings,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(rpc, caches)
        self.game_settings = game_settings
        self._now = now

    def validate_amount(self, name: str, value: Any) -> int | None:
        """Floor an HP/Mana write and check it against the accepted range.

        Raises:
            ValidationError: If the value is not a finite number in range.
        """
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValidationError(f"{name} must be a finite number", field_name=name, invalid_value=value)
        floored = math.floor(value)
        upper = self.game_settings.hp_mana_upper_bound
        if not 0 <= floored <= upper:
            raise ValidationError(
                f"{name} must be between 0 and {upper}",
                field_name=name,
                invalid_value=floored,
            )
        return floored

    async def update_character_hp_mana(
        self,
        character_id: str,
        hp: float | None = None,
        mana: float | None = None,
    ) -> ServiceResult[None]:
        """Persist HP and/or Mana.

        Values are floored and range-checked before any RPC is sent.

        Args:
            character_id: Character to update.
            hp: New HP, or None to leave it unchanged.
            mana: New Mana, or None to leave it unchanged.

        Returns:
            ServiceResult without payload.
        """
        try:
            if not character_id:
                raise ValidationError("character_id is required", field_name="character_id")
            valid_hp = self.validate_amount("hp", hp)
            valid_mana = self.validate_amount("mana", mana)
            if valid_hp is None and valid_mana is None:
                raise ValidationError("Nothing to update", field_name="hp")

            await self._call(
                "update_character_stats",
                {"p_character_id": character_id, "p_hp": valid_hp, "p_mana": valid_mana},
            )
        except TowerTrialsError as exc:
            logger.warning("HP/Mana update rejected", character_id=character_id, error=str(exc))
            return ServiceResult.fail(exc)

        self.caches.invalidate_character(character_id)
        return ServiceResult.ok()

    async def update_last_activity(self, character_id: str) -> ServiceResult[None]:
        try:
            await self._call("update_character_last_activity", {"p_character_id": character_id})
        except RpcError as exc:
            return ServiceResult.fail(exc)
        return ServiceResult.ok()

    async def apply_auto_heal(
        self,
        character: Character,
        force_full_heal: bool = False,
    ) -> ServiceResult[HealResult]:
        """Compute auto-heal and persist it if anything changed.

        Args:
            character: Character as read from the server.
            force_full_heal: Heal to max regardless of elapsed time.

        Returns:
            ServiceResult with the HealResult. Fails only if the HP/Mana
            write fails; a failed ``last_activity`` refresh is logged.
        """
        now = self._now()
        amounts = calculate_auto_heal(
            character,
            now,
            force_full_heal,
            duration_seconds=self.game_settings.heal_duration_seconds,
        )

        if not amounts.changed_from(character):
            return ServiceResult.ok(
                HealResult(
                    healed=False,
                    old_hp=character.hp,
                    new_hp=character.hp,
                    old_mana=character.mana,
                    new_mana=character.mana,
                    character=character,
                )
            )

        write = await self.update_character_hp_mana(character.id, amounts.hp, amounts.mana)
        if not write.success:
            return ServiceResult.fail(write.error or "HP/Mana update failed")

        activity = await self.update_last_activity(character.id)
        if not activity.success:
            logger.warning(
                "Failed to refresh last activity after heal",
                character_id=character.id,
                error=activity.error,
            )

        logger.info(
            "Auto-heal applied",
            character_id=character.id,
            hp=f"{character.hp}->{amounts.hp}",
            mana=f"{character.mana}->{amounts.mana}",
            forced=force_full_heal,
        )
        return ServiceResult.ok(
            HealResult(
                healed=True,
                old_hp=character.hp,
                new_hp=amounts.hp,
                old_mana=character.mana,
                new_mana=amounts.mana,
                character=character.model_copy(
                    update={"hp": amounts.hp, "mana": amounts.mana, "last_activity": now}
                ),
            )
        )


__all__ = ["HealingService"]
