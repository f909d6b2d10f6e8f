"""Checkpoint and floor progression service.

Moving a character to a checkpoint is two writes: the floor update, then a
heal to max. Both write values are checked before the first one
is sent. The heal is only attempted once the floor update succeeded, so
a failed transition never leaves a healed character on the old floor.
Checkpoints are always computed from a fresh server read, never a cached
character.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tower_trials.core.exceptions import (
    InvalidCheckpointError,
    RpcError,
    TowerTrialsError,
    ValidationError,
)
from tower_trials.core.logging import get_logger
from tower_trials.engine.checkpoints import (
    build_checkpoints,
    is_checkpoint_unlocked,
    is_valid_checkpoint_floor,
)
from tower_trials.models.result import ServiceResult
from tower_trials.services.base import BaseService


if TYPE_CHECKING:
    from tower_trials.core.config import GameSettings
    from tower_trials.models.character import Character
    from tower_trials.models.progression import Checkpoint
    from tower_trials.rpc.transport import RpcTransport
    from tower_trials.services.character import CharacterService
    from tower_trials.services.healing import HealingService
    from tower_trials.storage.cache import CacheRegistry

logger = get_logger(__name__)


class CheckpointService(BaseService):
    """Compute checkpoints and move characters between floors.

    Attributes:
        characters: Character reads and cache invalidation.
        healing: HP/Mana writes.
        game_settings: Floor bounds.
    """

    def __init__(
        self,
        rpc: RpcTransport,
        caches: CacheRegistry,
        characters: CharacterService,
        healing: HealingService,
        game_settings: GameSettings,
    ) -> None:
        super().__init__(rpc, caches)
        self.characters = characters
        self.healing = healing
        self.game_settings = game_settings

    async def update_character_floor(self, character_id: str, floor: int) -> ServiceResult[None]:
        """Persist a character's current floor.

        Args:
            character_id: Character to move.
            floor: Target floor, within ``1..max_floor``.

        Returns:
            ServiceResult without payload.
        """
        if not 1 <= floor <= self.game_settings.max_floor:
            return ServiceResult.fail(
                ValidationError(
                    f"Floor must be between 1 and {self.game_settings.max_floor}",
                    field_name="floor",
                    invalid_value=floor,
                )
            )
        try:
            await self._call(
                "update_character_floor",
                {"p_character_id": character_id, "p_floor": floor},
            )
        except RpcError as exc:
            return ServiceResult.fail(exc)

        self.characters.invalidate(character_id)
        logger.info("Character floor updated", character_id=character_id, floor=floor)
        return ServiceResult.ok()

    async def _load_fresh(self, character_id: str) -> ServiceResult[Character]:
        return await self.characters.get_character(character_id, force_refresh=True)

    async def get_unlocked_checkpoints(self, character_id: str) -> ServiceResult[list[Checkpoint]]:
        """List the checkpoints a character has unlocked.

        Args:
            character_id: Character to inspect.

        Returns:
            ServiceResult with checkpoints in ascending order (floor 1 first).
        """
        loaded = await self._load_fresh(character_id)
        if not loaded.success or loaded.data is None:
            return ServiceResult.fail(loaded.error or "Character not found")
        return ServiceResult.ok(build_checkpoints(loaded.data.reached_floor))

    async def _move_and_heal(self, character: Character, floor: int) -> ServiceResult[Character]:
        try:
            self.healing.validate_amount("hp", character.max_hp)
            self.healing.validate_amount("mana", character.max_mana)
        except TowerTrialsError as exc:
            logger.warning(
                "Heal values out of range, floor left unchanged",
                character_id=character.id,
                floor=floor,
                error=str(exc),
            )
            return ServiceResult.fail(exc)

        moved = await self.update_character_floor(character.id, floor)
        if not moved.success:
            logger.warning(
                "Floor update failed, skipping heal",
                character_id=character.id,
                floor=floor,
                error=moved.error,
            )
            return ServiceResult.fail(moved.error or "Floor update failed")

        healed = await self.healing.update_character_hp_mana(
            character.id, character.max_hp, character.max_mana
        )
        if not healed.success:
            return ServiceResult.fail(healed.error or "Heal after floor change failed")

        return ServiceResult.ok(
            character.model_copy(
                update={"floor": floor, "hp": character.max_hp, "mana": character.max_mana}
            )
        )

    async def start_from_checkpoint(
        self,
        character_id: str,
        target_floor: int,
    ) -> ServiceResult[Character]:
        """Move a character to an unlocked checkpoint and heal to max.

        Args:
            character_id: Character to move.
            target_floor: Requested checkpoint floor.

        Returns:
            ServiceResult with the moved character. Fails with an
            ``InvalidCheckpointError`` kind, without any write, if the
            floor is not a checkpoint or not unlocked.
        """
        if not is_valid_checkpoint_floor(target_floor):
            return ServiceResult.fail(
                InvalidCheckpointError(
                    f"Floor {target_floor} is not a checkpoint", floor=target_floor
                )
            )

        loaded = await self._load_fresh(character_id)
        if not loaded.success or loaded.data is None:
            return ServiceResult.fail(loaded.error or "Character not found")
        character = loaded.data

        if not is_checkpoint_unlocked(target_floor, character.reached_floor):
            return ServiceResult.fail(
                InvalidCheckpointError(
                    f"Checkpoint {target_floor} is not unlocked",
                    floor=target_floor,
                    highest_floor=character.reached_floor,
                )
            )

        return await self._move_and_heal(character, target_floor)

    async def reset_character_progress(self, character_id: str) -> ServiceResult[Character]:
        """Send a character back to floor 1 fully healed.

        Args:
            character_id: Character to reset.

        Returns:
            ServiceResult with the reset character.
        """
        loaded = await self._load_fresh(character_id)
        if not loaded.success or loaded.data is None:
            return ServiceResult.fail(loaded.error or "Character not found")
        return await self._move_and_heal(loaded.data, 1)


__all__ = ["CheckpointService"]
