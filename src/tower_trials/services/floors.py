"""Floor data lookup with cache and deterministic fallback.

When the backend cannot describe a floor, a fallback is generated from the
floor number so a run is never blocked on floor metadata.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from tower_trials.core.constants import BOSS_FLOOR_INTERVAL, EARLY_CHECKPOINT_FLOOR, ELITE_FLOOR_INTERVAL
from tower_trials.core.exceptions import TowerTrialsError
from tower_trials.core.logging import get_logger
from tower_trials.engine.checkpoints import is_valid_checkpoint_floor
from tower_trials.engine.validation import validate_number
from tower_trials.models.enums import FloorType
from tower_trials.models.result import ServiceResult
from tower_trials.models.tower import Floor
from tower_trials.services.base import BaseService, first_row


if TYPE_CHECKING:
    from tower_trials.core.config import GameSettings
    from tower_trials.rpc.transport import RpcTransport
    from tower_trials.storage.cache import CacheRegistry

logger = get_logger(__name__)


def floor_type_for(floor_number: int) -> FloorType:
    """Classify a floor by its number.

    Args:
        floor_number: 1-based floor.

    Returns:
        BOSS on floor 5 and every tenth floor, ELITE on other multiples of
        five, COMMON otherwise.
    """
    if floor_number == EARLY_CHECKPOINT_FLOOR or floor_number % BOSS_FLOOR_INTERVAL == 0:
        return FloorType.BOSS
    if floor_number % ELITE_FLOOR_INTERVAL == 0:
        return FloorType.ELITE
    return FloorType.COMMON


def build_fallback_floor(floor_number: int) -> Floor:
    """Generate floor data without the backend."""
    floor_type = floor_type_for(floor_number)
    if floor_type is FloorType.BOSS:
        description = (
            f"First Challenge - Floor {floor_number}"
            if floor_number == EARLY_CHECKPOINT_FLOOR
            else f"Boss Lair - Floor {floor_number}"
        )
    elif floor_type is FloorType.ELITE:
        description = f"Elite Domain - Floor {floor_number}"
    else:
        description = f"Floor {floor_number}"
    return Floor(
        floor_number=floor_number,
        type=floor_type,
        is_checkpoint=is_valid_checkpoint_floor(floor_number),
        min_level=max(1, floor_number // 3),
        description=description,
    )


def calculate_floor_rewards(base_xp: int, base_gold: int, floor_type: FloorType) -> tuple[int, int]:
    """Scale battle rewards by floor type.

    Args:
        base_xp: Enemy XP reward.
        base_gold: Enemy gold reward.
        floor_type: Floor the enemy was fought on.

    Returns:
        ``(xp, gold)`` floored.
    """
    multiplier = floor_type.reward_multiplier
    return int(base_xp * multiplier), int(base_gold * multiplier)


class FloorService(BaseService):
    """Serve floor metadata."""

    def __init__(
        self,
        rpc: RpcTransport,
        caches: CacheRegistry,
        game_settings: GameSettings,
    ) -> None:
        super().__init__(rpc, caches)
        self.game_settings = game_settings

    def normalize_floor(self, floor_number: int) -> int:
        return validate_number(
            floor_number, default=1, min_value=1, max_value=self.game_settings.max_floor
        )

    async def get_floor_data(self, floor_number: int) -> ServiceResult[Floor]:
        """Get floor metadata, falling back to generated data.

        Floors outside ``1..max_floor`` are clamped into range.

        Args:
            floor_number: Requested floor.

        Returns:
            ServiceResult with the Floor; never fails.
        """
        safe_floor = self.normalize_floor(floor_number)
        cached = self.caches.floors.get(safe_floor)
        if cached is not None:
            return ServiceResult.ok(cached)

        try:
            data = await self._call("get_floor_data", {"p_floor_number": safe_floor}, read_only=True)
            row = first_row(data)
            floor = (
                Floor.model_validate({"floor_number": safe_floor, **row})
                if row is not None
                else None
            )
        except (TowerTrialsError, PydanticValidationError) as exc:
            logger.warning("Floor data unavailable", floor=safe_floor, error=str(exc))
            floor = None

        if floor is None:
            floor = build_fallback_floor(safe_floor)
            logger.info("Using generated floor data", floor=safe_floor, type=str(floor.type))

        self.caches.floors.set(safe_floor, floor)
        return ServiceResult.ok(floor)


__all__ = [
    "FloorService",
    "floor_type_for",
    "build_fallback_floor",
    "calculate_floor_rewards",
]
