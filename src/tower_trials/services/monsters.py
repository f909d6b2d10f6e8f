"""Monster-by-floor lookup.

Enemies are cached per floor for 30 seconds. Rows are sanitized before they
become ``Enemy`` objects; when the backend has no monster for a floor, a
deterministic fallback scaled by floor is generated instead.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from tower_trials.core.exceptions import TowerTrialsError, ValidationError
from tower_trials.core.logging import get_logger
from tower_trials.engine.validation import validate_enemy_stats
from tower_trials.models.enums import FloorType
from tower_trials.models.tower import Enemy
from tower_trials.models.result import ServiceResult
from tower_trials.services.base import BaseService, first_row
from tower_trials.services.floors import floor_type_for


logger = get_logger(__name__)

FALLBACK_MONSTER_NAMES = (
    "Slime",
    "Goblin",
    "Orc",
    "Skeleton",
    "Wolf",
    "Spider",
    "Troll",
    "Dragon",
)


def build_fallback_enemy(floor: int) -> Enemy:
    """Generate an enemy for a floor without the backend.

    Args:
        floor: Floor number (>= 1).

    Returns:
        An Enemy scaled by floor; boss floors get a boss.
    """
    level = max(1, floor // 5 + 1)
    tier = max(1, floor // 20 + 1)
    is_boss = floor_type_for(floor) == FloorType.BOSS
    base_name = FALLBACK_MONSTER_NAMES[(floor // 2) % len(FALLBACK_MONSTER_NAMES)]
    name = f"{'Boss ' if is_boss else ''}{base_name}{f' T{tier}' if tier > 1 else ''}"

    reward_multiplier = 2.5 if is_boss else 1.0
    hp = (80 if is_boss else 50) + level * 15 + tier * 25
    return Enemy(
        id=f"fallback_{floor}",
        name=name,
        level=level,
        hp=hp,
        max_hp=hp,
        attack=(15 if is_boss else 10) + level * 3 + tier * 5,
        defense=(8 if is_boss else 5) + level * 2 + tier * 3,
        speed=10 + level + tier * 2,
        reward_xp=int((5 + level * 2 + tier * 2) * reward_multiplier),
        reward_gold=int((3 + level + tier) * reward_multiplier),
        tier=tier,
        is_boss=is_boss,
    )


def parse_enemy(row: Mapping[str, Any], floor: int) -> Enemy:
    """Convert a monster row into a sanitized Enemy.

    Monster rows use ``atk``/``def`` and a single ``hp`` column.

    Args:
        row: Raw monster row.
        floor: Floor the monster was requested for.

    Returns:
        The Enemy with full HP.
    """
    sanitized = validate_enemy_stats(row)
    sanitized.setdefault("id", f"monster_{floor}")
    sanitized["hp"] = sanitized["max_hp"]
    return Enemy.model_validate(sanitized)


class MonsterService(BaseService):
    """Serve the enemy for each floor."""

    async def get_enemy_for_floor(self, floor: int) -> ServiceResult[Enemy]:
        """Get the enemy for a floor.

        Args:
            floor: Floor number.

        Returns:
            ServiceResult with the Enemy. Fails only for floors below 1.
        """
        if floor <= 0:
            return ServiceResult.fail(
                ValidationError(f"Invalid floor: {floor}", field_name="floor", invalid_value=floor)
            )

        cached = self.caches.monsters.get(floor)
        if cached is not None:
            return ServiceResult.ok(cached.model_copy(deep=True))

        enemy: Enemy | None = None
        try:
            data = await self._call("get_monster_for_floor", {"p_floor": floor}, read_only=True)
            row = first_row(data)
            if row is not None:
                enemy = parse_enemy(row, floor)
        except (TowerTrialsError, PydanticValidationError) as exc:
            logger.warning("Monster unavailable", floor=floor, error=str(exc))

        if enemy is None:
            enemy = build_fallback_enemy(floor)
            logger.info("Using generated enemy", floor=floor, enemy=enemy.name)

        self.caches.monsters.set(floor, enemy)
        # Battle state mutates enemy HP, so callers get copies.
        return ServiceResult.ok(enemy.model_copy(deep=True))

    async def preload_nearby_floors(self, current_floor: int, radius: int = 2) -> None:
        """Warm the cache for the next floors.

        Args:
            current_floor: Floor the player is on.
            radius: How many floors ahead to load.
        """
        floors = [current_floor + offset for offset in range(1, radius + 1)]
        await asyncio.gather(*(self.get_enemy_for_floor(floor) for floor in floors))
        logger.debug("Nearby floors preloaded", floors=floors)

    def clear_cache(self) -> None:
        self.caches.monsters.clear_all()


__all__ = [
    "MonsterService",
    "build_fallback_enemy",
    "parse_enemy",
]
