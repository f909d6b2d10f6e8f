"""Wiring of the services for one client session.

Example:
    >>> async with HttpRpcClient.from_settings() as rpc:
    ...     services = ServiceContainer.create(rpc)
    ...     page = await services.ranking.get_global_ranking()
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from tower_trials.core.config import get_settings
from tower_trials.engine.healing import utc_now
from tower_trials.engine.stats import StatsAggregator
from tower_trials.services.character import CharacterService
from tower_trials.services.checkpoints import CheckpointService
from tower_trials.services.consumables import ConsumableService
from tower_trials.services.equipment import EquipmentService
from tower_trials.services.floors import FloorService
from tower_trials.services.healing import HealingService
from tower_trials.services.monsters import MonsterService
from tower_trials.services.ranking import RankingService
from tower_trials.services.spells import SpellService
from tower_trials.storage.cache import CacheRegistry, Clock


if TYPE_CHECKING:
    from tower_trials.core.config import Settings
    from tower_trials.rpc.transport import RpcTransport


@dataclass
class ServiceContainer:
    """All services of a session, sharing one transport and cache registry."""

    caches: CacheRegistry
    aggregator: StatsAggregator
    equipment: EquipmentService
    spells: SpellService
    healing: HealingService
    characters: CharacterService
    checkpoints: CheckpointService
    floors: FloorService
    monsters: MonsterService
    consumables: ConsumableService
    ranking: RankingService

    @classmethod
    def create(
        cls,
        rpc: RpcTransport,
        *,
        settings: Settings | None = None,
        clock: Clock = time.monotonic,
        now: Callable[[], datetime] = utc_now,
    ) -> ServiceContainer:
        """Build every service around one transport.

        Args:
            rpc: Stored procedure transport.
            settings: Application settings; loaded from the environment if omitted.
            clock: Monotonic clock for cache expiry.
            now: Wall clock for auto-heal.

        Returns:
            The wired container.
        """
        settings = settings or get_settings()
        caches = CacheRegistry(settings.cache, clock=clock)

        equipment = EquipmentService(rpc, caches)
        spells = SpellService(rpc, caches)
        aggregator = StatsAggregator(equipment, spells)
        healing = HealingService(rpc, caches, settings.game, now=now)
        characters = CharacterService(rpc, caches, aggregator, healing)

        return cls(
            caches=caches,
            aggregator=aggregator,
            equipment=equipment,
            spells=spells,
            healing=healing,
            characters=characters,
            checkpoints=CheckpointService(rpc, caches, characters, healing, settings.game),
            floors=FloorService(rpc, caches, settings.game),
            monsters=MonsterService(rpc, caches),
            consumables=ConsumableService(rpc, caches),
            ranking=RankingService(rpc, caches),
        )


__all__ = ["ServiceContainer"]
