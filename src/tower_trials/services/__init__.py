"""Stored-procedure services.

Each service wraps a group of backend procedures, owns the cache reads and
invalidations for its records, and returns ``ServiceResult`` envelopes.
"""

from tower_trials.services.character import CharacterService
from tower_trials.services.checkpoints import CheckpointService
from tower_trials.services.consumables import ConsumableService
from tower_trials.services.container import ServiceContainer
from tower_trials.services.equipment import EquipmentService
from tower_trials.services.floors import FloorService
from tower_trials.services.healing import HealingService
from tower_trials.services.monsters import MonsterService
from tower_trials.services.ranking import RankingService
from tower_trials.services.spells import SpellService

__all__ = [
    "ServiceContainer",
    "CharacterService",
    "CheckpointService",
    "ConsumableService",
    "EquipmentService",
    "FloorService",
    "HealingService",
    "MonsterService",
    "RankingService",
    "SpellService",
]
