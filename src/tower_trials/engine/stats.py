"""Character stats: the derived-stats formula and equipment aggregation.

``calculate_derived_stats`` mirrors the backend formula so the client can
rebuild a usable record when the full-stats RPC is unavailable, and so the
attribute distribution screen can preview results.

``StatsAggregator`` combines a character with its equipment bonuses and
builds the ``GamePlayer`` projection used while playing. Equipment failures
degrade to zero bonuses and spell failures to an empty spell list; neither
blocks loading the character.

Example:
    >>> aggregator = StatsAggregator(equipment_service, spell_service)
    >>> calculation = await aggregator.calculate_stats_with_equipment(character)
    >>> calculation.total_stats.atk >= calculation.base_stats.atk
    True
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from tower_trials.core.constants import (
    DEFAULT_ATTRIBUTE,
    DEFAULT_MASTERY,
    MAGIC_DAMAGE_SOFT_CAP,
    MAX_CRITICAL_CHANCE,
    MAX_CRITICAL_DAMAGE,
    MAX_DOUBLE_ATTACK_CHANCE,
    MAX_MAGIC_DAMAGE_BONUS,
)
from tower_trials.core.logging import get_logger
from tower_trials.engine.validation import validate_number
from tower_trials.models.character import (
    CoreStats,
    DerivedStats,
    EquipmentBonuses,
    GamePlayer,
    StatsCalculation,
)
from tower_trials.models.effects import ActiveEffects


if TYPE_CHECKING:
    from tower_trials.models.character import Character
    from tower_trials.services.equipment import EquipmentService
    from tower_trials.services.spells import SpellService

logger = get_logger(__name__)


# =============================================================================
# Derived Stats Formula
# =============================================================================


def _attribute(value: int | None) -> int:
    return validate_number(value or DEFAULT_ATTRIBUTE, default=DEFAULT_ATTRIBUTE, min_value=0)


def _mastery(value: int | None) -> int:
    return validate_number(value or DEFAULT_MASTERY, default=DEFAULT_MASTERY, min_value=0)


def calculate_derived_stats(character: Character) -> DerivedStats:
    """Compute derived stats from level, attributes and masteries.

    Missing attributes count as 10 and missing masteries as 1.

    Args:
        character: The character record.

    Returns:
        DerivedStats with hp/mana at their maximums.
    """
    level = validate_number(character.level, default=1, min_value=1)

    str_scaling = _attribute(character.strength) ** 1.1
    dex_scaling = _attribute(character.dexterity) ** 1.1
    int_scaling = _attribute(character.intelligence) ** 1.1
    wis_scaling = _attribute(character.wisdom) ** 1.05
    vit_scaling = _attribute(character.vitality) ** 1.2
    luck = _attribute(character.luck)

    weapon_mastery = (
        max(
            _mastery(character.sword_mastery),
            _mastery(character.axe_mastery),
            _mastery(character.blunt_mastery),
        )
        ** 1.05
    )
    defense_mastery = _mastery(character.defense_mastery) ** 1.1
    magic_mastery = _mastery(character.magic_mastery) ** 1.05

    base_hp = 50 + level * 2
    base_mana = 20 + level
    base_atk = 2 + level
    base_def = 1 + level
    base_speed = 3 + level

    max_hp = base_hp + math.floor(vit_scaling * 1.5) + math.floor(str_scaling * 0.2)
    max_mana = (
        base_mana
        + math.floor(int_scaling * 1.0)
        + math.floor(wis_scaling * 0.8)
        + math.floor(magic_mastery * 0.5)
    )
    atk = (
        base_atk
        + math.floor(str_scaling * 0.8)
        + math.floor(weapon_mastery * 0.4)
        + math.floor(dex_scaling * 0.1)
    )
    magic_attack = (
        base_atk
        + math.floor(int_scaling * 0.8)
        + math.floor(wis_scaling * 0.4)
        + math.floor(magic_mastery * 0.6)
    )
    defense = (
        base_def
        + math.floor(vit_scaling * 0.4)
        + math.floor(wis_scaling * 0.3)
        + math.floor(defense_mastery * 0.8)
    )
    speed = base_speed + math.floor(dex_scaling * 0.8) + math.floor(luck * 0.1)

    critical_chance = min(
        MAX_CRITICAL_CHANCE,
        1.0 + dex_scaling * 0.15 + luck * 0.25 + str_scaling * 0.05 + weapon_mastery * 0.1,
    )
    critical_damage = min(
        MAX_CRITICAL_DAMAGE,
        102.0 + str_scaling * 0.3 + luck * 0.2 + weapon_mastery * 0.4,
    )

    magic_damage = 2.0 + int_scaling * 0.8 + wis_scaling * 0.4 + magic_mastery * 1.0
    if magic_damage > MAGIC_DAMAGE_SOFT_CAP:
        magic_damage = MAGIC_DAMAGE_SOFT_CAP + (magic_damage - MAGIC_DAMAGE_SOFT_CAP) * 0.5
    magic_damage = min(MAX_MAGIC_DAMAGE_BONUS, magic_damage)

    double_attack = min(MAX_DOUBLE_ATTACK_CHANCE, dex_scaling * 0.05 + luck * 0.1)

    return DerivedStats(
        hp=max_hp,
        max_hp=max_hp,
        mana=max_mana,
        max_mana=max_mana,
        atk=atk,
        magic_attack=magic_attack,
        defense=defense,
        speed=speed,
        critical_chance=critical_chance,
        critical_damage=critical_damage,
        magic_damage_bonus=magic_damage,
        double_attack_chance=double_attack,
    )


# =============================================================================
# Equipment Aggregation
# =============================================================================


def apply_equipment_bonuses(base: CoreStats, bonuses: EquipmentBonuses) -> CoreStats:
    """Add equipment bonuses to base stats.

    HP and Mana bonuses raise both the current value and the maximum.

    Args:
        base: Stats without equipment.
        bonuses: Summed equipment bonuses.

    Returns:
        Total stats.
    """
    return CoreStats(
        hp=base.hp + bonuses.total_hp_bonus,
        max_hp=base.max_hp + bonuses.total_hp_bonus,
        mana=base.mana + bonuses.total_mana_bonus,
        max_mana=base.max_mana + bonuses.total_mana_bonus,
        atk=base.atk + bonuses.total_atk_bonus,
        defense=base.defense + bonuses.total_def_bonus,
        speed=base.speed + bonuses.total_speed_bonus,
        critical_chance=base.critical_chance + bonuses.total_critical_chance_bonus,
        critical_damage=base.critical_damage + bonuses.total_critical_damage_bonus,
    )


class StatsAggregator:
    """Compose characters with their equipment and spells.

    Attributes:
        equipment_service: Source of equipment bonuses.
        spell_service: Source of equipped spells.
    """

    def __init__(self, equipment_service: EquipmentService, spell_service: SpellService) -> None:
        self.equipment_service = equipment_service
        self.spell_service = spell_service

    async def load_equipment_bonuses(self, character_id: str) -> EquipmentBonuses:
        """Fetch equipment bonuses, degrading to zeros on any failure.

        Args:
            character_id: Character whose equipment is summed.

        Returns:
            The bonuses, or all zeros if the RPC failed.
        """
        result = await self.equipment_service.calculate_equipment_bonuses(character_id)
        if not result.success or result.data is None:
            logger.warning(
                "Equipment bonuses unavailable, using zero bonuses",
                character_id=character_id,
                error=result.error,
            )
            return EquipmentBonuses.zero()
        return result.data

    async def calculate_stats_with_equipment(
        self,
        character: Character,
        character_id: str | None = None,
    ) -> StatsCalculation:
        """Compute base, total and derived stats for a character.

        Args:
            character: The server character record.
            character_id: Override for the id used to fetch equipment.

        Returns:
            StatsCalculation where ``total = base + bonus`` per field.
        """
        bonuses = await self.load_equipment_bonuses(character_id or character.id)
        derived = calculate_derived_stats(character)
        base = CoreStats(
            hp=character.hp,
            max_hp=character.max_hp,
            mana=character.mana,
            max_mana=character.max_mana,
            atk=character.atk,
            defense=character.defense,
            speed=character.speed,
            critical_chance=(
                character.critical_chance
                if character.critical_chance is not None
                else derived.critical_chance
            ),
            critical_damage=(
                character.critical_damage
                if character.critical_damage is not None
                else derived.critical_damage
            ),
        )
        return StatsCalculation(
            base_stats=base,
            total_stats=apply_equipment_bonuses(base, bonuses),
            derived_stats=derived,
            equipment_bonuses=bonuses,
        )

    async def build_game_player(
        self,
        character: Character,
        *,
        load_spells: bool = True,
    ) -> GamePlayer:
        """Build the in-game projection of a character.

        Args:
            character: The server character record (already auto-healed).
            load_spells: Whether to fetch equipped spells.

        Returns:
            A fresh GamePlayer with turn flags reset.
        """
        calculation = await self.calculate_stats_with_equipment(character)
        base = calculation.base_stats
        total = calculation.total_stats
        derived = calculation.derived_stats

        spells = []
        if load_spells:
            spell_result = await self.spell_service.get_character_equipped_spells(character.id)
            if spell_result.success and spell_result.data is not None:
                spells = spell_result.data
            else:
                logger.warning(
                    "Equipped spells unavailable, continuing without spells",
                    character_id=character.id,
                    error=spell_result.error,
                )

        payload = character.model_dump()
        payload.update(
            hp=total.hp,
            max_hp=total.max_hp,
            mana=total.mana,
            max_mana=total.max_mana,
            atk=total.atk,
            defense=total.defense,
            speed=total.speed,
            critical_chance=total.critical_chance,
            critical_damage=total.critical_damage,
            magic_attack=derived.magic_attack,
            magic_damage_bonus=derived.magic_damage_bonus,
            double_attack_chance=derived.double_attack_chance,
            base_hp=base.hp,
            base_max_hp=base.max_hp,
            base_mana=base.mana,
            base_max_mana=base.max_mana,
            base_atk=base.atk,
            base_def=base.defense,
            base_speed=base.speed,
            equipment_hp_bonus=total.max_hp - base.max_hp,
            equipment_mana_bonus=total.max_mana - base.max_mana,
            equipment_atk_bonus=total.atk - base.atk,
            equipment_def_bonus=total.defense - base.defense,
            equipment_speed_bonus=total.speed - base.speed,
            is_player_turn=True,
            special_cooldown=0,
            defense_cooldown=0,
            is_defending=False,
            potion_used_this_turn=False,
            spells=spells,
            active_effects=ActiveEffects(),
        )
        return GamePlayer.model_validate(payload)


__all__ = [
    "calculate_derived_stats",
    "apply_equipment_bonuses",
    "StatsAggregator",
]
