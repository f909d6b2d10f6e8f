"""Enumeration types for the Tower Trials client core."""

from __future__ import annotations

from enum import StrEnum


class GameMode(StrEnum):
    """Top-level screen the session is in.

    Legal transitions are enforced by ``GameStateStore.set_mode``.
    """

    MENU = "menu"
    HUB = "hub"
    BATTLE = "battle"
    EVENT = "event"
    GAMEOVER = "gameover"
    FLED = "fled"


class FloorType(StrEnum):
    """Encounter class of a tower floor."""

    COMMON = "common"
    ELITE = "elite"
    BOSS = "boss"
    EVENT = "event"

    @property
    def reward_multiplier(self) -> float:
        """Get the XP/gold multiplier applied to rewards on this floor type.

        Returns:
            Multiplier (1.0 for common floors).
        """
        return _FLOOR_REWARD_MULTIPLIERS[self]


_FLOOR_REWARD_MULTIPLIERS: dict[FloorType, float] = {
    FloorType.COMMON: 1.0,
    FloorType.ELITE: 1.8,
    FloorType.BOSS: 2.5,
    FloorType.EVENT: 1.2,
}


class MonsterBehavior(StrEnum):
    """Combat disposition of a monster."""

    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    BALANCED = "balanced"


class SpellEffectType(StrEnum):
    """Kind of effect a spell applies."""

    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"
    DOT = "dot"
    HOT = "hot"


class ModificationType(StrEnum):
    """How an attribute modification is applied."""

    FLAT = "flat"
    PERCENTAGE = "percentage"


class ConsumableType(StrEnum):
    """Category of a consumable item."""

    POTION = "potion"
    ELIXIR = "elixir"
    ANTIDOTE = "antidote"
    BUFF = "buff"


class RankingMode(StrEnum):
    """Metric a ranking page is ordered by.

    Each mode maps to its own ranking stored procedure.
    """

    FLOOR = "floor"
    LEVEL = "level"
    GOLD = "gold"

    @property
    def procedure(self) -> str:
        """Get the stored procedure serving this ranking mode.

        Returns:
            Stored procedure name.
        """
        suffix = "highest_floor" if self is RankingMode.FLOOR else self.value
        return f"get_dynamic_ranking_by_{suffix}"


class RankingStatus(StrEnum):
    """Character liveness filter for rankings."""

    ALL = "all"
    ALIVE = "alive"
    DEAD = "dead"
