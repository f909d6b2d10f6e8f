"""Ranking models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tower_trials.core.constants import DEFAULT_RANKING_LIMIT, MAX_RANKING_LIMIT
from tower_trials.models.enums import RankingMode, RankingStatus


class RankingEntry(BaseModel):
    """One row of a ranking page."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    player_name: str
    floor: int = Field(default=1, ge=1)
    character_level: int = Field(default=1, ge=1)
    character_gold: int = Field(default=0, ge=0)
    character_alive: bool = True
    created_at: datetime | None = None


class SaveRankingData(BaseModel):
    """Score submitted when a run ends."""

    user_id: str = Field(min_length=1)
    player_name: str = Field(min_length=1)
    floor: int = Field(ge=1)
    character_level: int = Field(default=1, ge=1)
    character_gold: int = Field(default=0, ge=0)
    character_alive: bool = True


class RankingQuery(BaseModel):
    """Parameters of a global ranking page request.

    The cache key is derived from every field so two different pages never
    share an entry.
    """

    model_config = ConfigDict(frozen=True)

    mode: RankingMode = RankingMode.FLOOR
    limit: int = Field(default=DEFAULT_RANKING_LIMIT, ge=1, le=MAX_RANKING_LIMIT)
    status: RankingStatus = RankingStatus.ALL
    name_filter: str = ""
    page: int = Field(default=1, ge=1)

    @property
    def offset(self) -> int:
        """Get the row offset of this page.

        Returns:
            ``(page - 1) * limit``.
        """
        return (self.page - 1) * self.limit

    @property
    def cache_key(self) -> str:
        """Build the cache key for this page.

        Returns:
            ``mode-limit-status-name-page``.
        """
        return f"{self.mode}-{self.limit}-{self.status}-{self.name_filter}-{self.page}"


class UserStats(BaseModel):
    """A user's best results across all their characters."""

    model_config = ConfigDict(extra="ignore")

    best_floor: int = 0
    best_level: int = 0
    best_gold: int = 0
    total_runs: int = 0
    alive_characters: int = 0


__all__ = ["RankingEntry", "SaveRankingData", "RankingQuery", "UserStats"]
