"""Ranking reads and score submission.

Global ranking pages are cached for two minutes per query; user history and
stats for five. Saving a score drops the submitting user's entries and every
global page, since any page may now be out of order.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from tower_trials.core.constants import MAX_RANKING_LIMIT
from tower_trials.core.exceptions import TowerTrialsError
from tower_trials.core.logging import get_logger
from tower_trials.engine.validation import validate_number
from tower_trials.models.enums import RankingMode, RankingStatus
from tower_trials.models.ranking import RankingEntry, RankingQuery, SaveRankingData, UserStats
from tower_trials.models.result import ServiceResult
from tower_trials.services.base import BaseService, first_row, rows


logger = get_logger(__name__)


class RankingService(BaseService):
    """Leaderboards and user bests."""

    async def save_score(self, score: SaveRankingData) -> ServiceResult[str]:
        """Submit a finished run.

        Args:
            score: The run's result.

        Returns:
            ServiceResult with the new entry id.
        """
        try:
            data = await self._call(
                "save_ranking_entry",
                {
                    "p_user_id": score.user_id,
                    "p_player_name": score.player_name,
                    "p_floor": score.floor,
                    "p_character_level": score.character_level,
                    "p_character_gold": score.character_gold,
                    "p_character_alive": score.character_alive,
                },
            )
        except TowerTrialsError as exc:
            return ServiceResult.fail(exc)

        self.caches.invalidate_user_rankings(score.user_id)
        self.caches.rankings.clear_all()
        logger.info("Ranking entry saved", user_id=score.user_id, floor=score.floor)
        return ServiceResult.ok(str(data) if data is not None else "")

    async def get_global_ranking(
        self, query: RankingQuery | None = None
    ) -> ServiceResult[list[RankingEntry]]:
        """Get one page of the global ranking.

        Args:
            query: Mode, page size, filters and page; defaults to the first
                floor-ranking page.

        Returns:
            ServiceResult with the entries.
        """
        query = query or RankingQuery()
        cached = self.caches.rankings.get(query.cache_key)
        if cached is not None:
            return ServiceResult.ok(cached)
        try:
            data = await self._call(
                query.mode.procedure,
                {
                    "p_limit": query.limit,
                    "p_status_filter": str(query.status),
                    "p_name_filter": query.name_filter,
                    "p_offset": query.offset,
                },
                read_only=True,
            )
            entries = [RankingEntry.model_validate(row) for row in rows(data)]
        except (TowerTrialsError, PydanticValidationError) as exc:
            return ServiceResult.fail(exc)
        self.caches.rankings.set(query.cache_key, entries)
        return ServiceResult.ok(entries)

    async def count_ranking_entries(
        self,
        status: RankingStatus = RankingStatus.ALL,
        name_filter: str = "",
    ) -> ServiceResult[int]:
        """Count ranking entries matching a filter.

        The procedure may answer with a bare number, a row such as
        ``{"count": 5}``, or a list of either.
        """
        try:
            data = await self._call(
                "count_ranking_entries",
                {"p_status_filter": str(status), "p_name_filter": name_filter},
                read_only=True,
            )
        except TowerTrialsError as exc:
            return ServiceResult.fail(exc)
        row = first_row(data)
        if row is not None:
            value = row.get("count", next(iter(row.values()), 0))
        elif isinstance(data, list):
            value = data[0] if data else 0
        else:
            value = data
        return ServiceResult.ok(validate_number(value, default=0, min_value=0))

    async def get_user_ranking(
        self, user_id: str, limit: int = 10
    ) -> ServiceResult[list[RankingEntry]]:
        """Get a user's run history, best first."""
        key = f"{user_id}-{limit}"
        cached = self.caches.user_rankings.get(key)
        if cached is not None:
            return ServiceResult.ok(cached)
        try:
            data = await self._call(
                "get_dynamic_user_ranking_history",
                {"p_user_id": user_id, "p_limit": limit},
                read_only=True,
            )
            entries = [RankingEntry.model_validate(row) for row in rows(data)]
        except (TowerTrialsError, PydanticValidationError) as exc:
            return ServiceResult.fail(exc)
        self.caches.user_rankings.set(key, entries)
        return ServiceResult.ok(entries)

    async def get_user_stats(self, user_id: str) -> ServiceResult[UserStats]:
        cached = self.caches.user_stats.get(user_id)
        if cached is not None:
            return ServiceResult.ok(cached)
        try:
            data = await self._call(
                "get_dynamic_user_stats", {"p_user_id": user_id}, read_only=True
            )
            row = first_row(data)
            stats = UserStats.model_validate(row) if row is not None else UserStats()
        except (TowerTrialsError, PydanticValidationError) as exc:
            return ServiceResult.fail(exc)
        self.caches.user_stats.set(user_id, stats)
        return ServiceResult.ok(stats)

    async def get_player_ranking_position(
        self,
        user_id: str,
        mode: RankingMode = RankingMode.FLOOR,
    ) -> ServiceResult[int | None]:
        """Find a user's best position on the first leaderboard page.

        Args:
            user_id: User to locate.
            mode: Ranking metric.

        Returns:
            ServiceResult with the 1-based position, or None if the user is
            not within the first ``MAX_RANKING_LIMIT`` entries.
        """
        page = await self.get_global_ranking(RankingQuery(mode=mode, limit=MAX_RANKING_LIMIT))
        if not page.success or page.data is None:
            return ServiceResult.fail(page.error or "Ranking unavailable")
        for position, entry in enumerate(page.data, start=1):
            if entry.user_id == user_id:
                return ServiceResult.ok(position)
        return ServiceResult.ok(None)


__all__ = ["RankingService"]
