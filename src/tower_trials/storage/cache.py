"""In-memory TTL caches for server-owned records.

Each cache maps an entity id to a value with an absolute expiry. Entries are
evicted lazily: a read at or past the expiry removes the entry and reports a
miss. Misses are never errors; callers fall through to the RPC.

``CacheRegistry`` owns the named caches for a session and implements the
cross-cache invalidation rules (a character change also drops its equipped
spells; a user change drops every cached character of that user). The
global clear is throttled so bursts of "clear everything" requests collapse
into one.

Example:
    >>> cache = TTLCache[str, int]("characters", ttl_seconds=30)
    >>> cache.set("c-1", 42)
    >>> cache.get("c-1")
    42
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from tower_trials.core.exceptions import CacheError
from tower_trials.core.logging import get_logger


if TYPE_CHECKING:
    from tower_trials.core.config import CacheSettings
    from tower_trials.models.character import Character
    from tower_trials.models.effects import PlayerSpell
    from tower_trials.models.ranking import RankingEntry, UserStats
    from tower_trials.models.tower import Enemy, Floor

logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Clock = Callable[[], float]


# =============================================================================
# TTL Cache
# =============================================================================


@dataclass
class CacheEntry(Generic[V]):
    """A cached value and the clock reading at which it expires."""

    value: V
    expiry: float


class TTLCache(Generic[K, V]):
    """A keyed cache with a fixed time-to-live per entry.

    Attributes:
        name: Cache name used in logs.
        ttl_seconds: Lifetime of each entry.
        max_entries: Optional size bound; reaching it sweeps expired entries
            and then drops the entry closest to expiry.
    """

    def __init__(
        self,
        name: str,
        ttl_seconds: float,
        *,
        clock: Clock = time.monotonic,
        max_entries: int | None = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise CacheError("ttl_seconds must be positive", details={"cache": name})
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[K, CacheEntry[V]] = {}

    def get(self, key: K) -> V | None:
        """Return the cached value, evicting it if expired.

        Args:
            key: Entity key.

        Returns:
            The value, or None on a miss.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expiry:
            del self._entries[key]
            logger.debug("Cache entry expired", cache=self.name, key=str(key))
            return None
        return entry.value

    def set(self, key: K, value: V) -> None:
        """Store a value with a fresh expiry.

        Args:
            key: Entity key.
            value: Value to cache.
        """
        if self.max_entries is not None and key not in self._entries:
            if len(self._entries) >= self.max_entries:
                self.sweep()
            if len(self._entries) >= self.max_entries:
                oldest = min(self._entries, key=lambda k: self._entries[k].expiry)
                del self._entries[oldest]
        self._entries[key] = CacheEntry(value=value, expiry=self._clock() + self.ttl_seconds)

    def invalidate(self, key: K) -> bool:
        """Drop one entry.

        Args:
            key: Entity key.

        Returns:
            True if an entry was removed.
        """
        return self._entries.pop(key, None) is not None

    def invalidate_where(self, predicate: Callable[[K, V], bool]) -> int:
        """Drop every entry matching a predicate.

        Args:
            predicate: Called with each key and value.

        Returns:
            Number of entries removed.
        """
        doomed = [key for key, entry in self._entries.items() if predicate(key, entry.value)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear_all(self) -> None:
        self._entries.clear()

    def sweep(self) -> int:
        """Evict every expired entry.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expiry]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def peek_expiry(self, key: K) -> float | None:
        """Return an entry's expiry without evicting it."""
        entry = self._entries.get(key)
        return entry.expiry if entry is not None else None

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[call-overload]
        return entry is not None and self._clock() < entry.expiry

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"TTLCache(name={self.name!r}, ttl_seconds={self.ttl_seconds}, size={len(self)})"


# =============================================================================
# Registry
# =============================================================================


class CacheRegistry:
    """The named caches of one client session.

    Attributes:
        characters: Character records by id.
        user_characters: Character lists by user id.
        monsters: Enemies by floor number.
        floors: Floor data by floor number.
        spells: Equipped spells by character id.
        rankings: Global ranking pages by query key.
        user_rankings: Ranking history by ``user_id-limit``.
        user_stats: User stats by user id.
    """

    def __init__(self, settings: CacheSettings, *, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._clear_throttle = settings.clear_throttle_seconds
        self._last_clear: float | None = None

        self.characters: TTLCache[str, Character] = TTLCache(
            "characters",
            settings.character_ttl_seconds,
            clock=clock,
            max_entries=settings.max_character_entries,
        )
        self.user_characters: TTLCache[str, list[Character]] = TTLCache(
            "user_characters", settings.user_characters_ttl_seconds, clock=clock
        )
        self.monsters: TTLCache[int, Enemy] = TTLCache(
            "monsters", settings.monster_ttl_seconds, clock=clock
        )
        self.floors: TTLCache[int, Floor] = TTLCache(
            "floors", settings.floor_ttl_seconds, clock=clock
        )
        self.spells: TTLCache[str, list[PlayerSpell]] = TTLCache(
            "spells", settings.spells_ttl_seconds, clock=clock
        )
        self.rankings: TTLCache[str, list[RankingEntry]] = TTLCache(
            "rankings", settings.ranking_ttl_seconds, clock=clock
        )
        self.user_rankings: TTLCache[str, list[RankingEntry]] = TTLCache(
            "user_rankings", settings.user_ranking_ttl_seconds, clock=clock
        )
        self.user_stats: TTLCache[str, UserStats] = TTLCache(
            "user_stats", settings.user_ranking_ttl_seconds, clock=clock
        )

        self._caches: dict[str, TTLCache[Any, Any]] = {
            cache.name: cache
            for cache in (
                self.characters,
                self.user_characters,
                self.monsters,
                self.floors,
                self.spells,
                self.rankings,
                self.user_rankings,
                self.user_stats,
            )
        }

    def get_cache(self, name: str) -> TTLCache[Any, Any]:
        """Look up a cache by name.

        Raises:
            CacheError: If no cache has that name.
        """
        try:
            return self._caches[name]
        except KeyError:
            raise CacheError(
                f"Unknown cache: {name}",
                details={"available": sorted(self._caches)},
            ) from None

    def invalidate_character(self, character_id: str) -> None:
        """Drop a character and its equipped spells."""
        self.characters.invalidate(character_id)
        self.spells.invalidate(character_id)
        logger.debug("Character cache invalidated", character_id=character_id)

    def invalidate_user(self, user_id: str) -> None:
        """Drop a user's character list and every cached character they own.

        Args:
            user_id: Owner whose entries are dropped.
        """
        self.user_characters.invalidate(user_id)
        removed = self.characters.invalidate_where(lambda _key, character: character.user_id == user_id)
        logger.debug("User caches invalidated", user_id=user_id, characters_removed=removed)

    def invalidate_user_rankings(self, user_id: str) -> None:
        prefix = f"{user_id}-"
        self.user_rankings.invalidate_where(lambda key, _value: key.startswith(prefix))
        self.user_stats.invalidate(user_id)

    def clear_all_game_caches(self) -> bool:
        """Clear every cache unless a clear happened within the throttle window.

        Returns:
            True if the caches were cleared, False if the call was throttled.
        """
        now = self._clock()
        if self._last_clear is not None and now - self._last_clear < self._clear_throttle:
            logger.debug("Global cache clear throttled")
            return False
        for cache in self._caches.values():
            cache.clear_all()
        self._last_clear = now
        logger.info("All game caches cleared")
        return True

    def stats(self) -> dict[str, int]:
        """Entry counts per cache, for diagnostics."""
        return {name: len(cache) for name, cache in self._caches.items()}


__all__ = ["CacheEntry", "TTLCache", "CacheRegistry", "Clock"]
