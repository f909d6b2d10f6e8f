"""Client-side storage for Tower Trials.

Provides:
- TTL caches for server-owned records, grouped in a per-session registry
- Per-key deduplication of in-flight async operations
"""

from tower_trials.storage.cache import CacheEntry, CacheRegistry, Clock, TTLCache
from tower_trials.storage.inflight import InFlightRegistry

__all__ = [
    "CacheEntry",
    "CacheRegistry",
    "Clock",
    "TTLCache",
    "InFlightRegistry",
]
