"""Tower Trials - client state sync and caching layer.

Keeps a browser-style game client consistent with an authoritative backend
reached through stored-procedure RPCs.

DATA OWNERSHIP:
- The backend owns TRUTH (characters, floors, monsters, rankings)
- The client caches short-lived copies and sanitizes every number it reads
- The game state store is the only place the UI reads session state from

Example:
    >>> from tower_trials import GameOrchestrator, GameStateStore, HttpRpcClient, ServiceContainer
    >>>
    >>> async with HttpRpcClient.from_settings() as rpc:
    ...     hooks = GameOrchestrator(ServiceContainer.create(rpc), GameStateStore())
    ...     await hooks.select_character("c-1")
    ...     await hooks.initialize_battle()
    ...     print(hooks.store.state.game_message)

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 records exchanged with the backend and session state.
    engine: Numeric sanitation, auto-heal, derived stats, checkpoints, store.
    storage: TTL caches and in-flight request deduplication.
    rpc: Stored procedure transport over httpx.
    services: One service per group of backend procedures.
    hooks: Orchestration of user actions into store commits.
"""

from __future__ import annotations

# Core
from tower_trials.core.config import Settings, get_settings
from tower_trials.core.exceptions import TowerTrialsError
from tower_trials.core.logging import configure_logging, get_logger

# Models
from tower_trials.models import (
    Character,
    Enemy,
    Floor,
    GameMode,
    GamePlayer,
    GameState,
    RankingQuery,
    ServiceResult,
)

# Engine
from tower_trials.engine import GameStateStore, calculate_auto_heal, calculate_derived_stats

# Storage / RPC / Services
from tower_trials.storage import CacheRegistry, InFlightRegistry
from tower_trials.rpc import HttpRpcClient, RpcTransport
from tower_trials.services import ServiceContainer

# Hooks
from tower_trials.hooks import BattleOutcome, GameOrchestrator


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "TowerTrialsError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Character",
    "GamePlayer",
    "Enemy",
    "Floor",
    "GameMode",
    "GameState",
    "RankingQuery",
    "ServiceResult",
    # Engine
    "GameStateStore",
    "calculate_auto_heal",
    "calculate_derived_stats",
    # Storage / RPC / Services
    "CacheRegistry",
    "InFlightRegistry",
    "HttpRpcClient",
    "RpcTransport",
    "ServiceContainer",
    # Hooks
    "GameOrchestrator",
    "BattleOutcome",
]
