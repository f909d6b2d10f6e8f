"""Orchestration hooks driving the game state store from user actions."""

from tower_trials.hooks.orchestrator import (
    BattleOutcome,
    GameOrchestrator,
    HookResult,
    SessionHandle,
)

__all__ = ["GameOrchestrator", "SessionHandle", "BattleOutcome", "HookResult"]
