"""Game state store: the single source of truth for a client session.

Every state change goes through a commit that enforces the store's
invariants before listeners are notified:

- battle mode always has an enemy;
- mode changes follow the transition table (any mode may go back to menu);
- player HP and Mana stay within ``[0, max]``.

A violated invariant raises ``InvalidGameStateError`` and leaves the
current state untouched.

Example:
    >>> store = GameStateStore()
    >>> unsubscribe = store.subscribe(render)
    >>> store.set_mode(GameMode.HUB)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from tower_trials.core.exceptions import InvalidGameStateError
from tower_trials.core.logging import get_logger
from tower_trials.engine.validation import validate_number
from tower_trials.models.character import GamePlayer
from tower_trials.models.enums import GameMode
from tower_trials.models.game_state import GameState, LoadingState


logger = get_logger(__name__)

Listener = Callable[[GameState], None]

ALLOWED_TRANSITIONS: dict[GameMode, frozenset[GameMode]] = {
    GameMode.MENU: frozenset({GameMode.HUB}),
    GameMode.HUB: frozenset({GameMode.BATTLE, GameMode.EVENT}),
    GameMode.BATTLE: frozenset({GameMode.HUB, GameMode.GAMEOVER, GameMode.FLED}),
    GameMode.EVENT: frozenset({GameMode.HUB}),
    GameMode.FLED: frozenset({GameMode.HUB}),
    GameMode.GAMEOVER: frozenset({GameMode.HUB}),
}
"""Legal mode changes besides staying put and returning to the menu."""


def can_transition(current: GameMode, target: GameMode) -> bool:
    """Check whether a mode change is legal.

    Args:
        current: Mode now.
        target: Requested mode.

    Returns:
        True for same-mode updates, any change to MENU, and table entries.
    """
    if current == target or target == GameMode.MENU:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


class GameStateStore:
    """Holds the session's GameState and notifies listeners on commit.

    Attributes:
        loading: Per-operation loading flags.
        error: Last user-facing error, if any.
        commit_count: Number of state commits since creation.
    """

    def __init__(self, initial: GameState | None = None) -> None:
        self._state = initial or GameState()
        self._listeners: list[Listener] = []
        self.loading = LoadingState()
        self.error: str | None = None
        self.commit_count = 0

    @property
    def state(self) -> GameState:
        return self._state

    # =========================================================================
    # Subscription
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with the new state after each commit.

        Args:
            listener: Callable receiving the committed GameState.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Commit
    # =========================================================================

    def _check_invariants(self, new_state: GameState, *, check_transition: bool) -> None:
        current = self._state.mode
        if check_transition and not can_transition(current, new_state.mode):
            raise InvalidGameStateError(
                f"Illegal mode change: {current} -> {new_state.mode}",
                current_state=str(current),
                expected_states=sorted(str(mode) for mode in ALLOWED_TRANSITIONS.get(current, ())),
            )
        if new_state.mode == GameMode.BATTLE and new_state.current_enemy is None:
            raise InvalidGameStateError(
                "Battle mode requires an enemy",
                current_state=str(new_state.mode),
            )
        player = new_state.player
        if player is not None and not (
            0 <= player.hp <= player.max_hp and 0 <= player.mana <= player.max_mana
        ):
            raise InvalidGameStateError(
                "Player HP/Mana out of range",
                details={
                    "hp": player.hp,
                    "max_hp": player.max_hp,
                    "mana": player.mana,
                    "max_mana": player.max_mana,
                },
            )

    def _commit(self, new_state: GameState, *, check_transition: bool = True) -> GameState:
        self._check_invariants(new_state, check_transition=check_transition)
        previous_mode = self._state.mode
        self._state = new_state
        self.commit_count += 1
        if previous_mode != new_state.mode:
            logger.info("Game mode changed", previous=str(previous_mode), mode=str(new_state.mode))
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    # =========================================================================
    # Actions
    # =========================================================================

    def set_game_state(self, state: GameState) -> GameState:
        """Replace the whole state.

        Raises:
            InvalidGameStateError: If the new state breaks an invariant.
        """
        return self._commit(state)

    def update(self, **changes: Any) -> GameState:
        """Apply a partial update.

        Args:
            **changes: GameState fields to replace.

        Returns:
            The committed state.

        Raises:
            InvalidGameStateError: On unknown fields or a broken invariant.
        """
        unknown = set(changes) - set(GameState.model_fields)
        if unknown:
            raise InvalidGameStateError(
                "Unknown game state fields",
                details={"fields": sorted(unknown)},
            )
        return self._commit(self._state.model_copy(update=changes))

    def reset(self) -> GameState:
        """Return to a fresh menu state and clear loading flags and errors."""
        self.loading = LoadingState()
        self.error = None
        return self._commit(GameState(), check_transition=False)

    def set_mode(self, mode: GameMode) -> GameState:
        return self.update(mode=mode)

    def set_message(self, message: str) -> GameState:
        return self.update(game_message=message)

    def set_player_turn(self, is_player_turn: bool) -> GameState:
        return self.update(is_player_turn=is_player_turn)

    def _require_player(self) -> GamePlayer:
        player = self._state.player
        if player is None:
            raise InvalidGameStateError("No player loaded", current_state=str(self._state.mode))
        return player

    def update_player_stats(self, hp: Any = None, mana: Any = None) -> GameState:
        """Set player HP and/or Mana, clamped to ``[0, max]``.

        Args:
            hp: New HP, or None to keep.
            mana: New Mana, or None to keep.

        Raises:
            InvalidGameStateError: If no player is loaded.
        """
        player = self._require_player()
        changes: dict[str, int] = {}
        if hp is not None:
            changes["hp"] = validate_number(hp, default=player.hp, min_value=0, max_value=player.max_hp)
        if mana is not None:
            changes["mana"] = validate_number(
                mana, default=player.mana, min_value=0, max_value=player.max_mana
            )
        return self.update(player=player.model_copy(update=changes))

    def update_player_gold(self, gold: Any) -> GameState:
        player = self._require_player()
        valid_gold = validate_number(gold, default=player.gold, min_value=0)
        return self.update(player=player.model_copy(update={"gold": valid_gold}))

    def update_player_floor(self, floor: Any) -> GameState:
        """Move the player to a floor, raising ``highest_floor`` if needed.

        Raises:
            InvalidGameStateError: If no player is loaded.
        """
        player = self._require_player()
        valid_floor = validate_number(floor, default=player.floor, min_value=1)
        return self.update(
            player=player.model_copy(update={"floor": valid_floor}),
            highest_floor=max(self._state.highest_floor, valid_floor),
        )

    def set_loading(self, operation: str, value: bool) -> None:
        """Set a loading flag.

        Raises:
            InvalidGameStateError: If the operation has no flag.
        """
        if operation not in LoadingState.model_fields:
            raise InvalidGameStateError("Unknown loading flag", details={"operation": operation})
        self.loading = self.loading.model_copy(update={operation: value})

    def set_error(self, error: str | None) -> None:
        self.error = error
        if error:
            logger.warning("Game error surfaced", error=error)


__all__ = ["GameStateStore", "ALLOWED_TRANSITIONS", "can_transition", "Listener"]
