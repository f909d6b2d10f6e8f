"""Orchestration hooks: one coroutine per user action.

Each hook sequences the work for an action in a fixed order: invalidate the
caches that the action makes stale, call the services, sanitize and
aggregate the results, then commit once to the store. Failures never escape
a hook; they are recorded on the store's ``error`` (the toast surface) and
returned as a failed ``ServiceResult``.

Concurrent invocations of the same logical operation (for example two
"start battle" taps for one character) share a single in-flight run, so the
backend sees one RPC sequence and the store sees one commit. If the session
is closed while a hook is suspended on an RPC, the final commit is skipped.

Example:
    >>> hooks = GameOrchestrator(ServiceContainer.create(rpc), GameStateStore())
    >>> await hooks.select_character("c-1")
    >>> result = await hooks.initialize_battle()
    >>> hooks.store.state.mode
    <GameMode.BATTLE: 'battle'>
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from tower_trials.core.exceptions import (
    GameEngineError,
    InvalidGameStateError,
    TowerTrialsError,
)
from tower_trials.core.logging import bind_context, clear_context, get_logger
from tower_trials.models.enums import GameMode
from tower_trials.models.game_state import GameState
from tower_trials.models.result import ServiceResult
from tower_trials.services.floors import calculate_floor_rewards
from tower_trials.services.spells import reset_cooldowns
from tower_trials.storage.inflight import InFlightRegistry


if TYPE_CHECKING:
    from tower_trials.engine.store import GameStateStore
    from tower_trials.models.character import GamePlayer
    from tower_trials.models.progression import AttributeDistribution
    from tower_trials.models.tower import BattleRewards
    from tower_trials.services.container import ServiceContainer

logger = get_logger(__name__)

HookResult = ServiceResult[GameState]


class BattleOutcome(StrEnum):
    """How a battle ended from the client's point of view."""

    VICTORY = "victory"
    FLED = "fled"


@dataclass
class SessionHandle:
    """Liveness flag for the session owning the store.

    Hooks check ``active`` after their last await and skip the commit when
    the owner has gone away.
    """

    active: bool = True

    def close(self) -> None:
        self.active = False


class GameOrchestrator:
    """Run user actions against the services and the store.

    Attributes:
        services: The session's services.
        store: The session's game state store.
        session: Liveness handle checked before each commit.
    """

    def __init__(self, services: ServiceContainer, store: GameStateStore) -> None:
        self.services = services
        self.store = store
        self.session = SessionHandle()
        self._inflight: InFlightRegistry[Hashable, HookResult] = InFlightRegistry()
        logger.info("GameOrchestrator initialized")

    # =========================================================================
    # Plumbing
    # =========================================================================

    async def _run_hook(
        self,
        name: str,
        operation: Callable[[], Awaitable[HookResult]],
        *,
        loading_flag: str | None = None,
    ) -> HookResult:
        """Run a hook body, surfacing any failure on the store.

        Args:
            name: Hook name for logs.
            operation: The hook body.
            loading_flag: Loading flag held for the duration, if any.

        Returns:
            The body's result, or a failure built from a raised error.
        """
        if loading_flag:
            self.store.set_loading(loading_flag, True)
        try:
            result = await operation()
        except TowerTrialsError as exc:
            logger.warning("Hook failed", hook=name, error=str(exc))
            result = ServiceResult.fail(exc)
        finally:
            if loading_flag:
                self.store.set_loading(loading_flag, False)

        if not result.success:
            self.store.set_error(result.error)
        return result

    def _commit(self, **changes: Any) -> HookResult:
        """Commit a partial update unless the session was closed."""
        if not self.session.active:
            logger.info("Session closed, skipping commit", fields=sorted(changes))
            return ServiceResult.fail(GameEngineError("Session is no longer active"))
        self.store.set_error(None)
        return ServiceResult.ok(self.store.update(**changes))

    def _current_player(self) -> GamePlayer:
        player = self.store.state.player
        if player is None:
            raise InvalidGameStateError(
                "No character selected",
                current_state=str(self.store.state.mode),
            )
        return player

    def _require_battle(self, message: str) -> None:
        mode = self.store.state.mode
        if mode != GameMode.BATTLE:
            raise InvalidGameStateError(
                message,
                current_state=str(mode),
                expected_states=[str(GameMode.BATTLE)],
            )

    def _resolve_character_id(self, character_id: str | None) -> str:
        if character_id:
            return character_id
        return self._current_player().id

    async def _load_player(self, character_id: str, *, force_full_heal: bool = False) -> GamePlayer:
        loaded = await self.services.characters.get_character_for_game(
            character_id, force_full_heal=force_full_heal
        )
        if not loaded.success or loaded.data is None:
            raise GameEngineError(
                loaded.error or "Character could not be loaded",
                details={"character_id": character_id},
            )
        return loaded.data

    # =========================================================================
    # Character / Hub
    # =========================================================================

    async def select_character(self, character_id: str) -> HookResult:
        """Load a character and enter the hub with it."""

        async def body() -> HookResult:
            bind_context(character_id=character_id)
            player = await self._load_player(character_id)
            return self._commit(
                mode=GameMode.HUB,
                player=player,
                current_enemy=None,
                current_floor=None,
                battle_rewards=None,
                selected_spell=None,
                highest_floor=player.reached_floor,
                character_deleted=False,
                flee_successful=False,
                game_message=f"Welcome back, {player.name}!",
            )

        return await self._run_hook("select_character", body, loading_flag="load_character")

    async def enter_hub(
        self,
        character_id: str | None = None,
        *,
        force_full_heal: bool = False,
    ) -> HookResult:
        """Return to the hub, reloading the player fresh.

        Args:
            character_id: Character to load; defaults to the current player.
            force_full_heal: Heal to max on entry.
        """

        async def body() -> HookResult:
            target = self._resolve_character_id(character_id)
            player = await self._load_player(target, force_full_heal=force_full_heal)
            return self._commit(
                mode=GameMode.HUB,
                player=player,
                current_enemy=None,
                current_floor=None,
                current_special_event=None,
                selected_spell=None,
                is_player_turn=True,
                highest_floor=max(self.store.state.highest_floor, player.reached_floor),
                game_message="You are back in the hub.",
            )

        return await self._run_hook("enter_hub", body, loading_flag="load_character")

    async def distribute_attribute_points(self, distribution: AttributeDistribution) -> HookResult:
        """Spend attribute points and refresh the player."""

        async def body() -> HookResult:
            player = self._current_player()
            result = await self.services.characters.distribute_attribute_points(
                player.id, distribution
            )
            if not result.success:
                return ServiceResult.fail(result.error or "Attribute distribution failed")
            refreshed = await self.services.characters.get_character_for_game(
                player.id, apply_auto_heal=False
            )
            if not refreshed.success or refreshed.data is None:
                return ServiceResult.fail(refreshed.error or "Character could not be reloaded")
            message = result.data.message if result.data else ""
            return self._commit(player=refreshed.data, game_message=message or "Attributes updated.")

        return await self._run_hook("distribute_attribute_points", body, loading_flag="save_progress")

    # =========================================================================
    # Battle
    # =========================================================================

    async def initialize_battle(self, character_id: str | None = None) -> HookResult:
        """Start a battle on the player's current floor.

        Concurrent calls for the same character share one run.

        Args:
            character_id: Character to fight with; defaults to the current player.
        """
        try:
            target = self._resolve_character_id(character_id)
        except TowerTrialsError as exc:
            self.store.set_error(exc.message)
            return ServiceResult.fail(exc)

        return await self._inflight.run(
            ("initialize_battle", target),
            lambda: self._run_hook(
                "initialize_battle",
                lambda: self._initialize_battle(target),
                loading_flag="start_game",
            ),
        )

    async def _initialize_battle(self, character_id: str) -> HookResult:
        previous = self.store.state.player
        self.services.caches.invalidate_character(character_id)

        player = await self._load_player(character_id)
        floor_number = player.floor

        floor = await self.services.floors.get_floor_data(floor_number)
        enemy = await self.services.monsters.get_enemy_for_floor(floor_number)
        if not enemy.success or enemy.data is None:
            return ServiceResult.fail(enemy.error or f"No enemy found for floor {floor_number}")

        defense_cooldown = 0
        if previous is not None and previous.id == player.id:
            defense_cooldown = max(0, previous.defense_cooldown - 1)

        player = player.model_copy(
            update={
                "spells": reset_cooldowns(player.spells),
                "is_player_turn": True,
                "is_defending": False,
                "potion_used_this_turn": False,
                "defense_cooldown": defense_cooldown,
            }
        )
        logger.info(
            "Battle initialized",
            character_id=character_id,
            floor=floor_number,
            enemy=enemy.data.name,
        )
        return self._commit(
            mode=GameMode.BATTLE,
            player=player,
            current_floor=floor.data,
            current_enemy=enemy.data,
            is_player_turn=True,
            selected_spell=None,
            battle_rewards=None,
            flee_successful=False,
            highest_floor=max(self.store.state.highest_floor, player.reached_floor),
            game_message=f"Floor {floor_number}: {enemy.data.name} appeared!",
        )

    async def use_consumable(self, consumable_id: str) -> HookResult:
        """Use a consumable during the player's turn; once per turn."""

        async def body() -> HookResult:
            player = self._current_player()
            self._require_battle("Consumables can only be used in battle")
            if player.potion_used_this_turn:
                return ServiceResult.fail("A consumable was already used this turn")

            used = await self.services.consumables.use_consumable(player.id, consumable_id)
            if not used.success or used.data is None:
                return ServiceResult.fail(used.error or "Consumable could not be used")

            if not self.session.active:
                return ServiceResult.fail(GameEngineError("Session is no longer active"))
            self.store.update_player_stats(hp=used.data.new_hp, mana=used.data.new_mana)
            updated = self.store.state.player
            if updated is None:
                raise InvalidGameStateError("Player disappeared during consumable use")
            return self._commit(
                player=updated.model_copy(update={"potion_used_this_turn": True}),
                game_message=used.data.message or "Consumable used.",
            )

        return await self._run_hook("use_consumable", body, loading_flag="perform_action")

    async def finish_battle(
        self,
        outcome: BattleOutcome,
        rewards: BattleRewards | None = None,
    ) -> HookResult:
        """Close a battle the player survived.

        A victory persists the next floor and returns to the hub with the
        rewards scaled by floor type; fleeing moves to the fled screen.

        Args:
            outcome: Victory or successful flight.
            rewards: Base rewards reported by the backend for a victory.
        """

        async def body() -> HookResult:
            player = self._current_player()
            state = self.store.state
            self._require_battle("No battle in progress")

            if outcome is BattleOutcome.FLED:
                return self._commit(
                    mode=GameMode.FLED,
                    current_enemy=None,
                    flee_successful=True,
                    game_message="You fled the battle.",
                )

            next_floor = player.floor + 1
            moved = await self.services.checkpoints.update_character_floor(player.id, next_floor)
            if not moved.success:
                return ServiceResult.fail(moved.error or "Could not advance floor")
            await self.services.monsters.preload_nearby_floors(next_floor)

            scaled = rewards
            if rewards is not None and state.current_floor is not None:
                xp, gold = calculate_floor_rewards(
                    rewards.xp, rewards.gold, state.current_floor.type
                )
                scaled = rewards.model_copy(update={"xp": xp, "gold": gold})

            return self._commit(
                mode=GameMode.HUB,
                player=player.model_copy(update={"floor": next_floor}),
                current_enemy=None,
                current_floor=None,
                battle_rewards=scaled,
                highest_floor=max(state.highest_floor, next_floor),
                game_message=f"Victory! Floor {next_floor} awaits.",
            )

        return await self._run_hook("finish_battle", body, loading_flag="save_progress")

    async def handle_defeat(self, *, permadeath: bool = False) -> HookResult:
        """Handle the player's death.

        Args:
            permadeath: Mark the character dead instead of resetting it to
                floor 1 fully healed.
        """

        async def body() -> HookResult:
            player = self._current_player()
            self._require_battle("Defeat can only happen in battle")
            if permadeath:
                dead = await self.services.characters.mark_character_dead(player.id)
                if not dead.success:
                    return ServiceResult.fail(dead.error or "Could not record death")
                return self._commit(
                    mode=GameMode.GAMEOVER,
                    current_enemy=None,
                    character_deleted=True,
                    game_message=f"{player.name} has fallen for good.",
                )

            reset = await self.services.checkpoints.reset_character_progress(player.id)
            if not reset.success or reset.data is None:
                return ServiceResult.fail(reset.error or "Could not reset progress")
            return self._commit(
                mode=GameMode.GAMEOVER,
                current_enemy=None,
                current_floor=None,
                player=player.model_copy(
                    update={"floor": 1, "hp": player.max_hp, "mana": player.max_mana}
                ),
                game_message=f"{player.name} was defeated and returns to floor 1.",
            )

        return await self._run_hook("handle_defeat", body, loading_flag="save_progress")

    # =========================================================================
    # Progression
    # =========================================================================

    async def start_from_checkpoint(self, floor: int) -> HookResult:
        """Move the player to an unlocked checkpoint, healed to max."""

        async def body() -> HookResult:
            player = self._current_player()
            moved = await self.services.checkpoints.start_from_checkpoint(player.id, floor)
            if not moved.success or moved.data is None:
                return ServiceResult(error=moved.error, error_kind=moved.error_kind)
            character = moved.data
            return self._commit(
                player=player.model_copy(
                    update={
                        "floor": character.floor,
                        "hp": player.max_hp,
                        "mana": player.max_mana,
                    }
                ),
                game_message=f"Starting from checkpoint: floor {character.floor}.",
            )

        return await self._run_hook("start_from_checkpoint", body, loading_flag="save_progress")

    # =========================================================================
    # Special Events / Menu
    # =========================================================================

    async def enter_special_event(self, event: dict[str, Any]) -> HookResult:
        async def body() -> HookResult:
            self._current_player()
            return self._commit(
                mode=GameMode.EVENT,
                current_special_event=event,
                game_message=str(event.get("description", "")),
            )

        return await self._run_hook("enter_special_event", body)

    async def leave_special_event(self) -> HookResult:
        async def body() -> HookResult:
            return self._commit(mode=GameMode.HUB, current_special_event=None)

        return await self._run_hook("leave_special_event", body)

    async def return_to_hub(self) -> HookResult:
        """Go back to the hub from the fled or game-over screens."""
        return await self.enter_hub()

    def return_to_menu(self) -> GameState:
        """Drop the session's game state and caches and show the menu."""
        self.services.caches.clear_all_game_caches()
        clear_context()
        return self.store.reset()

    def close(self) -> None:
        """Mark the session closed so pending hooks skip their commits."""
        self.session.close()
        clear_context()


__all__ = ["GameOrchestrator", "SessionHandle", "BattleOutcome", "HookResult"]
