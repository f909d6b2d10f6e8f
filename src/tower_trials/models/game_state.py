"""Session state models held by the game state store.

Models:
    GameState: Mode, player, floor, enemy and turn information.
    LoadingState: Per-operation loading flags.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tower_trials.models.character import GamePlayer
from tower_trials.models.effects import PlayerSpell
from tower_trials.models.enums import GameMode
from tower_trials.models.tower import BattleRewards, Enemy, Floor


class GameState(BaseModel):
    """Snapshot of the session the UI renders from.

    Attributes:
        mode: Current screen.
        player: The composed player, once a character is selected.
        current_floor: Floor data for the battle in progress.
        current_enemy: Enemy of the battle in progress.
        current_special_event: Event payload while in ``event`` mode.
        is_player_turn: Whose turn it is.
        game_message: Latest message for the game log.
        highest_floor: Highest floor reached in this session.
        selected_spell: Spell the player picked, if any.
        battle_rewards: Rewards after a victory.
        flee_successful: Whether the last flee attempt worked.
        character_deleted: Set when permadeath removed the character.
    """

    model_config = ConfigDict(extra="forbid")

    mode: GameMode = GameMode.MENU
    player: GamePlayer | None = None
    current_floor: Floor | None = None
    current_enemy: Enemy | None = None
    current_special_event: dict[str, Any] | None = None
    is_player_turn: bool = True
    game_message: str = ""
    highest_floor: int = Field(default=1, ge=1)
    selected_spell: PlayerSpell | None = None
    battle_rewards: BattleRewards | None = None
    flee_successful: bool = False
    character_deleted: bool = False


class LoadingState(BaseModel):
    """Loading flags for the operations the UI shows spinners for."""

    model_config = ConfigDict(extra="forbid")

    load_character: bool = False
    start_game: bool = False
    perform_action: bool = False
    save_progress: bool = False


__all__ = ["GameState", "LoadingState"]
