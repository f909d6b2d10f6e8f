"""Character loading, caching and mutation.

``CharacterService`` is the entry point for everything that reads or
changes a character:

- ``get_character`` serves from the 30 s cache, deduplicates concurrent
  fetches of the same id, sanitizes the row and falls back to the basic
  character row plus the client-side derived-stats formula when the
  full-stats procedure fails.
- ``get_character_for_game`` always reads fresh, applies auto-heal and
  composes the ``GamePlayer``.
- Mutations invalidate the character and its owner's list.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from tower_trials.core.exceptions import RpcError, TowerTrialsError, ValidationError
from tower_trials.core.logging import get_logger
from tower_trials.engine.stats import calculate_derived_stats
from tower_trials.engine.validation import log_validation, validate_player_stats
from tower_trials.models.character import Character, GamePlayer, HealResult
from tower_trials.models.progression import AttributeDistribution, AttributeDistributionResult
from tower_trials.models.result import ServiceResult
from tower_trials.services.base import BaseService, first_row, rows
from tower_trials.storage.inflight import InFlightRegistry


if TYPE_CHECKING:
    from tower_trials.engine.stats import StatsAggregator
    from tower_trials.rpc.transport import RpcTransport
    from tower_trials.services.healing import HealingService
    from tower_trials.storage.cache import CacheRegistry

logger = get_logger(__name__)


def parse_character(row: Mapping[str, Any], context: str) -> Character:
    """Sanitize and validate a character row.

    Args:
        row: Raw row from the backend.
        context: Label for the validation log.

    Returns:
        The Character.
    """
    sanitized = validate_player_stats(row)
    log_validation(context, row, sanitized)
    return Character.model_validate(sanitized)


class CharacterService(BaseService):
    """Read and mutate characters.

    Attributes:
        aggregator: Builds GamePlayers from characters.
        healing: Applies auto-heal on load.
    """

    def __init__(
        self,
        rpc: RpcTransport,
        caches: CacheRegistry,
        aggregator: StatsAggregator,
        healing: HealingService,
    ) -> None:
        super().__init__(rpc, caches)
        self.aggregator = aggregator
        self.healing = healing
        self._inflight: InFlightRegistry[str, ServiceResult[Character]] = InFlightRegistry()

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_character(
        self,
        character_id: str,
        *,
        force_refresh: bool = False,
    ) -> ServiceResult[Character]:
        """Get a character, from cache unless ``force_refresh``.

        Concurrent calls for the same id share one fetch.

        Args:
            character_id: Character to load.
            force_refresh: Skip the cache lookup (the result is still cached).

        Returns:
            ServiceResult with the Character.
        """
        if not character_id:
            return ServiceResult.fail(
                ValidationError("character_id is required", field_name="character_id")
            )
        if not force_refresh:
            cached = self.caches.characters.get(character_id)
            if cached is not None:
                return ServiceResult.ok(cached)

        return await self._inflight.run(character_id, lambda: self._fetch_character(character_id))

    async def _fetch_character(self, character_id: str) -> ServiceResult[Character]:
        try:
            data = await self._call(
                "get_character_full_stats",
                {"p_character_id": character_id},
                read_only=True,
            )
            row = first_row(data)
            if row is None:
                return ServiceResult.fail(f"Character not found: {character_id}")
            character = parse_character(row, "get_character_full_stats")
        except RpcError as exc:
            logger.warning(
                "Full stats unavailable, rebuilding from base row",
                character_id=character_id,
                error=str(exc),
            )
            return await self._fetch_character_fallback(character_id)
        except (TowerTrialsError, PydanticValidationError) as exc:
            return ServiceResult.fail(exc)

        self.caches.characters.set(character_id, character)
        return ServiceResult.ok(character)

    async def _fetch_character_fallback(self, character_id: str) -> ServiceResult[Character]:
        """Load the base row and fill stats with the derived-stats formula."""
        try:
            data = await self._call("get_character", {"p_character_id": character_id}, read_only=True)
            row = first_row(data)
            if row is None:
                return ServiceResult.fail(f"Character not found: {character_id}")
            base = parse_character(row, "get_character")
        except (TowerTrialsError, PydanticValidationError) as exc:
            return ServiceResult.fail(exc)

        derived = calculate_derived_stats(base)
        character = base.model_copy(
            update={
                "max_hp": derived.max_hp,
                "hp": min(base.hp, derived.max_hp),
                "max_mana": derived.max_mana,
                "mana": min(base.mana, derived.max_mana),
                "atk": derived.atk,
                "defense": derived.defense,
                "speed": derived.speed,
                "critical_chance": derived.critical_chance,
                "critical_damage": derived.critical_damage,
            }
        )
        self.caches.characters.set(character_id, character)
        return ServiceResult.ok(character)

    async def get_user_characters(self, user_id: str) -> ServiceResult[list[Character]]:
        """List a user's characters, cached for a short time.

        Args:
            user_id: Owner.

        Returns:
            ServiceResult with the characters.
        """
        cached = self.caches.user_characters.get(user_id)
        if cached is not None:
            return ServiceResult.ok(cached)
        try:
            data = await self._call("get_user_characters", {"p_user_id": user_id}, read_only=True)
            characters = [parse_character(row, "get_user_characters") for row in rows(data)]
        except (TowerTrialsError, PydanticValidationError) as exc:
            return ServiceResult.fail(exc)
        self.caches.user_characters.set(user_id, characters)
        return ServiceResult.ok(characters)

    async def get_character_for_game(
        self,
        character_id: str,
        *,
        apply_auto_heal: bool = True,
        force_full_heal: bool = False,
    ) -> ServiceResult[GamePlayer]:
        """Load a character fresh and compose it for play.

        Args:
            character_id: Character to load.
            apply_auto_heal: Apply and persist passive regeneration.
            force_full_heal: Heal to max (used when entering the hub).

        Returns:
            ServiceResult with a fresh GamePlayer.
        """
        loaded = await self.get_character(character_id, force_refresh=True)
        if not loaded.success or loaded.data is None:
            return ServiceResult.fail(loaded.error or "Character not found")
        character = loaded.data

        if apply_auto_heal or force_full_heal:
            healed = await self.healing.apply_auto_heal(character, force_full_heal)
            if healed.success and healed.data is not None:
                character = healed.data.character
            else:
                logger.warning(
                    "Auto-heal failed, continuing with stored values",
                    character_id=character_id,
                    error=healed.error,
                )

        player = await self.aggregator.build_game_player(character)
        return ServiceResult.ok(player)

    async def force_full_heal_for_hub(self, character_id: str) -> ServiceResult[HealResult]:
        """Heal a character to max on hub entry, from a fresh read."""
        loaded = await self.get_character(character_id, force_refresh=True)
        if not loaded.success or loaded.data is None:
            return ServiceResult.fail(loaded.error or "Character not found")
        return await self.healing.apply_auto_heal(loaded.data, force_full_heal=True)

    # =========================================================================
    # Mutations
    # =========================================================================

    def invalidate(self, character_id: str, user_id: str | None = None) -> None:
        """Drop cached state for a character and, if known, its owner's list."""
        if user_id is None:
            cached = self.caches.characters.get(character_id)
            user_id = cached.user_id if cached is not None else None
        self.caches.invalidate_character(character_id)
        if user_id:
            self.caches.invalidate_user(user_id)

    async def distribute_attribute_points(
        self,
        character_id: str,
        distribution: AttributeDistribution,
    ) -> ServiceResult[AttributeDistributionResult]:
        """Spend attribute points.

        Args:
            character_id: Character receiving the points.
            distribution: Points per attribute.

        Returns:
            ServiceResult with the backend's answer.
        """
        try:
            data = await self._call(
                "distribute_attribute_points", distribution.to_rpc_params(character_id)
            )
            row = first_row(data)
            if row is None:
                return ServiceResult.fail("Attribute distribution returned no result")
            result = AttributeDistributionResult.model_validate(row)
        except (TowerTrialsError, PydanticValidationError) as exc:
            return ServiceResult.fail(exc)

        self.invalidate(character_id)
        if not result.success:
            return ServiceResult.fail(result.message or "Attribute distribution rejected")
        logger.info(
            "Attribute points distributed",
            character_id=character_id,
            points=distribution.total_points,
        )
        return ServiceResult.ok(result)

    async def mark_character_dead(self, character_id: str) -> ServiceResult[None]:
        try:
            await self._call("mark_character_dead", {"p_character_id": character_id})
        except RpcError as exc:
            return ServiceResult.fail(exc)
        self.invalidate(character_id)
        return ServiceResult.ok()


__all__ = ["CharacterService", "parse_character"]
