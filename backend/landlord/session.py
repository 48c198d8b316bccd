"""Session layer bridging the reducer and the snapshot store."""
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from redis.exceptions import RedisError

from landlord.errors import ErrorCode, GameError
from landlord.logic.models import GameState, RentOutcome, SpinResult
from landlord.logic.persistence import deserialize_state, serialize_state
from landlord.logic.reducer import Action, ActionType, GameReducer
from landlord.telemetry import (
    GameLoadedEvent,
    RentSettledEvent,
    telemetry_service,
)

logger = logging.getLogger(__name__)


class StateStore(Protocol):
    """Key-value store holding one snapshot per player."""

    async def load_snapshot(self, player_id: str) -> Any | None:
        ...

    async def save_snapshot(self, player_id: str, snapshot: dict[str, Any]) -> None:
        ...

    async def clear_snapshot(self, player_id: str) -> None:
        ...


@dataclass
class SpinOutcome:
    """What one full spin cycle produced."""

    result: SpinResult
    rent: RentOutcome | None
    state: GameState


class GameSession:
    """Wraps a player's GameState, its reducer and the store it persists to."""

    def __init__(
        self,
        store: StateStore,
        player_id: str,
        state: GameState,
        reducer: GameReducer,
    ):
        self.store = store
        self.player_id = player_id
        self.state = state
        self.reducer = reducer
        self.last_rent_outcome: RentOutcome | None = None

    @classmethod
    async def load_or_create(
        cls,
        store: StateStore,
        player_id: str,
        reducer: GameReducer,
    ) -> "GameSession":
        """
        Restore a player's saved game, or start fresh.

        Missing, corrupt or unreadable snapshots fall back to a new game;
        they never fail the request.
        """
        fallback_reason: str | None = None
        state: GameState | None = None

        try:
            snapshot = await store.load_snapshot(player_id)
        except (RedisError, OSError) as e:
            logger.warning("Snapshot store unavailable for %s: %s", player_id, e)
            snapshot, fallback_reason = None, "store_error"
        except ValueError as e:
            logger.warning("Unreadable snapshot for %s: %s", player_id, e)
            snapshot, fallback_reason = None, "corrupt"

        if snapshot is not None:
            try:
                state = deserialize_state(snapshot)
            except GameError as e:
                logger.warning("Discarding invalid snapshot for %s: %s", player_id, e.message)
                fallback_reason = "corrupt"
        elif fallback_reason is None:
            fallback_reason = "missing"

        session = cls(store, player_id, state or reducer.engine.new_game_state(), reducer)
        if state is None:
            await session.save()

        telemetry_service.emit_game_loaded(
            GameLoadedEvent(
                player_id=player_id,
                restored=state is not None,
                fallback_reason=fallback_reason if state is None else None,
                floor=session.state.floor,
                coins=session.state.coins,
            )
        )
        return session

    async def save(self) -> None:
        """Write the current state to the store."""
        await self.store.save_snapshot(self.player_id, serialize_state(self.state))

    async def dispatch(self, action: Action) -> GameState:
        """
        Apply one action and persist the result.

        A rejected action (e.g. an invalid LOAD_GAME snapshot) raises before
        anything is replaced or written.
        """
        next_state, outcome = self.reducer.reduce_with_outcome(self.state, action)
        floor_before = self.state.floor
        self.state = next_state
        self.last_rent_outcome = outcome
        await self.save()

        if outcome is not None:
            telemetry_service.emit_rent_settled(
                RentSettledEvent(
                    player_id=self.player_id,
                    floor=floor_before,
                    success=outcome.success,
                    victory=outcome.victory,
                    remaining_coins=outcome.remaining_coins,
                )
            )
        return self.state

    async def spin(self) -> SpinOutcome:
        """
        Run one full spin cycle.

        START_SPIN -> resolve grid -> UPDATE_GRID -> ADD_COINS -> STOP_SPIN
        -> DECREASE_TURNS. Raises GAME_OVER once the game has ended.
        """
        if self.state.is_terminal:
            raise GameError(
                ErrorCode.GAME_OVER,
                f"Game is over ({self.state.phase.value}); reset to play again.",
            )

        await self.dispatch(Action(type=ActionType.START_SPIN))
        result = self.reducer.engine.resolve_spin(self.state.symbols)
        await self.dispatch(Action(type=ActionType.UPDATE_GRID, payload=result.grid))
        await self.dispatch(Action(type=ActionType.ADD_COINS, payload=result.total_coins))
        await self.dispatch(Action(type=ActionType.STOP_SPIN))
        await self.dispatch(Action(type=ActionType.DECREASE_TURNS))

        return SpinOutcome(result=result, rent=self.last_rent_outcome, state=self.state)

    async def reset(self) -> GameState:
        """Discard the saved game and start over."""
        await self.store.clear_snapshot(self.player_id)
        state = await self.dispatch(Action(type=ActionType.RESET_GAME))
        logger.info("Game reset for %s", self.player_id)
        return state
