"""Game state transitions.

The reducer is the only mutation path for a game: every action maps
(previous state, payload) to a new state. Previous states are never
modified in place.
"""
import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ValidationError

from landlord.errors import ErrorCode, GameError
from landlord.logic.engine import SPIN_COST, GameEngine, settle_rent
from landlord.logic.models import GameState, RentOutcome
from landlord.logic.persistence import deserialize_state

logger = logging.getLogger(__name__)


class ActionType(str, Enum):
    """Closed action set."""
    ADD_COINS = "ADD_COINS"
    START_SPIN = "START_SPIN"
    STOP_SPIN = "STOP_SPIN"
    UPDATE_GRID = "UPDATE_GRID"
    ADD_SYMBOL = "ADD_SYMBOL"
    DECREASE_TURNS = "DECREASE_TURNS"
    PAY_RENT = "PAY_RENT"
    TOGGLE_SOUND = "TOGGLE_SOUND"
    TOGGLE_SHOP = "TOGGLE_SHOP"
    CLOSE_SHOP = "CLOSE_SHOP"
    RESET_GAME = "RESET_GAME"
    LOAD_GAME = "LOAD_GAME"


# Actions that move the rent/floor state machine; no-ops once the game is over
TURN_ADVANCING = frozenset({ActionType.DECREASE_TURNS, ActionType.PAY_RENT})

# Actions ignored once the game is lost or won; only reset, load and the
# cosmetic flags still apply
FROZEN_WHEN_OVER = TURN_ADVANCING | {
    ActionType.ADD_COINS,
    ActionType.START_SPIN,
    ActionType.UPDATE_GRID,
    ActionType.ADD_SYMBOL,
}


class Action(BaseModel):
    """A tagged action with an optional payload. Unknown tags are allowed."""
    type: str
    payload: Any = None


def _replace(state: GameState, action_type: ActionType, **update: Any) -> GameState:
    """Copy with validation, for updates carrying caller-supplied data."""
    try:
        return GameState.model_validate({**dict(state), **update})
    except ValidationError as e:
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"{action_type.value} payload rejected ({e.error_count()} errors)",
        )


class GameReducer:
    """Applies actions to game states."""

    def __init__(self, engine: GameEngine | None = None):
        self.engine = engine or GameEngine()

    def reduce(self, state: GameState, action: Action) -> GameState:
        """
        Apply one action.

        Raises INVALID_SNAPSHOT (via LOAD_GAME) or INVALID_REQUEST (bad
        payload) without touching the state.
        """
        next_state, _ = self.reduce_with_outcome(state, action)
        return next_state

    def reduce_with_outcome(
        self, state: GameState, action: Action
    ) -> tuple[GameState, RentOutcome | None]:
        """Apply one action and report the rent settlement it triggered, if any."""
        try:
            action_type = ActionType(action.type)
        except ValueError:
            logger.debug("Ignoring unknown action %s", action.type)
            return state, None

        if action_type in FROZEN_WHEN_OVER and state.is_terminal:
            return state, None

        if action_type in TURN_ADVANCING:
            if action_type == ActionType.PAY_RENT:
                return self._settle(state)
            return self._advance_turn(state)

        return self._apply(state, action_type, action.payload), None

    def _apply(self, state: GameState, action_type: ActionType, payload: Any) -> GameState:
        if action_type == ActionType.ADD_COINS:
            if isinstance(payload, bool) or not isinstance(payload, int):
                raise GameError(
                    ErrorCode.INVALID_REQUEST,
                    f"ADD_COINS payload must be an integer, got {payload!r}",
                )
            return state.model_copy(update={"coins": state.coins + payload})

        if action_type == ActionType.START_SPIN:
            # Spinning at 0 coins is allowed; the cost is only charged when affordable
            coins = state.coins - SPIN_COST if state.coins > 0 else state.coins
            return state.model_copy(update={"coins": coins, "is_spinning": True})

        if action_type == ActionType.STOP_SPIN:
            return state.model_copy(update={"is_spinning": False})

        if action_type == ActionType.UPDATE_GRID:
            return _replace(state, action_type, grid=payload)

        if action_type == ActionType.ADD_SYMBOL:
            return _replace(state, action_type, symbols=[*state.symbols, payload])

        if action_type == ActionType.TOGGLE_SOUND:
            return state.model_copy(update={"sound_enabled": not state.sound_enabled})

        if action_type == ActionType.TOGGLE_SHOP:
            return state.model_copy(update={"shop_open": not state.shop_open})

        if action_type == ActionType.CLOSE_SHOP:
            return state.model_copy(update={"shop_open": False})

        if action_type == ActionType.RESET_GAME:
            return self.engine.new_game_state()

        if action_type == ActionType.LOAD_GAME:
            return deserialize_state(payload)

        return state

    def _advance_turn(self, state: GameState) -> tuple[GameState, RentOutcome | None]:
        """Count a completed spin; the spin that reaches the floor's turns settles rent."""
        next_turn = state.turn + 1
        if next_turn >= state.current_tier.turns:
            return self._settle(state.model_copy(update={"turn": next_turn}))

        return state.model_copy(update={"turn": next_turn, "shop_open": True}), None

    def _settle(self, state: GameState) -> tuple[GameState, RentOutcome]:
        outcome = settle_rent(state.coins, state.floor, state.rent_schedule)

        if not outcome.success:
            logger.info("Rent unpaid on floor %d with %d coins", state.floor, state.coins)
            return state.model_copy(update={"lost": True, "shop_open": False}), outcome

        logger.info(
            "Rent paid on floor %d, %d coins left", state.floor, outcome.remaining_coins
        )
        next_state = state.model_copy(
            update={
                "coins": outcome.remaining_coins,
                "floor": outcome.new_floor,
                "turn": 0,
                "won": outcome.victory,
                "shop_open": not outcome.victory,
            }
        )
        return next_state, outcome
