"""Action payload validation for the HTTP interface."""
from typing import Any

from pydantic import TypeAdapter, ValidationError

from landlord.errors import ErrorCode, GameError
from landlord.logic.models import GRID_CELLS, Grid, SymbolInstance
from landlord.logic.reducer import Action, ActionType
from landlord.logic.symbols import catalog
from landlord.protocol import ActionRequest

_grid_adapter = TypeAdapter(Grid)


def validate_coins(payload: Any) -> int:
    """ADD_COINS needs an integer amount."""
    if isinstance(payload, bool) or not isinstance(payload, int):
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"ADD_COINS payload must be an integer, got {payload!r}",
        )
    return payload


def validate_grid(payload: Any) -> Grid:
    """UPDATE_GRID needs a full grid of symbols or nulls."""
    try:
        grid = _grid_adapter.validate_python(payload)
    except ValidationError as e:
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"UPDATE_GRID payload is not a grid ({e.error_count()} errors)",
        )
    if len(grid) != GRID_CELLS:
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"UPDATE_GRID payload must have {GRID_CELLS} cells, got {len(grid)}",
        )
    return grid


def validate_symbol(payload: Any) -> SymbolInstance:
    """
    ADD_SYMBOL takes a catalog id, either bare or as {"id": ...}.

    Raises UNKNOWN_SYMBOL for ids outside the catalog.
    """
    symbol_id = payload.get("id") if isinstance(payload, dict) else payload
    if not isinstance(symbol_id, str):
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            "ADD_SYMBOL payload must be a symbol id",
        )
    if symbol_id not in catalog:
        raise GameError(ErrorCode.UNKNOWN_SYMBOL, f"Unknown symbol: {symbol_id}")
    return catalog.instance(symbol_id)


def validate_action_request(request: ActionRequest) -> Action:
    """
    Turn a request body into a typed Action.

    Unknown tags pass through untouched; the reducer treats them as no-ops.
    LOAD_GAME snapshots are validated by the reducer itself.
    """
    try:
        action_type = ActionType(request.type)
    except ValueError:
        return Action(type=request.type, payload=request.payload)

    payload = request.payload
    if action_type == ActionType.ADD_COINS:
        payload = validate_coins(payload)
    elif action_type == ActionType.UPDATE_GRID:
        payload = validate_grid(payload)
    elif action_type == ActionType.ADD_SYMBOL:
        payload = validate_symbol(payload)

    return Action(type=action_type.value, payload=payload)
