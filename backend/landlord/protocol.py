"""Protocol models for the game HTTP interface."""
from typing import Any

from pydantic import BaseModel, Field

from landlord.config import settings
from landlord.logic.grid import count_triggered_cells
from landlord.logic.models import GamePhase, GameState, RentOutcome, SpinResult
from landlord.logic.persistence import serialize_state
from landlord.logic.symbols import SymbolDef


# === Request Models ===


class ActionRequest(BaseModel):
    """POST /action request body."""

    type: str = Field(..., description="Action tag, e.g. ADD_COINS")
    payload: Any = None


# === Response Models ===


class RentView(BaseModel):
    """Rent countdown for the current floor."""

    floor: int
    floorsTotal: int
    rent: int
    turns: int
    turn: int
    turnsLeft: int


class RentOutcomeBody(BaseModel):
    """Result of a rent settlement."""

    success: bool
    gameOver: bool
    victory: bool
    message: str
    newFloor: int
    remainingCoins: int
    nextRent: int = 0
    nextTurns: int = 0


class StateResponse(BaseModel):
    """GET /state and POST /action response."""

    protocolVersion: str = settings.protocol_version
    phase: GamePhase
    rent: RentView | None = None
    rentOutcome: RentOutcomeBody | None = None
    state: dict[str, Any]


class SpinBody(BaseModel):
    """Spin result in the /spin response."""

    grid: list[dict[str, Any] | None]
    baseCoins: int
    bonusCoins: int
    totalCoins: int
    triggeredCells: int


class SpinResponse(BaseModel):
    """POST /spin response."""

    protocolVersion: str = settings.protocol_version
    spin: SpinBody
    rentOutcome: RentOutcomeBody | None = None
    phase: GamePhase
    rent: RentView | None = None
    state: dict[str, Any]


class RentTierBody(BaseModel):
    rent: int
    turns: int


class RentScheduleResponse(BaseModel):
    """GET /rent-schedule response."""

    protocolVersion: str = settings.protocol_version
    schedule: list[RentTierBody]
    currentFloor: int


class ShopOffer(BaseModel):
    """One symbol offered in the shop."""

    id: str
    name: str
    emoji: str
    value: int
    rarity: str
    effectDescription: str | None = None


class ShopResponse(BaseModel):
    """GET /shop response."""

    protocolVersion: str = settings.protocol_version
    offers: list[ShopOffer] = Field(default_factory=list)


# === Builders ===


def rent_view(state: GameState) -> RentView | None:
    tier = state.current_tier
    if tier is None:
        return None
    return RentView(
        floor=state.floor,
        floorsTotal=len(state.rent_schedule),
        rent=tier.rent,
        turns=tier.turns,
        turn=state.turn,
        turnsLeft=state.turns_left,
    )


def rent_outcome_body(outcome: RentOutcome | None) -> RentOutcomeBody | None:
    if outcome is None:
        return None
    return RentOutcomeBody(
        success=outcome.success,
        gameOver=outcome.game_over,
        victory=outcome.victory,
        message=outcome.message,
        newFloor=outcome.new_floor,
        remainingCoins=outcome.remaining_coins,
        nextRent=outcome.next_rent,
        nextTurns=outcome.next_turns,
    )


def state_response(state: GameState, outcome: RentOutcome | None = None) -> StateResponse:
    return StateResponse(
        phase=state.phase,
        rent=rent_view(state),
        rentOutcome=rent_outcome_body(outcome),
        state=serialize_state(state),
    )


def spin_body(result: SpinResult) -> SpinBody:
    return SpinBody(
        grid=[cell.model_dump(mode="json") if cell else None for cell in result.grid],
        baseCoins=result.base_coins,
        bonusCoins=result.bonus_coins,
        totalCoins=result.total_coins,
        triggeredCells=count_triggered_cells(result.grid),
    )


def shop_offer(symbol_def: SymbolDef) -> ShopOffer:
    return ShopOffer(
        id=symbol_def.id,
        name=symbol_def.name,
        emoji=symbol_def.emoji,
        value=symbol_def.value,
        rarity=symbol_def.rarity.value,
        effectDescription=symbol_def.effect_description,
    )
