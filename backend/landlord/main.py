"""Landlord Luck FastAPI Application."""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from landlord.config import settings
from landlord.config_hash import get_config_hash
from landlord.logic.engine import GameEngine
from landlord.logic.grid import count_triggered_cells
from landlord.logic.persistence import serialize_state
from landlord.logic.reducer import GameReducer
from landlord.dependencies import get_player_id
from landlord.middleware import ErrorHandlerMiddleware
from landlord.protocol import (
    ActionRequest,
    RentScheduleResponse,
    RentTierBody,
    ShopResponse,
    SpinResponse,
    rent_outcome_body,
    rent_view,
    shop_offer,
    spin_body,
    state_response,
)
from landlord.redis_service import redis_service
from landlord.session import GameSession
from landlord.telemetry import SpinProcessedEvent, telemetry_service
from landlord.validators import validate_action_request


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and manage the Redis connection lifecycle."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await redis_service.connect()
    yield
    await redis_service.close()


app = FastAPI(
    title="Landlord Luck",
    version="0.1.0",
    description="Slot-grid rent economy game server",
    lifespan=lifespan,
    debug=settings.debug,
)

app.add_middleware(ErrorHandlerMiddleware)

# Game engine and reducer instances
engine = GameEngine()
reducer = GameReducer(engine)


async def _load_session(player_id: str) -> GameSession:
    return await GameSession.load_or_create(redis_service, player_id, reducer)


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/state")
async def get_state(player_id: str = Depends(get_player_id)) -> dict:
    """Current game state with phase and rent countdown."""
    async with redis_service.player_lock(player_id):
        session = await _load_session(player_id)
        return state_response(session.state).model_dump()


@app.post("/action")
async def post_action(body: ActionRequest, player_id: str = Depends(get_player_id)) -> dict:
    """
    POST /action: dispatch one named transition.

    Payloads are validated before the state is touched; an invalid
    LOAD_GAME snapshot leaves the saved game as it was.
    """
    action = validate_action_request(body)

    async with redis_service.player_lock(player_id):
        session = await _load_session(player_id)
        state = await session.dispatch(action)
        return state_response(state, session.last_rent_outcome).model_dump()


@app.post("/spin")
async def spin(player_id: str = Depends(get_player_id)) -> dict:
    """
    POST /spin: run a full spin cycle.

    Places the grid, scores it, pays out, advances the turn and settles
    rent when the floor's turns are used up.
    """

    async with redis_service.player_lock(player_id) as lock_metrics:
        session = await _load_session(player_id)
        outcome = await session.spin()

        telemetry_service.emit_spin_processed(
            SpinProcessedEvent(
                player_id=player_id,
                config_hash=get_config_hash(),
                floor=outcome.state.floor,
                turn=outcome.state.turn,
                base_coins=outcome.result.base_coins,
                bonus_coins=outcome.result.bonus_coins,
                triggered_cells=count_triggered_cells(outcome.result.grid),
                coins_after=outcome.state.coins,
                lock_acquire_ms=lock_metrics.acquire_ms,
            )
        )

        response = SpinResponse(
            spin=spin_body(outcome.result),
            rentOutcome=rent_outcome_body(outcome.rent),
            phase=outcome.state.phase,
            rent=rent_view(outcome.state),
            state=serialize_state(outcome.state),
        )
        return response.model_dump()


@app.post("/reset")
async def reset(player_id: str = Depends(get_player_id)) -> dict:
    """Discard the saved game and start a new one."""
    async with redis_service.player_lock(player_id):
        session = await _load_session(player_id)
        state = await session.reset()
        return state_response(state).model_dump()


@app.get("/rent-schedule")
async def rent_schedule(player_id: str = Depends(get_player_id)) -> dict:
    """Read-only rent schedule with the player's current floor."""
    async with redis_service.player_lock(player_id):
        session = await _load_session(player_id)
    state = session.state
    return RentScheduleResponse(
        schedule=[RentTierBody(rent=t.rent, turns=t.turns) for t in state.rent_schedule],
        currentFloor=state.floor,
    ).model_dump()


@app.get("/shop", dependencies=[Depends(get_player_id)])
async def shop() -> dict:
    """Rarity-weighted symbol offers; buy one with ADD_SYMBOL."""
    offers = engine.draw_offers(settings.shop_offer_count)
    return ShopResponse(offers=[shop_offer(d) for d in offers]).model_dump()
