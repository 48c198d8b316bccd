"""Request dependencies shared by the game routes."""
from fastapi import Request

from landlord.errors import ErrorCode, GameError

PLAYER_ID_HEADER = "X-Player-Id"


def get_player_id(request: Request) -> str:
    """FastAPI dependency: the player a game request acts on.

    Usage:
        @app.get("/state")
        async def get_state(player_id: str = Depends(get_player_id)):
            ...

    Raises:
        GameError INVALID_REQUEST: If the X-Player-Id header is missing or blank.
    """
    player_id = request.headers.get(PLAYER_ID_HEADER, "").strip()
    if not player_id:
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"Missing required header: {PLAYER_ID_HEADER}",
        )
    return player_id
