"""Error codes and exceptions for the game service."""
from enum import Enum

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from landlord.config import settings


class ErrorCode(str, Enum):
    """Error codes surfaced to the presentation layer."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_SNAPSHOT = "INVALID_SNAPSHOT"
    UNKNOWN_SYMBOL = "UNKNOWN_SYMBOL"
    GAME_OVER = "GAME_OVER"
    ROUND_IN_PROGRESS = "ROUND_IN_PROGRESS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INVALID_SNAPSHOT: 422,
    ErrorCode.UNKNOWN_SYMBOL: 400,
    ErrorCode.GAME_OVER: 409,
    ErrorCode.ROUND_IN_PROGRESS: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}

ERROR_RECOVERABLE: dict[ErrorCode, bool] = {
    ErrorCode.INVALID_REQUEST: False,
    ErrorCode.INVALID_SNAPSHOT: True,
    ErrorCode.UNKNOWN_SYMBOL: False,
    ErrorCode.GAME_OVER: False,
    ErrorCode.ROUND_IN_PROGRESS: True,
    ErrorCode.INTERNAL_ERROR: True,
}


class ErrorBody(BaseModel):
    """Error body shape."""

    code: str
    message: str
    recoverable: bool


class ErrorResponse(BaseModel):
    """Full error response."""

    protocolVersion: str = settings.protocol_version
    error: ErrorBody


class GameError(Exception):
    """Base game error that maps to a protocol error response."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.message = message or f"Error: {code.value}"
        self.status_code = ERROR_HTTP_STATUS[code]
        self.recoverable = ERROR_RECOVERABLE[code]
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        """Convert to JSONResponse."""
        return JSONResponse(
            status_code=self.status_code,
            content=ErrorResponse(
                error=ErrorBody(
                    code=self.code.value,
                    message=self.message,
                    recoverable=self.recoverable,
                )
            ).model_dump(),
        )
