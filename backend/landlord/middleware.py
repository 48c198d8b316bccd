"""Middleware converting game errors into protocol responses."""
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from landlord.errors import ErrorCode, GameError

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Turn every failure into a `{protocolVersion, error}` body.

    GameErrors keep their own code and status. Anything else is logged
    with its traceback and reported as INTERNAL_ERROR.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except GameError as e:
            if e.status_code >= 500:
                logger.error("%s on %s: %s", e.code.value, request.url.path, e.message)
            return e.to_response()
        except Exception as e:
            logger.exception("Unhandled error on %s", request.url.path)
            return GameError(ErrorCode.INTERNAL_ERROR, str(e)).to_response()
