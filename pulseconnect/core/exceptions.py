"""Domain errors and the FastAPI handlers that render them."""
from typing import Any, Dict, Optional
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class PulseConnectError(Exception):
    """Base class for errors raised by the service layer.

    Each subclass maps to one HTTP status; ``extra`` is merged into the
    response body next to ``detail``.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None, extra: Optional[Dict[str, Any]] = None):
        self.detail = detail or self.default_detail
        self.extra = extra or {}
        super().__init__(self.detail)


class InvalidParameterError(PulseConnectError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid parameters"


class NotFoundError(PulseConnectError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ForbiddenError(PulseConnectError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not enough permissions"


class StateConflictError(PulseConnectError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation not allowed in the current state"


class InsufficientCreditsError(StateConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Insufficient credits"


class NotEligibleError(StateConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Not eligible to donate yet"


class PersistenceError(PulseConnectError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Failed to save changes"


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


async def pulseconnect_exception_handler(request: Request, exc: PulseConnectError):
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc.detail}", extra={"request_id": _request_id(request)})
    else:
        logger.info(f"{exc.__class__.__name__}: {exc.detail}", extra={"request_id": _request_id(request)})
    body = {"detail": exc.detail, "request_id": _request_id(request)}
    body.update(exc.extra)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(body))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "request_id": _request_id(request)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Validation error on {request.url.path}", extra={"request_id": _request_id(request)})
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder({"detail": exc.errors(), "request_id": _request_id(request)}),
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"request_id": _request_id(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "request_id": _request_id(request)},
    )
