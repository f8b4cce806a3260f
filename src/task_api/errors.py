"""Error handlers.

Every error path answers with a plain-text body carrying the underlying
message; success paths are JSON.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from opentelemetry import trace
from opentelemetry.trace import StatusCode
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register error handlers on the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)


def format_validation_errors(exc: RequestValidationError) -> str:
    """Flatten validation errors into one line.

    e.g. ``body.completed: Input should be a valid boolean``
    """
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid input")
        detail = (error.get("ctx") or {}).get("error")
        if detail:
            message = f"{message} ({detail})"
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid request"


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> PlainTextResponse:
    message = format_validation_errors(exc)
    logger.warning("Bad request on %s %s: %s", request.method, request.url.path, message)
    return PlainTextResponse(message, status_code=400)


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


async def storage_error_handler(
    request: Request, exc: SQLAlchemyError
) -> PlainTextResponse:
    _record_error_on_span(exc)
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    # DBAPIError carries the driver's own exception in ``orig``
    cause = getattr(exc, "orig", None) or exc
    return PlainTextResponse(str(cause), status_code=500)


def _record_error_on_span(exc: Exception) -> None:
    span = trace.get_current_span()
    if span.is_recording():
        span.record_exception(exc)
        span.set_attribute("error.type", type(exc).__name__)
        span.set_status(StatusCode.ERROR, str(exc))
