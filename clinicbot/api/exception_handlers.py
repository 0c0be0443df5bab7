"""
Error envelope for the admin routes.

Every error leaves as {"error": true, "message": ..., "status_code": ...}.
Store and gateway outages surface as 503 so callers can retry; anything else
is a 500 reported to Sentry.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from clinicbot.integrations.evolution import EvolutionError
from clinicbot.integrations.monitoring import capture_exception

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": True, "message": message, "status_code": status_code},
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, HTTPException):
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    return error_response(exc.status_code, str(exc.detail), exc.headers)


async def store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Clinic store error on {request.method} {request.url.path}: {exc}")
    return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Clinic store unavailable")


async def gateway_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Messaging gateway error on {request.method} {request.url.path}: {exc}")
    return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Messaging gateway unavailable")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc!s}", exc_info=True)
    capture_exception(exc, {"path": request.url.path, "method": request.method})
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, store_unavailable_handler)
    app.add_exception_handler(EvolutionError, gateway_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
