"""
techintel.api.errors

Error envelope and global exception handlers.

Responsibilities:
- Define `ApiError`, the exception routers raise for 4xx/5xx outcomes.
- Map database failures inside a handler to a 500 with a handler-specific message.
- Render every error as `{"error": str, "details": ...}`.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from techintel.db.repositories.base import NullValueError
from techintel.observability.logging import get_logger

log = get_logger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, error: str, details: Any = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


def not_found(what: str) -> ApiError:
    return ApiError(HTTP_404_NOT_FOUND, f"{what} not found")


def bad_request(error: str, details: Any = None) -> ApiError:
    return ApiError(HTTP_400_BAD_REQUEST, error, details)


@contextmanager
def db_errors(message: str) -> Iterator[None]:
    """
    Translate driver/ORM failures raised inside the block into a 500 `ApiError`.

    Usage:
        with db_errors("Failed to fetch connectors"):
            rows = await ConnectorRepo(session).list(...)
    """

    try:
        yield
    except SQLAlchemyError as e:
        log.error("db_error", error=message, details=str(e))
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, message, str(e)) from e


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error("api_error", status_code=exc.status_code, error=exc.error)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ]
        log.info("validation_error", details=details)
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": details},
        )

    @app.exception_handler(NullValueError)
    async def _null_value(request: Request, exc: NullValueError) -> JSONResponse:
        details = [
            {"field": field, "message": "Field may not be null", "type": "null_not_allowed"}
            for field in exc.fields
        ]
        log.info("validation_error", details=details)
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": details},
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        log.exception("unhandled_error")
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "details": str(exc)},
        )


# --- Module Notes -----------------------------------------------------------
# No retries happen at this layer: a failed query is reported once and the
# request session rolls back when it closes.
