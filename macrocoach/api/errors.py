"""Translate routing-layer errors into HTTP responses.

- request validation -> 400
- `DatabaseConnectionError` -> 503
- `QueryError` -> 500
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..infrastructure.postgres import DatabaseConnectionError, QueryError
from ..logger import get_logger

logger = get_logger(__name__)


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [_describe(error) for error in exc.errors()]
        logger.info("Request rejected", path=request.url.path, details=details)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "details": details},
        )

    @app.exception_handler(DatabaseConnectionError)
    async def handle_connection_error(request: Request, exc: DatabaseConnectionError) -> JSONResponse:
        logger.error(
            "Database unreachable",
            path=request.url.path,
            endpoint_id=exc.endpoint_id,
            role=str(exc.role),
            error=exc.message,
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "Database unavailable", "details": exc.message, "endpoint": exc.endpoint_id},
        )

    @app.exception_handler(QueryError)
    async def handle_query_error(request: Request, exc: QueryError) -> JSONResponse:
        logger.error(
            "Query failed",
            path=request.url.path,
            endpoint_id=exc.endpoint_id,
            role=str(exc.role),
            error=exc.message,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Query failed", "details": exc.message, "endpoint": exc.endpoint_id},
        )
