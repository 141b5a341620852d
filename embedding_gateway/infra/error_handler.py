"""Global error normalization for the FastAPI application.

Catches gateway exceptions, routing errors and unexpected failures and
returns the uniform JSON error envelope:

    {"error": "...", "code": 400}

Install via ``install_error_handlers(app)`` in the app factory.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from embedding_gateway.api.relay import envelope_response, error_response
from embedding_gateway.core.exceptions import GatewayError, InternalError

logger = structlog.get_logger()


def install_error_handlers(app: FastAPI) -> None:
    """Register exception handlers that normalize all errors to ErrorEnvelope."""

    # ── Our custom exceptions ────────────────────────────────────────────

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        logger.info(
            "request.rejected",
            path=request.url.path,
            status_code=exc.status_code,
            error=exc.message,
        )
        return error_response(exc)

    # ── Starlette HTTP exceptions (405 / 404 from routing) ───────────────

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        response = envelope_response(str(exc.detail), exc.status_code, code=exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    # ── Catch-all for unhandled exceptions ───────────────────────────────

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=request.url.path)
        return error_response(InternalError())
