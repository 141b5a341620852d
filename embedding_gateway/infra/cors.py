"""Fixed CORS and caching headers applied to every response."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.responses import Response

from embedding_gateway.api.relay import JSON_MEDIA_TYPE

RESPONSE_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Content-Type": JSON_MEDIA_TYPE,
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def install_cors_headers(app: FastAPI) -> None:
    """Register middleware that stamps ``RESPONSE_HEADERS`` on each response,
    whether or not the request carries an ``Origin`` header."""

    @app.middleware("http")
    async def add_response_headers(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)
        for name, value in RESPONSE_HEADERS.items():
            response.headers[name] = value
        return response
