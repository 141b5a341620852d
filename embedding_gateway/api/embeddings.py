"""POST /v1/embeddings -- OpenAI-style embeddings endpoint forwarded to Copilot."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from embedding_gateway.api.relay import relay_outcome
from embedding_gateway.core.exceptions import GatewayError, InternalError
from embedding_gateway.core.gateway import EmbeddingGateway
from embedding_gateway.core.schemas import ErrorEnvelope

logger = structlog.get_logger()


def get_gateway(request: Request) -> EmbeddingGateway:
    """Return the gateway created at startup. Raises if called before startup."""
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise RuntimeError("EmbeddingGateway not initialised -- app not started")
    return gateway


async def create_embeddings(
    request: Request,
    gateway: EmbeddingGateway = Depends(get_gateway),
) -> Response:
    """Validate the request and relay the upstream embeddings response.

    The body is read raw rather than through a pydantic model so that an
    unparseable body and a bad ``input`` produce distinct errors. Failures
    are handled by the global error handlers.
    """
    try:
        body = await request.body()
        outcome = await gateway.handle(
            request.headers.get("authorization"),
            request.headers,
            body,
        )
        return relay_outcome(outcome)
    except GatewayError:
        raise
    except Exception as exc:
        logger.exception("embeddings.error", path=request.url.path)
        raise InternalError() from exc


async def preflight() -> Response:
    """CORS preflight. Headers are added by the CORS middleware."""
    return Response(status_code=204)


def build_router(*paths: str) -> APIRouter:
    """Register the embeddings endpoint under each of ``paths``."""
    router = APIRouter(tags=["embeddings"])
    for path in dict.fromkeys(paths):
        router.add_api_route(
            path,
            create_embeddings,
            methods=["POST"],
            response_class=Response,
            responses={
                400: {"model": ErrorEnvelope, "description": "Invalid request"},
                401: {"model": ErrorEnvelope, "description": "Missing credential"},
                500: {"model": ErrorEnvelope, "description": "Internal server error"},
            },
        )
        router.add_api_route(
            path,
            preflight,
            methods=["OPTIONS"],
            status_code=204,
            response_class=Response,
            include_in_schema=False,
        )
    return router
