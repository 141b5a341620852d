"""Maps pipeline outcomes to outbound HTTP responses."""

from __future__ import annotations

import structlog
from fastapi.responses import JSONResponse, Response

from embedding_gateway.core.exceptions import GatewayError, UpstreamError
from embedding_gateway.core.schemas import ErrorEnvelope, UpstreamOutcome

logger = structlog.get_logger()

JSON_MEDIA_TYPE = "application/json; charset=utf-8"


class UTF8JSONResponse(JSONResponse):
    media_type = JSON_MEDIA_TYPE


def relay_outcome(outcome: UpstreamOutcome) -> Response:
    """Return the upstream body verbatim on 200, otherwise an error envelope."""
    if outcome.ok:
        return Response(
            content=outcome.body.encode("utf-8"),
            status_code=200,
            media_type=JSON_MEDIA_TYPE,
        )

    logger.warning(
        "upstream.error",
        status_code=outcome.status_code,
        body=outcome.body,
    )
    return error_response(UpstreamError(outcome.status_code, outcome.body))


def error_response(exc: GatewayError) -> JSONResponse:
    return envelope_response(exc.message, exc.status_code, code=exc.code)


def envelope_response(message: str, status_code: int, code: int | None = None) -> JSONResponse:
    body = ErrorEnvelope(error=message, code=code)
    return UTF8JSONResponse(status_code=status_code, content=body.to_content())
