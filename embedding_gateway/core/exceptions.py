"""Exception hierarchy for the embedding gateway.

Every exception carries the HTTP status it maps to. The error handlers in
``embedding_gateway.infra.error_handler`` turn them into the uniform
``ErrorEnvelope`` body: ``{"error": "...", "code": 400}``.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base exception for the gateway."""

    status_code: int = 500
    include_code: bool = True

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    @property
    def code(self) -> int | None:
        return self.status_code if self.include_code else None


# ── Client errors (4xx) ─────────────────────────────────────────────────────


class AuthError(GatewayError):
    """401 -- missing or empty bearer credential."""

    status_code = 401
    include_code = False

    def __init__(self, message: str = "Token is invalid.") -> None:
        super().__init__(message)


class MalformedRequestError(GatewayError):
    """400 -- body is not a parseable JSON object."""

    status_code = 400

    def __init__(self, message: str = "Invalid JSON format") -> None:
        super().__init__(message)


class ValidationError(GatewayError):
    """400 -- JSON parsed but the parameters are unusable."""

    status_code = 400


class InvalidInputError(ValidationError):
    """400 -- ``input`` is missing, wrongly shaped or empty."""


class UnsupportedModelError(ValidationError):
    """400 -- unknown embedding model while strict model checking is on."""

    def __init__(self, model: str) -> None:
        self.model = model
        super().__init__(f"Unsupported embedding model: {model}")


# ── Server errors (5xx) ─────────────────────────────────────────────────────


class UpstreamError(GatewayError):
    """Upstream API answered with a non-200 status; the status is propagated."""

    def __init__(self, status_code: int, body: str) -> None:
        self.upstream_body = body
        super().__init__(
            f"Failed to get embeddings from Copilot API: {body}",
            status_code=status_code,
        )


class PoolSaturatedError(GatewayError):
    """503 -- every worker is busy and the wait queue is full."""

    status_code = 503

    def __init__(self, message: str = "Server is busy") -> None:
        super().__init__(message)


class InternalError(GatewayError):
    """500 -- catch-all internal error."""

    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
