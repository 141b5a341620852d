"""Outbound client for the GitHub Copilot embeddings API.

Uses a single httpx async client for the lifetime of the app. The
credential is never held by the gateway: each call forwards the bearer
token that came in with the request.
"""

from __future__ import annotations

import httpx
import structlog

from embedding_gateway.config import UpstreamSettings
from embedding_gateway.core.schemas import EmbeddingParameters, UpstreamOutcome

logger = structlog.get_logger()


class UpstreamInvoker:
    """Builds the outbound request and performs exactly one POST per call."""

    def __init__(
        self,
        settings: UpstreamSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def startup(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                self._settings.read_timeout,
                connect=self._settings.connect_timeout,
            ),
            transport=self._transport,
        )
        logger.info("upstream.started", url=self._settings.url)

    async def shutdown(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("upstream.stopped")

    # ── Request building ─────────────────────────────────────────────────

    def build_headers(self, token: str) -> dict[str, str]:
        headers = self._settings.baseline_headers()
        headers["Authorization"] = f"Bearer {token}"
        return headers

    # ── Invocation ───────────────────────────────────────────────────────

    async def invoke(self, params: EmbeddingParameters, token: str) -> UpstreamOutcome:
        """POST the embedding request and return the raw status and body.

        The body is read for every status code and is not reshaped. Transport
        errors and timeouts propagate as ``httpx.HTTPError``.
        """
        if self._client is None:
            raise RuntimeError("Upstream client not initialised -- app not started")

        payload = params.to_upstream_payload()
        resp = await self._client.post(
            self._settings.url,
            json=payload,
            headers=self.build_headers(token),
        )
        outcome = UpstreamOutcome(status_code=resp.status_code, body=resp.text)

        logger.info(
            "upstream.response",
            status_code=outcome.status_code,
            model=params.model,
            inputs=len(params.inputs),
        )
        logger.debug("upstream.response_body", body=outcome.body)
        return outcome
