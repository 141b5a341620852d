"""Request pipeline: credential check, body parse, validation, upstream call.

``EmbeddingGateway`` composes the validator and the upstream invoker and
runs each request inside a bounded ``WorkerPool``. It never builds HTTP
responses itself; failures surface as ``GatewayError`` subclasses and the
caller (see ``embedding_gateway.api``) relays them.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from types import TracebackType

import structlog

from embedding_gateway.core.auth import extract_token
from embedding_gateway.core.exceptions import (
    AuthError,
    MalformedRequestError,
    PoolSaturatedError,
)
from embedding_gateway.core.schemas import UpstreamOutcome
from embedding_gateway.core.validator import RequestValidator
from embedding_gateway.providers.copilot import UpstreamInvoker

logger = structlog.get_logger()


class WorkerPool:
    """Bounds concurrent requests to ``max_concurrency``.

    Requests beyond that wait for a free slot. With ``max_queue == 0`` the
    wait queue is unbounded; otherwise a request arriving when ``max_queue``
    requests are already waiting is rejected with ``PoolSaturatedError``.
    """

    def __init__(self, max_concurrency: int = 10, max_queue: int = 0) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.max_concurrency = max_concurrency
        self.max_queue = max_queue
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._in_flight = 0
        self._waiting = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def waiting(self) -> int:
        return self._waiting

    async def __aenter__(self) -> WorkerPool:
        if self.max_queue and self._semaphore.locked() and self._waiting >= self.max_queue:
            logger.warning(
                "pool.saturated",
                in_flight=self._in_flight,
                waiting=self._waiting,
            )
            raise PoolSaturatedError()

        self._waiting += 1
        try:
            await self._semaphore.acquire()
        finally:
            self._waiting -= 1
        self._in_flight += 1
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._in_flight -= 1
        self._semaphore.release()


class EmbeddingGateway:
    """Runs one embedding request end to end and returns the upstream outcome."""

    def __init__(
        self,
        validator: RequestValidator,
        invoker: UpstreamInvoker,
        pool: WorkerPool | None = None,
    ) -> None:
        self.validator = validator
        self.invoker = invoker
        self.pool = pool or WorkerPool()

    async def startup(self) -> None:
        await self.invoker.startup()

    async def shutdown(self) -> None:
        await self.invoker.shutdown()

    async def handle(
        self,
        authorization: str | None,
        headers: Mapping[str, str],
        body: bytes,
    ) -> UpstreamOutcome:
        """Process one request.

        Raises:
            AuthError: no usable bearer credential.
            MalformedRequestError: body is not a JSON object.
            ValidationError: body parsed but ``input`` is unusable.
            PoolSaturatedError: no worker free and the wait queue is full.
            httpx.HTTPError: the upstream call failed at the transport level.
        """
        async with self.pool:
            token = extract_token(authorization, headers)
            if not token:
                raise AuthError()

            text = body.decode("utf-8", errors="replace")
            logger.debug("request.received", body=text)
            document = parse_json_object(text)

            params = self.validator.validate(document)
            return await self.invoker.invoke(params, token)


def parse_json_object(text: str) -> dict:
    """Parse ``text`` as a JSON object or raise ``MalformedRequestError``."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.info("request.malformed_json", error=str(exc))
        raise MalformedRequestError() from exc

    if not isinstance(document, dict):
        raise MalformedRequestError()
    return document
