"""Tests for the request pipeline and the bounded worker pool."""

from __future__ import annotations

import asyncio

import pytest

from embedding_gateway.core.catalog import ModelCatalog
from embedding_gateway.core.exceptions import (
    AuthError,
    InvalidInputError,
    MalformedRequestError,
    PoolSaturatedError,
)
from embedding_gateway.core.gateway import EmbeddingGateway, WorkerPool, parse_json_object
from embedding_gateway.core.schemas import EmbeddingParameters, UpstreamOutcome
from embedding_gateway.core.validator import RequestValidator


# ── Helpers ──────────────────────────────────────────────────────────────────


class FakeInvoker:
    """Stands in for UpstreamInvoker and records every call."""

    def __init__(self, outcome: UpstreamOutcome | None = None) -> None:
        self.outcome = outcome or UpstreamOutcome(status_code=200, body='{"data":[]}')
        self.calls: list[tuple[EmbeddingParameters, str]] = []
        self.started = False

    async def startup(self) -> None:
        self.started = True

    async def shutdown(self) -> None:
        self.started = False

    async def invoke(self, params: EmbeddingParameters, token: str) -> UpstreamOutcome:
        self.calls.append((params, token))
        return self.outcome


def _gateway(invoker: FakeInvoker) -> EmbeddingGateway:
    return EmbeddingGateway(RequestValidator(ModelCatalog()), invoker)  # type: ignore[arg-type]


# ── Pipeline ─────────────────────────────────────────────────────────────────


class TestEmbeddingGateway:
    @pytest.mark.asyncio
    async def test_valid_request_reaches_upstream(self) -> None:
        invoker = FakeInvoker()
        gateway = _gateway(invoker)

        outcome = await gateway.handle("Bearer tok", {}, b'{"input": ["a", "b"]}')

        assert outcome.status_code == 200
        params, token = invoker.calls[0]
        assert token == "tok"
        assert params.inputs == ("a", "b")
        assert params.model == "text-embedding-3-small"

    @pytest.mark.asyncio
    async def test_missing_token_rejected_before_body_parse(self) -> None:
        invoker = FakeInvoker()
        with pytest.raises(AuthError):
            await _gateway(invoker).handle(None, {}, b"{not json")
        assert invoker.calls == []

    @pytest.mark.asyncio
    async def test_malformed_json(self) -> None:
        invoker = FakeInvoker()
        with pytest.raises(MalformedRequestError) as exc_info:
            await _gateway(invoker).handle("Bearer tok", {}, b"{not json")
        assert exc_info.value.message == "Invalid JSON format"
        assert invoker.calls == []

    @pytest.mark.asyncio
    async def test_invalid_input_makes_no_upstream_call(self) -> None:
        invoker = FakeInvoker()
        with pytest.raises(InvalidInputError):
            await _gateway(invoker).handle("Bearer tok", {}, b'{"input": 12}')
        assert invoker.calls == []

    @pytest.mark.asyncio
    async def test_upstream_error_outcome_returned(self) -> None:
        invoker = FakeInvoker(UpstreamOutcome(status_code=503, body="busy"))
        outcome = await _gateway(invoker).handle("Bearer tok", {}, b'{"input": "a"}')
        assert outcome.status_code == 503
        assert outcome.body == "busy"

    @pytest.mark.asyncio
    async def test_lifecycle_delegates_to_invoker(self) -> None:
        invoker = FakeInvoker()
        gateway = _gateway(invoker)
        await gateway.startup()
        assert invoker.started
        await gateway.shutdown()
        assert not invoker.started

    @pytest.mark.asyncio
    async def test_slot_released_after_failure(self) -> None:
        invoker = FakeInvoker()
        gateway = _gateway(invoker)
        with pytest.raises(InvalidInputError):
            await gateway.handle("Bearer tok", {}, b'{"input": []}')
        assert gateway.pool.in_flight == 0


class TestParseJsonObject:
    def test_object_parsed(self) -> None:
        assert parse_json_object('{"input": "x"}') == {"input": "x"}

    @pytest.mark.parametrize("text", ["", "{not json", '["a"]', '"just a string"', "null"])
    def test_non_objects_rejected(self, text: str) -> None:
        with pytest.raises(MalformedRequestError):
            parse_json_object(text)


# ── Worker pool ──────────────────────────────────────────────────────────────


class TestWorkerPool:
    def test_rejects_zero_concurrency(self) -> None:
        with pytest.raises(ValueError):
            WorkerPool(max_concurrency=0)

    @pytest.mark.asyncio
    async def test_limits_concurrency(self) -> None:
        pool = WorkerPool(max_concurrency=2)
        peak = 0
        gate = asyncio.Event()

        async def work() -> None:
            nonlocal peak
            async with pool:
                peak = max(peak, pool.in_flight)
                await gate.wait()

        tasks = [asyncio.create_task(work()) for _ in range(5)]
        await asyncio.sleep(0)
        assert pool.in_flight == 2
        assert pool.waiting == 3

        gate.set()
        await asyncio.gather(*tasks)
        assert peak == 2
        assert pool.in_flight == 0

    @pytest.mark.asyncio
    async def test_bounded_queue_rejects_when_full(self) -> None:
        pool = WorkerPool(max_concurrency=1, max_queue=1)
        gate = asyncio.Event()

        async def work() -> None:
            async with pool:
                await gate.wait()

        running = asyncio.create_task(work())
        queued = asyncio.create_task(work())
        await asyncio.sleep(0)

        with pytest.raises(PoolSaturatedError):
            async with pool:
                pass

        gate.set()
        await asyncio.gather(running, queued)
        assert pool.in_flight == 0

    @pytest.mark.asyncio
    async def test_unbounded_queue_never_rejects(self) -> None:
        pool = WorkerPool(max_concurrency=1, max_queue=0)
        gate = asyncio.Event()

        async def work() -> None:
            async with pool:
                await gate.wait()

        tasks = [asyncio.create_task(work()) for _ in range(20)]
        await asyncio.sleep(0)
        assert pool.waiting == 19

        gate.set()
        await asyncio.gather(*tasks)
