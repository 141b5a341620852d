"""FastAPI application entrypoint."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from embedding_gateway.config import Settings, get_settings
from embedding_gateway.core.catalog import ModelCatalog
from embedding_gateway.core.gateway import EmbeddingGateway, WorkerPool
from embedding_gateway.core.validator import RequestValidator
from embedding_gateway.providers.copilot import UpstreamInvoker

logger = structlog.get_logger()


def build_gateway(
    settings: Settings,
    catalog: ModelCatalog | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> EmbeddingGateway:
    """Wire validator, upstream invoker and worker pool from settings."""
    if catalog is None:
        catalog = ModelCatalog(settings.catalog)

    validator = RequestValidator(
        catalog,
        default_model=settings.gateway.default_model,
        strict_model=settings.gateway.strict_model,
    )
    invoker = UpstreamInvoker(settings.upstream, transport=transport)
    pool = WorkerPool(
        max_concurrency=settings.gateway.max_concurrency,
        max_queue=settings.gateway.max_queue,
    )
    return EmbeddingGateway(validator, invoker, pool)


# ── App factory ──────────────────────────────────────────────────────────────

def create_app(
    settings: Settings | None = None,
    *,
    catalog: ModelCatalog | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``catalog`` and ``transport`` replace the configured model catalog and
    the real network transport; tests use them to run against synthetic
    catalogs and a mocked upstream.
    """
    if settings is None:
        settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup / shutdown lifecycle for the application."""
        gateway = build_gateway(settings, catalog=catalog, transport=transport)
        await gateway.startup()
        app.state.gateway = gateway
        app.state.startup_time = time.time()
        logger.info(
            "app.started",
            path=settings.gateway.path,
            upstream=settings.upstream.url,
            max_concurrency=settings.gateway.max_concurrency,
        )

        yield

        await gateway.shutdown()
        app.state.gateway = None
        logger.info("app.stopped")

    app = FastAPI(
        title="Embedding Gateway",
        version="0.1.0",
        description="Validating pass-through for the Copilot embeddings API",
        lifespan=lifespan,
    )
    app.state.gateway = None
    app.state.startup_time = 0.0

    # ── Health endpoint ──────────────────────────────────────────────────

    @app.get("/health", tags=["system"])
    async def health(request: Request) -> JSONResponse:
        """Health check returning status, uptime and embedding models."""
        started = request.app.state.startup_time
        uptime = time.time() - started if started else 0.0
        gateway: EmbeddingGateway | None = request.app.state.gateway

        models: list[str] = []
        if gateway:
            models = gateway.validator.catalog.embedding_model_ids

        return JSONResponse(
            content={
                "status": "ok" if gateway else "starting",
                "uptime_seconds": round(uptime, 2),
                "models": models,
            }
        )

    # ── Middleware and error handlers ────────────────────────────────────

    from embedding_gateway.infra.cors import install_cors_headers
    from embedding_gateway.infra.error_handler import install_error_handlers

    install_cors_headers(app)
    install_error_handlers(app)

    # ── Register routers ────────────────────────────────────────────────

    from embedding_gateway.api.embeddings import build_router

    app.include_router(build_router(settings.gateway.path, "/embeddings"))

    return app


# ── Uvicorn entrypoint ──────────────────────────────────────────────────────

def run() -> None:
    import uvicorn

    from embedding_gateway.infra.logging import configure_logging

    settings = get_settings()
    configure_logging(settings.server.log_level, debug=settings.debug)
    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.server.log_level,
        log_config=None,
    )


if __name__ == "__main__":
    run()
