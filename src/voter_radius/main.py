"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from voter_radius.core.config import get_settings
from voter_radius.core.database import dispose_engines, ensure_schema, init_engines
from voter_radius.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Open both stores and the geocoder client on startup, release them on shutdown."""
    from voter_radius.services.retrieval_service import build_retrieval_service

    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)
    init_engines(settings.database_url, settings.registry_database_url, schema=settings.database_schema)
    await ensure_schema()

    client = httpx.AsyncClient(timeout=settings.geocoder_timeout)
    app.state.retrieval_service = build_retrieval_service(settings, http_client=client)

    yield

    app.state.retrieval_service = None
    await client.aclose()
    await dispose_engines()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Voter Radius",
        description="Registered voters within a radius of an address, backed by a TTL result cache",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Register exception handlers
    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    from voter_radius.api.router import create_router

    app.include_router(create_router(settings))

    return app
