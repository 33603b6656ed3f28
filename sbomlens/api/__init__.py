"""SbomLens REST API: FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sbomlens.api.deps import close_services, init_services
from sbomlens.api.errors import register_error_handlers
from sbomlens.api.middleware.request_id import RequestIDMiddleware
from sbomlens.api.routers import licenses, sbom
from sbomlens.core.config import Settings, load_settings
from sbomlens.core.logging import setup_logging


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    setup_logging()
    settings = settings or load_settings()

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        init_services(settings)
        yield
        await close_services()

    app = FastAPI(
        title="SbomLens",
        docs_url="/api/v1/docs",
        openapi_url="/api/v1/openapi.json",
        lifespan=_lifespan,
    )

    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health", tags=["ops"])
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(sbom.router, prefix="/api/v1/analyses/{analysis_id}/sbom", tags=["sbom"])
    app.include_router(
        licenses.router, prefix="/api/v1/analyses/{analysis_id}/licenses", tags=["licenses"]
    )

    return app
