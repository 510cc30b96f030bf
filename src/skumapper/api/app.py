"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from skumapper.agents.mapping import FieldMappingEngine, create_mapping_engine
from skumapper.api.routes import health, mappings
from skumapper.core.config import AppSettings
from skumapper.core.logging import configure_logging


def create_app(engine: FieldMappingEngine | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The mapping engine is built once per process in the lifespan unless one
    is supplied by the caller.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = AppSettings()
        configure_logging(settings.log_level)
        app.state.settings = settings
        app.state.engine = engine or create_mapping_engine(settings)
        yield

    app = FastAPI(
        title="SKU Field Mapping Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(mappings.router, prefix="/mappings")
    return app
