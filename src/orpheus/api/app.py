"""
Main FastAPI application for the Orpheus backend
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import Settings, settings as default_settings
from ..errors import ConfigurationError
from ..factory import build_pipeline
from ..logging import configure_logging, get_logger
from ..pipeline.runs import RunRegistry
from .endpoints import generations, proxy

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    registry: RunRegistry | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment-loaded ones
        registry: Pre-built run registry (otherwise built from settings at startup)
        http_client: Client used by the image proxy endpoint
    """
    settings = settings or default_settings
    configure_logging(debug=settings.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Orpheus API...")
        app.state.settings = settings
        app.state.http_client = http_client or httpx.AsyncClient()

        if registry is not None:
            app.state.registry = registry
        else:
            try:
                app.state.registry = RunRegistry(build_pipeline(settings))
            except ConfigurationError as e:
                # The proxy still works without generation credentials
                logger.error("Generation pipeline unavailable", error=str(e))
                app.state.registry = None

        yield

        logger.info("Shutting down Orpheus API...")
        if app.state.registry is not None:
            await app.state.registry.aclose()
        if http_client is None:
            await app.state.http_client.aclose()

    app = FastAPI(
        title="Orpheus API",
        description="Turns research papers into narrated podcast episodes",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    app.include_router(proxy.router, prefix="/functions/v1", tags=["proxy"])
    app.include_router(generations.router, tags=["generations"])

    return app
