"""
Main entry point for the citation engine service.

Creates the FastAPI application instance for uvicorn:

    uvicorn citation_engine.main:app --port 8090
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from citation_engine import __version__
from citation_engine.api.error_handlers import register_error_handlers
from citation_engine.api.routes.grounding import router as grounding_router
from citation_engine.api.routes.health import router as health_router
from citation_engine.api.routes.health import set_service_start_time
from citation_engine.core.config import get_settings
from citation_engine.core.logging import configure_logging, get_logger
from citation_engine.resolution.batch import BatchResolver


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    On startup: create the shared batch resolver (and its HTTP client)
    On shutdown: close it
    """
    settings = get_settings()
    logger.info("Starting citation engine", port=settings.port)

    set_service_start_time()
    app.state.batch_resolver = BatchResolver.from_settings(settings)

    yield

    logger.info("Shutting down citation engine")
    await app.state.batch_resolver.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Citation Engine",
        description="Grounding citation resolution for generated text",
        version=__version__,
        lifespan=lifespan,
    )

    register_error_handlers(app)

    app.include_router(grounding_router)
    app.include_router(health_router)

    return app


# Create application instance
app = create_app()
