"""
Main FastAPI application for the chatter backend
"""

import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .. import __version__
from ..config import settings
from ..database import init_database
from ..database.connection import dispose_database
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware
from ..notifications import PushDispatcher
from ..pubsub import create_pubsub

# Configure logging before creating logger
configure_logging(debug=settings.debug)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting chatter API...")
    init_database()
    logger.info("Database initialized")

    app.state.pubsub = create_pubsub()
    app.state.push_dispatcher = PushDispatcher()
    logger.info(
        "Pub/sub and push dispatcher ready",
        pubsub_backend=settings.pubsub_backend,
        push_enabled=settings.push_enabled,
    )

    yield

    logger.info("Shutting down chatter API...")
    await app.state.push_dispatcher.close()
    await app.state.pubsub.close()
    if settings.pubsub_backend == "redis":
        from ..redis_pool import close_redis_pool

        await close_redis_pool()
    await dispose_database()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Chatter API",
        description="GraphQL chat server",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(LoggingContextMiddleware)

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

    # GraphQL endpoint (allow disabling for tests)
    if not os.getenv("CHATTER_DISABLE_GRAPHQL"):
        from ..graphql.schema import create_graphql_router, validate_schema

        logger.info("Validating GraphQL schema...")
        validate_schema()

        app.include_router(create_graphql_router(), prefix="")
        logger.info("GraphQL endpoint initialized successfully", endpoint="/graphql")

    from .endpoints import uploads

    app.include_router(uploads.router)

    Path(settings.storage_base_path).mkdir(parents=True, exist_ok=True)
    app.mount(
        "/uploads",
        StaticFiles(directory=settings.storage_base_path, check_dir=False),
        name="uploads",
    )

    return app


# Create the main application instance
app = create_app()
