"""FastAPI app factory"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..core.config.settings import get_config
from ..core.storage.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager.

    Handles startup and shutdown events for the FastAPI application.
    """
    # Startup
    config = get_config()
    db = init_db(config.get_database_url(), echo=config.db_echo)
    await db.create_tables()

    # Store in app state for access in routes
    app.state.db = db
    app.state.config = config

    logger.info("labelhub API started")

    yield

    # Shutdown
    await db.close()
    logger.info("labelhub API stopped")


def create_app() -> FastAPI:
    """Create FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="labelhub API",
        description="Assignment lifecycle, review and scoring for human annotation work",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from .routes import reviews, stats, tasks

    app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
    app.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
    app.include_router(stats.router, prefix="/stats", tags=["stats"])

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "service": "labelhub"}

    return app


app = create_app()
