"""
Application lifecycle event handlers.

Manages startup and shutdown tasks for logging, database connections and
reference data seeding.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from core.logging import configure_logging
from db.session import close_db, init_db

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        configure_logging()
        logger.info("Starting Agora API...", env=settings.APP_ENV)

        # Initialize database connections
        await init_db()

        # Seed built-in vote types - safe to run multiple times
        if settings.SEED_VOTE_TYPES:
            try:
                from services.startup_seeder import seed_all

                await seed_all()
            except Exception as e:
                logger.warning("Startup seeder failed", error=str(e))

        logger.info("Agora API started successfully")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("Shutting down Agora API...")

        # Close database connections
        await close_db()

        logger.info("Agora API shutdown complete")

    return stop_app
