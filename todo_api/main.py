"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from todo_api import __version__
from todo_api.core.config import settings
from todo_api.core.log_config import configure_logging
from todo_api.errors import TodoError, todo_error_handler
from todo_api.routers import health, lists, subtasks, tasks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown of the server."""
    configure_logging()
    logger.info("Starting %s...", settings.APP_NAME)

    yield

    logger.info("Shutting down %s...", settings.APP_NAME)


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Ordered lists, tasks and subtasks",
    version=__version__,
    lifespan=lifespan,
)

app.add_exception_handler(TodoError, todo_error_handler)

# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(lists.router)
app.include_router(tasks.router)
app.include_router(subtasks.router)
