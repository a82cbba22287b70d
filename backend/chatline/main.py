# backend/chatline/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .core.config import is_running_tests, settings
from .database import init_db
from .errors import register_error_handlers
from .routes import conversations, health, messages, realtime, users
from .services.messaging.hub import ConnectionHub

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info("Chatline API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    if settings.auto_create_tables:
        init_db()

    yield

    logger.info(f"Chatline API shutting down ({app.state.hub.get_stats()})")


def create_app() -> FastAPI:
    """
    Build the application.

    Each application owns its own ConnectionHub, stored on ``app.state.hub``.
    """
    configure_logging()

    app = FastAPI(
        title="Chatline API",
        description="Multi-party chat with realtime fan-out",
        version=__version__,
        lifespan=app_lifespan,
    )
    app.state.hub = ConnectionHub()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(realtime.router)

    # Register unified error envelope handlers
    register_error_handlers(app)
    return app


app = create_app()
