"""FastAPI application entrypoint for the user API."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.users import router as users_router
from app.core.config import get_settings
from app.core.errors import register_error_handlers
from app.core.logging import configure_logging
from app.core.middleware import RequestLoggingMiddleware
from app.db.base import engine
from app.db.base import session_scope
from app.db.models import Base
from app.db.repository.users import count_users
from app.db.seed import seed_users

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncGenerator[None, None]:
    """Prepare the schema and seed data before serving requests."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting user API with settings=%s", settings.safe_for_logging())

    if settings.create_schema:
        Base.metadata.create_all(bind=engine)
    if settings.seed_on_startup:
        with session_scope() as session:
            if count_users(session) == 0:
                seed_users(session, settings.seed_users)

    yield

    logger.info("Shutting down user API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Test REST API",
        description="CRUD API over users with uniform JSON error documents",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(RequestLoggingMiddleware)
    register_error_handlers(app)
    app.include_router(users_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Health check endpoint for service readiness."""
        return {"status": "ok"}

    return app


app = create_app()
