"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from lexistep.auth.router import router as auth_router
from lexistep.billing.provider import BaseBillingProvider, StripeBillingProvider
from lexistep.billing.router import router as billing_router
from lexistep.config import get_settings
from lexistep.database import Database
from lexistep.gamification.router import router as gamification_router
from lexistep.gamification.seed import seed_badges
from lexistep.health.router import router as health_router
from lexistep.middleware import setup_middleware
from lexistep.redis_client import close_redis, create_redis
from lexistep.users.router import router as users_router
from lexistep.writing.router import router as writing_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build process-wide handles on startup, release them on shutdown.

    Handles already present on ``app.state`` (injected by ``create_app``)
    are used as-is and not disposed here.
    """
    settings = get_settings()
    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database(settings.database_url, echo=settings.database_echo)
    if getattr(app.state, "billing_provider", None) is None:
        app.state.billing_provider = StripeBillingProvider(settings.stripe_secret_key)
    app.state.redis = create_redis(settings.redis_url)

    try:
        async with app.state.database.session_factory() as db:
            await seed_badges(db)
    except SQLAlchemyError:
        logger.warning("badge_seeding_failed", exc_info=True)

    yield

    await close_redis(app.state.redis)
    app.state.redis = None
    if owns_database:
        await app.state.database.dispose()


def create_app(
    database: Database | None = None,
    billing_provider: BaseBillingProvider | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Lexistep API",
        description="Daily writing practice with streaks, badges and Pro subscriptions",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.billing_provider = billing_provider
    app.state.redis = None

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(writing_router)
    app.include_router(gamification_router)
    app.include_router(billing_router)

    return app
