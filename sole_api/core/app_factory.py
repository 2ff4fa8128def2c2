"""Application factory for the FastAPI app.

Centralizes app construction (metadata, state, middleware, handlers, routers)
so tests can build isolated instances with their own limiter, database and
image provider.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sole_api.adapters.image.base import AbstractImageGenerator
from sole_api.adapters.rate_limit.base import AbstractRateLimiter
from sole_api.api.routes import auth_router, designs_router, health_router
from sole_api.core.config import DEFAULT_JWT_SECRET, settings, split_csv
from sole_api.core.database import Database
from sole_api.core.exception_handlers import setup_exception_handlers
from sole_api.core.logging import configure_logging
from sole_api.core.middleware import request_id_middleware, request_timeout_middleware
from sole_api.core.openapi import apply_openapi_customizations
from sole_api.core.rate_limit import build_rate_limiter, rate_limit_middleware

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    database.create_all()
    logger.info("app.started", extra={"environment": settings.app_env})
    try:
        yield
    finally:
        database.dispose()
        logger.info("app.stopped")


def create_app(
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    database: Database | None = None,
    image_generator: AbstractImageGenerator | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Limiter owning the per-client quota state; built from
            settings when omitted.
        database: Database owning engine and sessions; built from settings
            when omitted.
        image_generator: Image provider; resolved lazily from settings when
            omitted.
        configure_logs: Reconfigure root logging from settings.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(settings.log)

    if settings.auth.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning(
            "auth.default_secret",
            extra={"hint": "Set AUTH_JWT_SECRET outside local development"},
        )

    app = FastAPI(
        title="Sole Design API",
        description=(
            "REST backend for AI-generated sneaker designs: user registration and "
            "login with bearer tokens, design generation from a prompt, style and "
            "colour palette, and optional NFT linkage. Requests are rate limited "
            "per client."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan,
    )

    # State owned by this app instance
    app.state.rate_limiter = (
        rate_limiter if rate_limiter is not None else build_rate_limiter(settings.app)
    )
    app.state.database = database if database is not None else Database(settings.db)
    app.state.image_generator = image_generator

    # Middleware: the last registered runs first
    app.middleware("http")(request_timeout_middleware)
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=split_csv(settings.app.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
        ],
    )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(designs_router, prefix=API_PREFIX)

    # OpenAPI customizations (security scheme, tags, exemptions)
    apply_openapi_customizations(app)

    return app
