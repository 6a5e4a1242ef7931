"""
FastAPI Application Setup.

Application factory for the Config Registry REST API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from config_registry.api.errors import register_exception_handlers
from config_registry.api.middleware.logging import RequestLoggingMiddleware
from config_registry.api.middleware.session import SessionMiddleware
from config_registry.api.routes import correlations, health, targets
from config_registry.auth.session import SessionResolver
from config_registry.auth.tokens import resolve_secret
from config_registry.registries import Registries, build_registries
from config_registry.settings import Settings
from config_registry.version import __version__

logger = logging.getLogger(__name__)

PUBLIC_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


def create_app(settings: Settings | None = None, registries: Registries | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Service configuration (read from the environment if None)
        registries: Pre-built registries. When given, the caller owns them
            and is responsible for hydrating and closing them; otherwise
            they are built from settings and hydrated at startup.

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or Settings.from_env()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(f"Config Registry API {__version__} starting up...")

        owned = app.state.registries is None
        if owned:
            app.state.registries = build_registries(settings)
            app.state.registries.hydrate()

        yield

        logger.info("Config Registry API shutting down...")
        if owned:
            app.state.registries.close()
            app.state.registries = None

    app = FastAPI(
        title="Config Registry API",
        description="Permission-gated registries for stream correlations and notification targets",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.registries = registries

    resolver = SessionResolver(
        jwt_secret=resolve_secret(settings.jwt_secret),
        api_keys=settings.api_keys,
        allow_basic=settings.allow_basic,
    )
    app.add_middleware(SessionMiddleware, resolver=resolver, public_paths=PUBLIC_PATHS)
    app.add_middleware(RequestLoggingMiddleware)
    if settings.allow_basic:
        logger.warning("Basic authentication ENABLED (CR_ALLOW_BASIC=true); usernames are not verified")

    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(correlations.router, prefix="/api/v1/correlations", tags=["Correlations"])
    app.include_router(targets.router, prefix="/api/v1/targets", tags=["Targets"])

    register_exception_handlers(app)

    return app
