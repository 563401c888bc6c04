import logging
import secrets
from contextlib import asynccontextmanager

import logfire
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.middleware.sessions import SessionMiddleware

from socialauth.application.api.middleware import SecurityContextMiddleware
from socialauth.application.api.v1.errors import social_auth_error_handler
from socialauth.application.api.v1.routes.social import create_router
from socialauth.application.di import create_container
from socialauth.config import Config, configure_logging
from socialauth.domain.shared.error import SocialAuthError
from socialauth.domain.social.port.provider_registry import ProviderRegistry
from socialauth.infrastructure.persistence.database import init_schema

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container

    # Fail at startup, not on the first sign-in, if a provider is misconfigured
    registry = await container.get(ProviderRegistry)
    logger.info("Providers available: %s", ", ".join(registry.available_providers()) or "(none)")

    if app.state.create_schema:
        await init_schema(await container.get(AsyncEngine))

    yield

    await container.close()


def create_app(config: Config | None = None, create_schema: bool = False) -> FastAPI:
    """Create FastAPI application."""
    if config is None:
        config = Config()

    # Configure logging early
    configure_logging(config.logging)
    logger.info("Starting %s server v%s", config.server.name, config.server.version)

    if not config.session.secret_key:
        logger.warning("session.secret_key is not set, sessions will not survive a restart")

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )
    app_instance.state.create_schema = create_schema

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_fastapi(app_instance)

    # Inner middleware first: the security context needs the session
    app_instance.add_middleware(SecurityContextMiddleware)
    app_instance.add_middleware(
        SessionMiddleware,
        secret_key=config.session.secret_key or secrets.token_urlsafe(32),
        session_cookie=config.session.cookie_name,
        max_age=config.session.max_age,
        same_site=config.session.same_site,
        https_only=config.session.https_only,
    )

    # Setup dependency injection
    container = create_container(config)
    setup_dishka(container, app_instance)

    # Register routes
    app_instance.include_router(create_router(config.social))

    app_instance.add_exception_handler(SocialAuthError, social_auth_error_handler)

    # Global exception handler - logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance
