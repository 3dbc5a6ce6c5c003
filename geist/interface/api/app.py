"""FastAPI application."""

from dishka import AsyncContainer
from fastapi import FastAPI

from geist.interface.api.routes import health, identities
from geist.interface.error import register_error_handlers
from geist.util.di.container import create_container, setup_di
from geist.util.observability import instrument_fastapi


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Logfire should be configured before calling this function;
    ``scripts/start_app.py`` handles that in production.

    Args:
        container: DI container to use; the production container when None

    Returns:
        Configured application
    """
    app_instance = FastAPI(
        title="Geist Meta API",
        description="Identity linking and primary identity management for Geist users",
        version="0.1.0",
    )

    instrument_fastapi(app_instance)

    setup_di(app_instance, container or create_container())
    register_error_handlers(app_instance)

    app_instance.include_router(health.router)
    app_instance.include_router(identities.router)

    return app_instance
