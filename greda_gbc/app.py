"""GREDA-GBC: FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from greda_gbc.config import Settings, get_settings
from greda_gbc.middleware import (
    configure_cors,
    configure_error_handlers,
    configure_rate_limiting,
    lifespan,
    logging_middleware,
)
from greda_gbc.routers import activity, assessments, catalog, health, users
from greda_gbc.services.notifier import build_notification_port


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Green building sustainability assessment and certification scoring",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.notifier = build_notification_port(settings)

    # Middleware
    app.middleware("http")(logging_middleware)
    configure_rate_limiting(app, settings)
    configure_cors(app, settings)
    configure_error_handlers(app)

    # Routers
    app.include_router(health.router)
    app.include_router(catalog.router, prefix=settings.api_prefix)
    app.include_router(assessments.router, prefix=settings.api_prefix)
    app.include_router(activity.router, prefix=settings.api_prefix)
    app.include_router(users.router, prefix=settings.api_prefix)

    return app


# Default app instance for uvicorn
app = create_app()
