"""
Application factory for FastAPI.

Creates the admin HTTP surface around the notification engine.
"""

import logging

from fastapi import FastAPI

from clinicbot.api.exception_handlers import register_exception_handlers
from clinicbot.api.router import api_router
from clinicbot.config.settings import Settings, get_settings
from clinicbot.core.container import Container
from clinicbot.core.lifecycle import lifespan

logger = logging.getLogger(__name__)


class AppFactory:
    """
    Factory for creating and configuring FastAPI applications.

    Each configuration step is handled by a dedicated method.
    """

    def __init__(self, settings: Settings | None = None, container: Container | None = None) -> None:
        """
        Initialize app factory.

        Args:
            settings: Application settings (uses default if not provided)
            container: Pre-built component container (built at start-up if not provided)
        """
        self._settings = container.settings if container else (settings or get_settings())
        self._container = container

    def create_app(self) -> FastAPI:
        app = self._create_base_app()

        if self._container is not None:
            app.state.container = self._container

        self._configure_exception_handlers(app)
        self._configure_routes(app)
        self._configure_health_endpoint(app)

        logger.info(f"Application created: {self._settings.PROJECT_NAME}")
        return app

    def _create_base_app(self) -> FastAPI:
        return FastAPI(
            title=self._settings.PROJECT_NAME,
            version=self._settings.VERSION,
            docs_url=f"{self._settings.API_V1_STR}/docs" if self._settings.DEBUG else None,
            redoc_url=f"{self._settings.API_V1_STR}/redoc" if self._settings.DEBUG else None,
            lifespan=lifespan,
        )

    def _configure_exception_handlers(self, app: FastAPI) -> None:
        register_exception_handlers(app)

    def _configure_routes(self, app: FastAPI) -> None:
        app.include_router(api_router, prefix=self._settings.API_V1_STR)
        logger.info("Routes configured")

    def _configure_health_endpoint(self, app: FastAPI) -> None:
        """Add health check endpoint."""

        @app.get("/health", tags=["health"])
        async def health_check() -> dict[str, str]:
            """
            Verify application health status.

            Returns basic status and environment information.
            """
            return {
                "status": "ok",
                "environment": self._settings.ENVIRONMENT,
            }


def create_app(settings: Settings | None = None, container: Container | None = None) -> FastAPI:
    """
    Create FastAPI application using the factory.

    Args:
        settings: Optional settings override
        container: Optional pre-built container (tests)

    Returns:
        Configured FastAPI application
    """
    factory = AppFactory(settings, container)
    return factory.create_app()
