"""
Application lifecycle management using the FastAPI lifespan pattern.

Start-up order matters: the handoff membership set is loaded before the
scheduler starts, so hot-path checks never see an empty set on boot.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from clinicbot.core.container import Container, build_container

logger = logging.getLogger(__name__)


class LifecycleManager:
    """
    Manages application lifecycle events.

    Handles startup initialization and graceful shutdown.
    """

    def __init__(self, container: Container) -> None:
        self._container = container
        self._initialized = False

    async def startup(self) -> None:
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        logger.info("Starting application lifecycle...")
        self._verify_configurations()

        await self._container.handoff_registry.load()
        await self._container.orchestrator.start()

        self._initialized = True
        logger.info("Application lifecycle startup completed")

    async def shutdown(self) -> None:
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping application lifecycle...")
        await self._container.close()

        self._initialized = False
        logger.info("Application lifecycle shutdown completed")

    def _verify_configurations(self) -> None:
        settings = self._container.settings
        if not settings.EVOLUTION_API_KEY:
            logger.warning("EVOLUTION_API_KEY not configured - gateway calls will be rejected")

        if not settings.SCHEDULER_ENABLED:
            logger.info("Notification scheduler is disabled via SCHEDULER_ENABLED=False")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Uses the container already on app.state when one was injected,
    otherwise builds one from settings.
    """
    container = getattr(app.state, "container", None)
    if container is None:
        container = build_container()
        app.state.container = container

    lifecycle = LifecycleManager(container)

    await lifecycle.startup()

    yield

    await lifecycle.shutdown()
