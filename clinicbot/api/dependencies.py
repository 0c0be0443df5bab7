"""FastAPI dependencies: components are read from the container on app.state."""

from fastapi import HTTPException, Request, status

from clinicbot.core.container import Container
from clinicbot.domains.scheduling.infrastructure.handoff import HandoffRegistry
from clinicbot.domains.scheduling.infrastructure.scheduler import NotificationOrchestrator


def get_container(request: Request) -> Container:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service not initialized")
    return container


def get_handoff_registry(request: Request) -> HandoffRegistry:
    return get_container(request).handoff_registry


def get_orchestrator(request: Request) -> NotificationOrchestrator:
    return get_container(request).orchestrator
