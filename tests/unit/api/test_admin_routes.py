import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from clinicbot.config.settings import Settings
from clinicbot.core.app_factory import create_app
from clinicbot.core.container import Container
from clinicbot.domains.scheduling.application.dto import DispatchSummary, TickReport
from clinicbot.domains.scheduling.domain.entities import HandoffSession
from clinicbot.domains.scheduling.infrastructure.handoff import HandoffRegistry
from clinicbot.integrations.evolution import EvolutionConnectionError


@pytest.fixture
def handoff_repository():
    repository = AsyncMock()
    repository.list_open_phones.return_value = ["5511999990000"]
    repository.list_open.return_value = [
        HandoffSession(
            id="handoff-1",
            patient_phone="5511999990000",
            instance_name="clinic",
            reason="wants a human",
            patient_name="Maria",
            created_at=datetime(2024, 3, 9, 14, 0, tzinfo=UTC),
            last_message_at=datetime(2024, 3, 9, 14, 5, tzinfo=UTC),
        )
    ]
    return repository


@pytest.fixture
def orchestrator():
    orchestrator = MagicMock()
    orchestrator.get_jobs_info.return_value = [
        {"id": "notification_tick", "name": "Notification Passes", "next_run": "2024-03-09T14:05:00+00:00"}
    ]
    orchestrator.trigger_manual_tick = AsyncMock(
        return_value=TickReport(results={"reminders": DispatchSummary(sent=2)}, errors={"retries": "boom"})
    )
    return orchestrator


@pytest.fixture
def client(handoff_repository, orchestrator):
    registry = HandoffRegistry(handoff_repository)
    asyncio.run(registry.load())
    container = Container(
        settings=Settings(_env_file=None, ENVIRONMENT="test"),
        handoff_registry=registry,
        orchestrator=orchestrator,
    )
    app = create_app(container=container)
    # no context manager: the lifespan (scheduler start) is not run
    return TestClient(app)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "environment": "test"}


class TestHandoffRoutes:
    def test_list_open_handoffs(self, client):
        response = client.get("/api/v1/handoffs")

        assert response.status_code == 200
        body = response.json()
        assert len(body) == 1
        assert body[0]["id"] == "handoff-1"
        assert body[0]["status"] == "waiting"

    def test_resolve_handoff(self, client, handoff_repository):
        handoff_repository.resolve_by_id.return_value = "5511999990000"

        response = client.post("/api/v1/handoffs/handoff-1/resolve", json={"resolved_by": "attendant-1"})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert handoff_repository.resolve_by_id.await_args.args[:2] == ("handoff-1", "attendant-1")

    def test_resolve_unknown_handoff_returns_404(self, client, handoff_repository):
        handoff_repository.resolve_by_id.return_value = None

        response = client.post("/api/v1/handoffs/missing/resolve", json={"resolved_by": "attendant-1"})

        assert response.status_code == 404
        assert response.json()["error"] is True

    def test_resolve_requires_resolver(self, client):
        response = client.post("/api/v1/handoffs/handoff-1/resolve", json={})

        assert response.status_code == 422

    def test_check_membership(self, client):
        assert client.get("/api/v1/handoffs/check/5511999990000").json()["in_handoff"] is True
        assert client.get("/api/v1/handoffs/check/5511000000000").json()["in_handoff"] is False


class TestSchedulerRoutes:
    def test_list_jobs(self, client):
        response = client.get("/api/v1/scheduler/jobs")

        assert response.status_code == 200
        assert response.json()[0]["id"] == "notification_tick"

    def test_manual_run(self, client, orchestrator):
        response = client.post("/api/v1/scheduler/run")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is False
        assert body["results"]["reminders"]["sent"] == 2
        assert body["errors"] == {"retries": "boom"}
        orchestrator.trigger_manual_tick.assert_awaited_once()


class TestErrorEnvelope:
    def test_store_outage_returns_503(self, client, handoff_repository):
        handoff_repository.list_open.side_effect = SQLAlchemyError("connection refused")

        response = client.get("/api/v1/handoffs")

        assert response.status_code == 503
        assert response.json() == {"error": True, "message": "Clinic store unavailable", "status_code": 503}

    def test_gateway_outage_returns_503(self, client, orchestrator):
        orchestrator.trigger_manual_tick.side_effect = EvolutionConnectionError("gateway down")

        response = client.post("/api/v1/scheduler/run")

        assert response.status_code == 503
        assert response.json()["message"] == "Messaging gateway unavailable"

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/api/v1/nope")

        assert response.status_code == 404
        assert response.json()["error"] is True

    def test_unexpected_error_is_reported(self, client, orchestrator):
        orchestrator.get_jobs_info.side_effect = RuntimeError("boom")
        client = TestClient(client.app, raise_server_exceptions=False)

        with patch("clinicbot.api.exception_handlers.capture_exception") as capture:
            response = client.get("/api/v1/scheduler/jobs")

        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"
        capture.assert_called_once()


def test_routes_return_503_without_container():
    app = create_app(Settings(_env_file=None))

    response = TestClient(app).get("/api/v1/handoffs")

    assert response.status_code == 503
