"""
Fixtures for the scheduling tests, built on the in-memory fakes.
"""

from datetime import UTC, datetime

import pytest

from clinicbot.domains.scheduling.application.services import NotificationDeliveryService, TemplateRenderer

from scheduling_fakes import FakeGateway, FakeMessageLogRepository, FakeResolver, FakeTemplateRepository, make_appointment


@pytest.fixture
def appointment_factory():
    return make_appointment


@pytest.fixture
def message_logs():
    return FakeMessageLogRepository()


@pytest.fixture
def templates():
    return FakeTemplateRepository(
        {
            ("reminder_24h", "pt"): "Olá {nome}, lembrete: {data} às {hora} com {medico}.",
            ("reminder_24h", "en"): "Hi {nome}, reminder: {data} at {hora} with {medico}.",
            ("provider_reminder_1h", "pt"): "Paciente {paciente} às {hora}.",
            ("no_show_patient", "pt"): "{nome}, sentimos sua falta. Reagende: {link}",
            ("no_show_provider", "pt"): "{paciente} não compareceu ({data} {hora}).",
        }
    )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def frozen_now():
    return datetime(2024, 3, 9, 14, 2, 30, tzinfo=UTC)


@pytest.fixture
def delivery(message_logs, templates, resolver, gateway, frozen_now):
    return NotificationDeliveryService(
        message_logs=message_logs,
        templates=templates,
        connection_resolver=resolver,
        gateway=gateway,
        renderer=TemplateRenderer("UTC"),
        clock=lambda: frozen_now,
    )
