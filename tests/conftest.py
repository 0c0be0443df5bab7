"""
Shared pytest configuration.

Unit tests never reach PostgreSQL or the Evolution API: repositories are
replaced by in-memory fakes and the gateway by httpx.MockTransport.
"""

import os

import pytest

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("SCHEDULER_ENABLED", "false")


@pytest.fixture(autouse=True)
def reset_settings_singleton():
    """Each test sees settings built from its own environment."""
    import clinicbot.config.settings as settings_module

    settings_module._settings_instance = None
    yield
    settings_module._settings_instance = None
