"""
Sentry Integration

Provides Sentry error tracking and monitoring.
"""

import logging
from typing import Any

import sentry_sdk

from clinicbot.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_sentry(settings: Settings | None = None) -> bool:
    """
    Configure Sentry error tracking.

    Returns:
        True if configuration was successful
    """
    settings = settings or get_settings()

    if not settings.SENTRY_DSN:
        logger.info("Sentry DSN not configured")
        return False

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.1 if settings.is_development else 0.01,
    )

    logger.info(f"Sentry configured for environment: {settings.ENVIRONMENT}")
    return True


def capture_exception(exception: BaseException, context: dict[str, Any] | None = None) -> None:
    """
    Capture an exception to Sentry (no-op when Sentry was never initialized).

    Args:
        exception: The exception to capture
        context: Additional context data
    """
    if context:
        with sentry_sdk.new_scope() as scope:
            for key, value in context.items():
                scope.set_extra(key, value)
            sentry_sdk.capture_exception(exception)
    else:
        sentry_sdk.capture_exception(exception)
