from clinicbot.integrations.monitoring.sentry import capture_exception, configure_sentry

__all__ = ["capture_exception", "configure_sentry"]
