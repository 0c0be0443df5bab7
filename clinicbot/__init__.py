"""Clinic notification engine: reminders, no-shows, delivery retries and handoff timeouts."""

__version__ = "0.1.0"
