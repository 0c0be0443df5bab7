"""Async database engine and session factory."""
