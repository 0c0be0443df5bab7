"""
Evolution API Exceptions.

Single Responsibility: Define exception types for gateway operations.
"""


class EvolutionError(Exception):
    """Base error for Evolution API operations."""

    pass


class EvolutionConnectionError(EvolutionError):
    """Transport failure or unexpected response while talking to the gateway."""

    pass

