"""
Evolution API Integration

HTTP client for the Evolution API WhatsApp gateway: instance discovery,
connection state, presence and text messages.
"""

from clinicbot.integrations.evolution.client import EvolutionClient, extract_instance_name
from clinicbot.integrations.evolution.exceptions import EvolutionConnectionError, EvolutionError

__all__ = [
    "EvolutionClient",
    "EvolutionConnectionError",
    "EvolutionError",
    "extract_instance_name",
]
