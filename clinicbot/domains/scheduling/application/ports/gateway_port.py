"""Messaging Gateway Ports."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IMessagingGateway(Protocol):
    """Outbound messaging channel (WhatsApp instances)."""

    async def fetch_instances(self) -> list[str]:
        """Names of all channel instances. Raises on transport errors."""
        ...

    async def connection_state(self, instance_name: str) -> str | None:
        """Connection state of an instance ("open" when usable). Raises on transport errors."""
        ...

    async def send_text(self, instance_name: str, number: str, text: str) -> bool:
        """Send a text message. Returns False on any failure, never raises."""
        ...


@runtime_checkable
class IConnectionResolver(Protocol):
    """Finds a currently connected channel instance."""

    async def get_connected_instance(self) -> str | None:
        """Name of a connected instance, or None when none is usable right now."""
        ...
