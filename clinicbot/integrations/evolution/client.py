# ============================================================================
# SCOPE: GLOBAL
# Description: HTTP client for the Evolution API (WhatsApp gateway).
# ============================================================================
"""
Evolution API Client.

Single Responsibility: HTTP communication with the Evolution API.

Endpoints used:
- GET  /instance/fetchInstances
- GET  /instance/connectionState/{instance}
- POST /chat/updatePresence/{instance}
- POST /message/sendText/{instance}

All requests carry the `apikey` header and a per-request timeout so a hung
gateway cannot stall a scheduler pass indefinitely.
"""

import asyncio
import logging
from typing import Any

import httpx

from .exceptions import EvolutionConnectionError

logger = logging.getLogger(__name__)

OPEN_STATE = "open"


def extract_instance_name(instance: dict[str, Any]) -> str | None:
    """Instance name from a fetchInstances item (the shape varies across gateway versions)."""
    nested = instance.get("instance")
    if isinstance(nested, dict) and nested.get("instanceName"):
        return nested["instanceName"]
    return instance.get("instanceName") or instance.get("name")


class EvolutionClient:
    """
    Async client for the Evolution API.

    Uses a persistent AsyncClient for connection reuse.
    """

    DEFAULT_TIMEOUT = 15.0
    MAX_TYPING_DELAY = 3.0

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        simulate_typing: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize client.

        Args:
            base_url: Evolution API base URL
            api_key: API key sent as the `apikey` header
            timeout: Request timeout in seconds
            simulate_typing: Send "composing" presence and wait before each text
            transport: Optional httpx transport (tests)
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._simulate_typing = simulate_typing
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Content-Type": "application/json",
        }

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self.headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client and release resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "EvolutionClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def fetch_instances(self) -> list[str]:
        """
        List the names of all gateway instances.

        Raises:
            EvolutionConnectionError: On transport errors or a non-2xx response
        """
        client = await self._ensure_client()
        try:
            response = await client.get("/instance/fetchInstances")
        except httpx.HTTPError as e:
            raise EvolutionConnectionError(f"fetchInstances failed: {e}") from e

        if not response.is_success:
            raise EvolutionConnectionError(f"fetchInstances returned HTTP {response.status_code}")

        payload = response.json()
        if not isinstance(payload, list):
            raise EvolutionConnectionError("fetchInstances returned an unexpected payload")

        names: list[str] = []
        for item in payload:
            if isinstance(item, dict):
                name = extract_instance_name(item)
                if name:
                    names.append(name)
        return names

    async def connection_state(self, instance_name: str) -> str | None:
        """
        Connection state of one instance ("open" when it can send).

        Returns None when the gateway answers with a non-2xx status.

        Raises:
            EvolutionConnectionError: On transport errors
        """
        client = await self._ensure_client()
        try:
            response = await client.get(f"/instance/connectionState/{instance_name}")
        except httpx.HTTPError as e:
            raise EvolutionConnectionError(f"connectionState({instance_name}) failed: {e}") from e

        if not response.is_success:
            return None

        data = response.json()
        nested = data.get("instance") if isinstance(data, dict) else None
        if isinstance(nested, dict) and nested.get("state"):
            return nested["state"]
        return data.get("state") if isinstance(data, dict) else None

    async def is_open(self, instance_name: str) -> bool:
        return await self.connection_state(instance_name) == OPEN_STATE

    async def send_presence(self, instance_name: str, number: str, presence: str = "composing") -> None:
        """Best-effort presence indicator; failures are ignored."""
        client = await self._ensure_client()
        try:
            await client.post(
                f"/chat/updatePresence/{instance_name}",
                json={"number": number, "presence": presence},
            )
        except httpx.HTTPError as e:
            logger.debug(f"Presence update failed for {number}: {e}")

    @classmethod
    def typing_delay(cls, text: str) -> float:
        """Seconds to show "typing..." before a message: 1s plus 8ms per char, capped at 3s."""
        return min(1.0 + len(text) * 0.008, cls.MAX_TYPING_DELAY)

    async def send_text(self, instance_name: str, number: str, text: str) -> bool:
        """
        Send a text message.

        Args:
            instance_name: Connected gateway instance
            number: Recipient number, digits only
            text: Message body

        Returns:
            True if the gateway accepted the message
        """
        client = await self._ensure_client()

        if self._simulate_typing:
            await self.send_presence(instance_name, number)
            await asyncio.sleep(self.typing_delay(text))

        try:
            response = await client.post(
                f"/message/sendText/{instance_name}",
                json={"number": number, "text": text},
            )
        except httpx.TimeoutException:
            logger.error(f"Timeout sending WhatsApp message to {number}")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Error sending WhatsApp message to {number}: {e}")
            return False

        if not response.is_success:
            logger.error(f"Error sending message: {response.status_code} - {response.text}")
            return False

        return True
