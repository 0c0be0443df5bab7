# ============================================================================
# SCOPE: INFRASTRUCTURE (Scheduling)
# Description: Finds a connected WhatsApp instance, memoized with a short TTL.
# ============================================================================
"""Gateway Connection Resolver.

Lists the gateway instances, probes each one and returns the first whose
state is "open". The answer is cached for `ttl_seconds`; a cache hit returns
without probing, a miss re-probes from scratch. Any gateway error degrades to
None so callers simply skip and try again next tick.
"""

import logging
import time
from collections.abc import Callable

from clinicbot.domains.scheduling.application.ports import IMessagingGateway
from clinicbot.integrations.evolution.client import OPEN_STATE

logger = logging.getLogger(__name__)


class ConnectionResolver:
    """Per-process connected-instance cache. One instance per container."""

    def __init__(
        self,
        gateway: IMessagingGateway,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._gateway = gateway
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._cached_instance: str | None = None
        self._cached_at: float | None = None

    @property
    def cached_instance(self) -> str | None:
        return self._cached_instance

    def invalidate(self) -> None:
        self._cached_instance = None
        self._cached_at = None

    def _cache_valid(self) -> bool:
        if self._cached_instance is None or self._cached_at is None:
            return False
        return self._clock() - self._cached_at < self._ttl_seconds

    async def get_connected_instance(self) -> str | None:
        if self._cache_valid():
            return self._cached_instance

        self.invalidate()
        try:
            names = await self._gateway.fetch_instances()
            for name in names:
                state = await self._gateway.connection_state(name)
                if state == OPEN_STATE:
                    self._cached_instance = name
                    self._cached_at = self._clock()
                    logger.debug(f"Using WhatsApp instance '{name}'")
                    return name
        except Exception as e:
            logger.error(f"Error resolving WhatsApp instance: {e}")
            return None

        logger.warning("No WhatsApp instance in 'open' state")
        return None
