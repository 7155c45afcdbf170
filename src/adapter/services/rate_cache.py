"""In-memory TTL cache for rate data"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Tuple
from src.app.services.rate_cache import RateCache

logger = logging.getLogger(__name__)


class InMemoryRateCache(RateCache):
    """
    Process-wide TTL cache

    Features:
    - Lazy population on first lookup
    - Expiry after ttl_seconds
    - Explicit invalidation visible to the next lookup
    - Concurrent misses for one key trigger a single load
    """

    def __init__(self, ttl_seconds: float = 60, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._generation = 0
        self._lock = asyncio.Lock()

    def _fresh(self, key: str):
        cached = self._entries.get(key)
        if cached is None:
            return None
        expires_at, value = cached
        if self._clock() >= expires_at:
            return None
        return cached

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        cached = self._fresh(key)
        if cached is not None:
            return cached[1]

        async with self._lock:
            cached = self._fresh(key)
            if cached is not None:
                return cached[1]

            generation = self._generation
            value = await loader()
            # An invalidation during the load means the value may be stale
            if generation == self._generation:
                self._entries[key] = (self._clock() + self.ttl_seconds, value)
            else:
                logger.debug(f"Rate cache invalidated while loading {key}, not storing")
            return value

    def invalidate(self) -> None:
        self._generation += 1
        self._entries.clear()
        logger.info("Rate cache invalidated")
