"""Rate Cache Interface"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable


class RateCache(ABC):
    """
    Time-bounded cache for rate cards and settings

    One instance per process, injected into the rate engine.
    """

    @abstractmethod
    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the cached value for key, loading it when missing or expired

        Args:
            key: Cache key
            loader: Coroutine factory producing a fresh value

        Returns:
            Cached or freshly loaded value
        """
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """Drop every cached value; the next lookup reloads"""
        pass
