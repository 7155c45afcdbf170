"""Per-customer asyncio locks for payment allocation"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict
from src.app.services.allocation_lock import AllocationLock


class InProcessAllocationLock(AllocationLock):
    """
    One asyncio.Lock per customer, created on demand

    Only serializes allocations inside this process; row locks and the
    compare-and-set draw-down cover other processes. A lock is evicted once
    nobody holds or waits on it, so the map only grows with concurrency.
    """

    def __init__(self):
        self._locks: Dict[int, asyncio.Lock] = {}
        self._users: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, customer_id: int) -> AsyncIterator[None]:
        lock = self._locks.get(customer_id)
        if lock is None:
            lock = self._locks[customer_id] = asyncio.Lock()
        self._users[customer_id] = self._users.get(customer_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[customer_id] -= 1
            if self._users[customer_id] == 0:
                del self._users[customer_id]
                del self._locks[customer_id]
