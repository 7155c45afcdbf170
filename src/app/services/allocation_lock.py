"""Allocation Lock Interface"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager


class AllocationLock(ABC):
    """
    Serializes payment allocation per customer

    Different customers never contend.
    """

    @abstractmethod
    def hold(self, customer_id: int) -> AsyncContextManager[None]:
        """
        Async context manager held for the duration of one allocation

        Args:
            customer_id: Customer whose advances are being allocated
        """
        pass
