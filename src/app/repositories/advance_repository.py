"""Advance Repository Interface

Defines the contract for advance persistence, including the conditional
draw-down used by payment allocation.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from src.domain.advance import Advance, AdvanceStatus


class AllocationConflictError(Exception):
    """
    Raised when an advance changed between read and draw-down

    The caller should roll back and retry the whole allocation.
    """

    def __init__(self, advance_id: int, expected_utilized: Decimal):
        self.advance_id = advance_id
        self.expected_utilized = expected_utilized
        super().__init__(
            f"Advance {advance_id} no longer has utilized_amount={expected_utilized}"
        )


class AdvanceRepository(ABC):
    """
    Repository interface for Advance persistence

    Allocation reads active advances with pessimistic locking (SELECT FOR
    UPDATE where the database supports it) and writes draw-downs with a
    compare-and-set on utilized_amount.
    """

    @abstractmethod
    async def create(self, advance: Advance) -> Advance:
        """
        Create a new advance

        Args:
            advance: Advance entity to persist

        Returns:
            Created Advance with generated ID
        """
        pass

    @abstractmethod
    async def list_active_by_customer(self, customer_id: int, for_update: bool = False) -> List[Advance]:
        """
        Retrieve active advances oldest-created first

        Args:
            customer_id: Customer ID
            for_update: If True, lock the rows with SELECT FOR UPDATE

        Returns:
            Active advances ordered by created_at, then id
        """
        pass

    @abstractmethod
    async def list_by_customer(self, customer_id: int) -> List[Advance]:
        """
        Retrieve every advance of a customer (active and utilized)

        Returns:
            Advances ordered by advance_date, then id
        """
        pass

    @abstractmethod
    async def get_by_id(self, advance_id: int, for_update: bool = False) -> Optional[Advance]:
        """
        Retrieve advance by ID, always re-reading current values

        Args:
            advance_id: Advance ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Advance if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_all(
        self,
        customer_id: Optional[int] = None,
        status: Optional[AdvanceStatus] = None,
    ) -> List[Advance]:
        """
        Retrieve advances across customers, newest first

        Args:
            customer_id: Restrict to one customer
            status: Restrict to active or utilized advances
        """
        pass

    @abstractmethod
    async def update(self, advance: Advance) -> Advance:
        """
        Persist an edited advance

        The caller keeps status consistent with utilized_amount.
        """
        pass

    @abstractmethod
    async def consume(self, advance: Advance, take: Decimal) -> Advance:
        """
        Draw down an advance if it is unchanged since it was read

        Sets utilized_amount = advance.utilized_amount + take, keyed on the
        utilized_amount observed when the row was read, and flips status to
        UTILIZED when fully consumed.

        Args:
            advance: Advance as read by list_active_by_customer
            take: Amount to draw (0 < take <= outstanding)

        Returns:
            Updated Advance

        Raises:
            AllocationConflictError: If utilized_amount no longer matches
        """
        pass
