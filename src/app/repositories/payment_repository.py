"""Payment Repository Interface"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional
from src.domain.payment import Payment


class PaymentRepository(ABC):
    """Repository interface for Payment persistence"""

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """
        Create a new payment

        Args:
            payment: Payment entity to persist

        Returns:
            Created Payment with generated ID
        """
        pass

    @abstractmethod
    async def list_by_customer(
        self,
        customer_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Payment]:
        """
        Retrieve a customer's payments

        Returns:
            Payments ordered by payment_date, then id
        """
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: int, for_update: bool = False) -> Optional[Payment]:
        """
        Retrieve payment by ID

        Args:
            payment_id: Payment ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Payment if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_all(
        self,
        customer_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Payment]:
        """
        Retrieve payments across customers, newest first

        Args:
            customer_id: Restrict to one customer
            date_from: Inclusive lower bound on payment_date
            date_to: Inclusive upper bound on payment_date
        """
        pass

    @abstractmethod
    async def update(self, payment: Payment) -> Payment:
        pass
