"""Customer Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.customer import Customer


class CustomerRepository(ABC):
    """Repository interface for Customer persistence"""

    @abstractmethod
    async def get_by_id(self, customer_id: int) -> Optional[Customer]:
        """
        Retrieve customer by internal ID

        Args:
            customer_id: Customer ID

        Returns:
            Customer if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_external_id(self, external_id: str) -> Optional[Customer]:
        """
        Retrieve customer by the id the collection unit sends (CID)

        Args:
            external_id: Collection unit customer id

        Returns:
            Customer if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, customer: Customer) -> Customer:
        pass

    @abstractmethod
    async def list_all(self, include_inactive: bool = False) -> List[Customer]:
        """
        Retrieve customers ordered by external_id

        Args:
            include_inactive: Also return deactivated customers
        """
        pass

    @abstractmethod
    async def update(self, customer: Customer) -> Customer:
        pass
