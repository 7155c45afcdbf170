"""Rate Card Repository Interface

Defines the contract for rate card persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.rate_card import RateCard


class RateCardRepository(ABC):
    """
    Repository interface for RateCard persistence

    Lookups read active cards in match order; management operations
    work on single cards.
    """

    @abstractmethod
    async def list_active(self) -> List[RateCard]:
        """
        Retrieve all active cards in match order

        Returns:
            Active cards ordered by milk_type, then min_fat ascending (NULL first)
        """
        pass

    @abstractmethod
    async def list_all(self, include_inactive: bool = False) -> List[RateCard]:
        """
        Retrieve cards for administration

        Args:
            include_inactive: Also return deactivated cards

        Returns:
            Cards in match order
        """
        pass

    @abstractmethod
    async def get_by_id(self, card_id: int) -> Optional[RateCard]:
        pass

    @abstractmethod
    async def create(self, card: RateCard) -> RateCard:
        """
        Create a new rate card

        Args:
            card: RateCard entity to persist

        Returns:
            Created RateCard with generated ID
        """
        pass

    @abstractmethod
    async def update(self, card: RateCard) -> RateCard:
        """
        Persist changes to an existing card

        Args:
            card: Modified RateCard

        Returns:
            Refreshed RateCard
        """
        pass
