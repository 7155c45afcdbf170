"""Milk Entry Repository Interface

Defines the contract for milk entry persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional
from src.domain.milk_entry import MilkEntry, Shift


class MilkEntryRepository(ABC):
    """Repository interface for MilkEntry persistence"""

    @abstractmethod
    async def create(self, entry: MilkEntry) -> MilkEntry:
        """
        Create a new entry

        Args:
            entry: MilkEntry entity to persist

        Returns:
            Created MilkEntry with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, entry_id: int, for_update: bool = False) -> Optional[MilkEntry]:
        """
        Retrieve entry by ID

        Args:
            entry_id: Entry ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            MilkEntry if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, entry: MilkEntry) -> MilkEntry:
        """Persist a corrected entry"""
        pass

    @abstractmethod
    async def list_by_customer(
        self,
        customer_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        shift: Optional[Shift] = None,
    ) -> List[MilkEntry]:
        """
        Retrieve a customer's entries

        Args:
            customer_id: Customer ID
            date_from: Inclusive lower date bound (None = unbounded)
            date_to: Inclusive upper date bound (None = unbounded)
            shift: Restrict to one shift

        Returns:
            Entries ordered by entry_date, then id
        """
        pass
