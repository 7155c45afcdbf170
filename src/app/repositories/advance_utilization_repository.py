"""Advance Utilization Repository Interface"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.advance_utilization import AdvanceUtilization


class AdvanceUtilizationRepository(ABC):
    """Append-only store of advance draw-downs"""

    @abstractmethod
    async def create(self, utilization: AdvanceUtilization) -> AdvanceUtilization:
        pass

    @abstractmethod
    async def list_by_advance(self, advance_id: int) -> List[AdvanceUtilization]:
        """
        Retrieve draw-downs of one advance

        Returns:
            Utilizations ordered by created_at, then id
        """
        pass
