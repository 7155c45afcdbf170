"""AMCU Log Repository Interface"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.amcu_log import AmcuLog


class AmcuLogRepository(ABC):
    """Packet-level log of the collection unit stream"""

    @abstractmethod
    async def create(self, log: AmcuLog) -> AmcuLog:
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 50) -> List[AmcuLog]:
        """
        Retrieve the most recent packet logs

        Args:
            limit: Maximum rows to return

        Returns:
            Logs ordered by created_at DESC
        """
        pass
