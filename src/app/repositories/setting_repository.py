"""Setting Repository Interface"""

from abc import ABC, abstractmethod
from typing import Dict, Optional


class SettingRepository(ABC):
    """Key/value settings store"""

    @abstractmethod
    async def get_all(self) -> Dict[str, str]:
        """
        Retrieve every setting

        Returns:
            Mapping of key to value
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def upsert(self, key: str, value: str) -> None:
        """
        Create or overwrite a setting

        Args:
            key: Setting key
            value: New value
        """
        pass
