"""SQLAlchemy implementation of SettingRepository"""

from datetime import datetime
from typing import Dict, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.setting_repository import SettingRepository
from src.domain.setting import Setting


class SqlAlchemySettingRepository(SettingRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_all(self) -> Dict[str, str]:
        result = await self.session.execute(select(Setting))
        return {setting.key: setting.value for setting in result.scalars().all()}

    async def get(self, key: str) -> Optional[str]:
        setting = await self.session.get(Setting, key)
        return setting.value if setting else None

    async def upsert(self, key: str, value: str) -> None:
        setting = await self.session.get(Setting, key)
        if setting is None:
            setting = Setting(key=key, value=value)
        else:
            setting.value = value
            setting.updated_at = datetime.utcnow()
        self.session.add(setting)
        await self.session.flush()
