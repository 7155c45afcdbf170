"""SQLAlchemy implementation of AmcuLogRepository"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.amcu_log_repository import AmcuLogRepository
from src.domain.amcu_log import AmcuLog


class SqlAlchemyAmcuLogRepository(AmcuLogRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, log: AmcuLog) -> AmcuLog:
        self.session.add(log)
        await self.session.flush()
        await self.session.refresh(log)
        return log

    async def list_recent(self, limit: int = 50) -> List[AmcuLog]:
        stmt = select(AmcuLog).order_by(AmcuLog.created_at.desc(), AmcuLog.id.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
