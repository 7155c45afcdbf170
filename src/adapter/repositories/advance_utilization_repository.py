"""SQLAlchemy implementation of AdvanceUtilizationRepository"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.advance_utilization_repository import AdvanceUtilizationRepository
from src.domain.advance_utilization import AdvanceUtilization


class SqlAlchemyAdvanceUtilizationRepository(AdvanceUtilizationRepository):
    """Append-only: rows are created, never updated"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, utilization: AdvanceUtilization) -> AdvanceUtilization:
        self.session.add(utilization)
        await self.session.flush()
        await self.session.refresh(utilization)
        return utilization

    async def list_by_advance(self, advance_id: int) -> List[AdvanceUtilization]:
        stmt = (
            select(AdvanceUtilization)
            .where(AdvanceUtilization.advance_id == advance_id)
            .order_by(AdvanceUtilization.created_at, AdvanceUtilization.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
