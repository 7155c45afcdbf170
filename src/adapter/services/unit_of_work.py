import logging
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """Commit/rollback over the request's AsyncSession; repositories share the same session"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self):
        try:
            await self.session.commit()
        except Exception:
            logger.error("Commit failed, rolling back session")
            await self.session.rollback()
            raise

    async def rollback(self):
        if self.session.in_transaction():
            await self.session.rollback()
