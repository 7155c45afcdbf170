"""SQLAlchemy implementation of MilkEntryRepository"""

from datetime import date, datetime
from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.milk_entry_repository import MilkEntryRepository
from src.domain.milk_entry import MilkEntry, Shift


class SqlAlchemyMilkEntryRepository(MilkEntryRepository):
    """
    SQLAlchemy implementation of MilkEntryRepository

    Features:
    - Optional row-level locking for corrections
    - Date-bounded listing in ledger order (entry_date, id)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: MilkEntry) -> MilkEntry:
        """
        Create a new entry

        Args:
            entry: MilkEntry entity to persist

        Returns:
            Created MilkEntry with generated ID
        """
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_by_id(self, entry_id: int, for_update: bool = False) -> Optional[MilkEntry]:
        stmt = select(MilkEntry).where(MilkEntry.id == entry_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, entry: MilkEntry) -> MilkEntry:
        entry.updated_at = datetime.utcnow()
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def list_by_customer(
        self,
        customer_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        shift: Optional[Shift] = None,
    ) -> List[MilkEntry]:
        stmt = select(MilkEntry).where(MilkEntry.customer_id == customer_id)
        if date_from is not None:
            stmt = stmt.where(MilkEntry.entry_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(MilkEntry.entry_date <= date_to)
        if shift is not None:
            stmt = stmt.where(MilkEntry.shift == shift)

        stmt = stmt.order_by(MilkEntry.entry_date, MilkEntry.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
