"""SQLAlchemy implementation of AdvanceRepository

Provides persistence for Advance entities with pessimistic locking and a
compare-and-set draw-down, so concurrent allocations can never consume more
than an advance holds.
"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.advance_repository import AdvanceRepository, AllocationConflictError
from src.domain.advance import Advance, AdvanceStatus


class SqlAlchemyAdvanceRepository(AdvanceRepository):
    """
    SQLAlchemy implementation of AdvanceRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE (ignored by SQLite)
    - Conditional UPDATE keyed on the previously read utilized_amount
    - Oldest-created-first ordering for allocation
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, advance: Advance) -> Advance:
        self.session.add(advance)
        await self.session.flush()
        await self.session.refresh(advance)
        return advance

    async def list_active_by_customer(self, customer_id: int, for_update: bool = False) -> List[Advance]:
        """
        Retrieve active advances oldest-created first with optional row locking

        Args:
            customer_id: Customer ID
            for_update: If True, locks the rows with SELECT FOR UPDATE

        Returns:
            Active advances ordered by created_at, then id
        """
        stmt = (
            select(Advance)
            .where(Advance.customer_id == customer_id)
            .where(Advance.status == AdvanceStatus.ACTIVE)
            .order_by(Advance.created_at, Advance.id)
            # Always re-read current values; the identity map may hold stale rows
            .execution_options(populate_existing=True)
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_customer(self, customer_id: int) -> List[Advance]:
        stmt = (
            select(Advance)
            .where(Advance.customer_id == customer_id)
            .order_by(Advance.advance_date, Advance.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, advance_id: int, for_update: bool = False) -> Optional[Advance]:
        stmt = (
            select(Advance)
            .where(Advance.id == advance_id)
            .execution_options(populate_existing=True)
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(
        self,
        customer_id: Optional[int] = None,
        status: Optional[AdvanceStatus] = None,
    ) -> List[Advance]:
        stmt = select(Advance)
        if customer_id is not None:
            stmt = stmt.where(Advance.customer_id == customer_id)
        if status is not None:
            stmt = stmt.where(Advance.status == status)

        stmt = stmt.order_by(Advance.advance_date.desc(), Advance.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, advance: Advance) -> Advance:
        self.session.add(advance)
        await self.session.flush()
        await self.session.refresh(advance)
        return advance

    async def consume(self, advance: Advance, take: Decimal) -> Advance:
        """
        Draw down an advance with a compare-and-set on utilized_amount

        Args:
            advance: Advance as read by list_active_by_customer
            take: Amount to draw

        Returns:
            The same Advance with committed-state values updated

        Raises:
            AllocationConflictError: If another writer changed the row first
        """
        expected = advance.utilized_amount
        new_utilized = expected + take
        if new_utilized > advance.amount:
            raise AllocationConflictError(advance.id, expected)

        new_status = AdvanceStatus.UTILIZED if new_utilized == advance.amount else AdvanceStatus.ACTIVE

        stmt = (
            update(Advance)
            .where(Advance.id == advance.id)
            .where(Advance.utilized_amount == expected)
            .where(Advance.status == AdvanceStatus.ACTIVE)
            .values(utilized_amount=new_utilized, status=new_status)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)

        if result.rowcount != 1:
            raise AllocationConflictError(advance.id, expected)

        # Mirror the UPDATE in the identity map without scheduling another flush
        set_committed_value(advance, "utilized_amount", new_utilized)
        set_committed_value(advance, "status", new_status)
        return advance
