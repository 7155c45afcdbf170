"""SQLAlchemy implementation of CustomerRepository"""

from datetime import datetime
from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.customer_repository import CustomerRepository
from src.domain.customer import Customer


class SqlAlchemyCustomerRepository(CustomerRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, customer_id: int) -> Optional[Customer]:
        stmt = select(Customer).where(Customer.id == customer_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_external_id(self, external_id: str) -> Optional[Customer]:
        stmt = select(Customer).where(Customer.external_id == external_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, customer: Customer) -> Customer:
        self.session.add(customer)
        await self.session.flush()
        await self.session.refresh(customer)
        return customer

    async def list_all(self, include_inactive: bool = False) -> List[Customer]:
        stmt = select(Customer)
        if not include_inactive:
            stmt = stmt.where(Customer.is_active == True)  # noqa: E712
        result = await self.session.execute(stmt.order_by(Customer.external_id, Customer.id))
        return list(result.scalars().all())

    async def update(self, customer: Customer) -> Customer:
        customer.updated_at = datetime.utcnow()
        self.session.add(customer)
        await self.session.flush()
        await self.session.refresh(customer)
        return customer
