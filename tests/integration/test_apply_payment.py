"""Integration tests for ApplyPayment against a real database

Tests cover:
- Oldest-first consumption persisted with audit rows
- Concurrent payments never over-consume an advance
- Compare-and-set draw-down detects a stale read
"""

import asyncio
import pytest
from datetime import date
from decimal import Decimal
from sqlmodel import select

from src.app.repositories.advance_repository import AllocationConflictError
from src.app.use_cases.ledger import ApplyPayment, ApplyPaymentCommandDTO
from src.adapter.repositories.advance_repository import SqlAlchemyAdvanceRepository
from src.adapter.repositories.advance_utilization_repository import SqlAlchemyAdvanceUtilizationRepository
from src.adapter.repositories.customer_repository import SqlAlchemyCustomerRepository
from src.adapter.repositories.payment_repository import SqlAlchemyPaymentRepository
from src.adapter.services.allocation_lock import InProcessAllocationLock
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.advance import Advance, AdvanceStatus
from src.domain.advance_utilization import AdvanceUtilization
from src.domain.payment import Payment


def build_use_case(session, lock=None):
    return ApplyPayment(
        uow=SqlAlchemyUnitOfWork(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        advance_repo=SqlAlchemyAdvanceRepository(session),
        utilization_repo=SqlAlchemyAdvanceUtilizationRepository(session),
        allocation_lock=lock,
        retry_backoff=0,
    )


def command(customer_id, amount, use_advance=True):
    return ApplyPaymentCommandDTO(
        customer_id=customer_id,
        amount=Decimal(amount),
        payment_date=date(2024, 6, 10),
        use_advance=use_advance,
    )


async def reload_advances(session_factory, customer_id):
    async with session_factory() as session:
        result = await session.execute(
            select(Advance).where(Advance.customer_id == customer_id).order_by(Advance.id)
        )
        return list(result.scalars().all())


@pytest.mark.asyncio
class TestApplyPaymentIntegration:

    async def test_150_absorbed_by_advances(self, db_session, session_factory, customer, two_advances):
        """
        Given: A1=100 and A2=200 stored
        When: 150 is paid with use_advance
        Then: A1 utilized, A2 utilized 50, two audit rows, no payment row
        """
        # Act
        result = await build_use_case(db_session).execute(command(customer.id, "150"))

        # Assert
        assert result.is_ok()
        a1, a2 = await reload_advances(session_factory, customer.id)
        assert a1.status == AdvanceStatus.UTILIZED
        assert a1.utilized_amount == Decimal("100.00")
        assert a2.status == AdvanceStatus.ACTIVE
        assert a2.utilized_amount == Decimal("50.00")

        async with session_factory() as session:
            payments = (await session.execute(select(Payment))).scalars().all()
            audits = (await session.execute(select(AdvanceUtilization).order_by(AdvanceUtilization.id))).scalars().all()
        assert payments == []
        assert [(a.advance_id, a.amount) for a in audits] == [(a1.id, Decimal("100.00")), (a2.id, Decimal("50.00"))]

    async def test_remainder_becomes_payment(self, db_session, session_factory, customer, two_advances):
        result = await build_use_case(db_session).execute(command(customer.id, "350"))

        assert result.value.payment.amount == Decimal("50.00")
        assert result.value.payment.advance_used == Decimal("300.00")
        advances = await reload_advances(session_factory, customer.id)
        assert all(advance.status == AdvanceStatus.UTILIZED for advance in advances)

    async def test_concurrent_payments_never_over_consume(self, session_factory, customer, two_advances):
        """
        Given: 300 outstanding across two advances
        When: Two payments of 150 run concurrently in separate sessions
        Then: Exactly 300 is consumed, both advances utilized, no payment rows
        """
        # Arrange
        lock = InProcessAllocationLock()

        async def pay():
            async with session_factory() as session:
                return await build_use_case(session, lock).execute(command(customer.id, "150"))

        # Act
        results = await asyncio.gather(pay(), pay())

        # Assert
        assert all(result.is_ok() for result in results)
        advances = await reload_advances(session_factory, customer.id)
        assert sum(advance.utilized_amount for advance in advances) == Decimal("300.00")
        assert all(advance.utilized_amount <= advance.amount for advance in advances)
        assert all(advance.status == AdvanceStatus.UTILIZED for advance in advances)

    async def test_concurrent_payments_beyond_capacity_record_remainder(self, session_factory, customer, two_advances):
        lock = InProcessAllocationLock()

        async def pay(amount):
            async with session_factory() as session:
                return await build_use_case(session, lock).execute(command(customer.id, amount))

        results = await asyncio.gather(pay("200"), pay("200"))

        total_advance_used = sum(result.value.advance_used for result in results)
        total_paid = sum(result.value.payment.amount for result in results if result.value.payment)
        assert total_advance_used == Decimal("300.00")
        assert total_paid == Decimal("100.00")


@pytest.mark.asyncio
class TestConsumeCompareAndSet:

    async def test_stale_read_is_a_conflict(self, session_factory, customer, two_advances):
        """
        Given: An advance read in one session
        When: Another session draws from it first
        Then: The stale draw raises AllocationConflictError and changes nothing
        """
        async with session_factory() as stale_session, session_factory() as other_session:
            stale_repo = SqlAlchemyAdvanceRepository(stale_session)
            stale = (await stale_repo.list_active_by_customer(customer.id))[0]

            other_repo = SqlAlchemyAdvanceRepository(other_session)
            fresh = (await other_repo.list_active_by_customer(customer.id))[0]
            await other_repo.consume(fresh, Decimal("40.00"))
            await other_session.commit()

            with pytest.raises(AllocationConflictError):
                await stale_repo.consume(stale, Decimal("100.00"))
            await stale_session.rollback()

        a1 = (await reload_advances(session_factory, customer.id))[0]
        assert a1.utilized_amount == Decimal("40.00")
        assert a1.status == AdvanceStatus.ACTIVE

    async def test_draw_beyond_amount_is_refused(self, db_session, customer, two_advances):
        repo = SqlAlchemyAdvanceRepository(db_session)
        a1 = (await repo.list_active_by_customer(customer.id))[0]

        with pytest.raises(AllocationConflictError):
            await repo.consume(a1, Decimal("100.01"))
