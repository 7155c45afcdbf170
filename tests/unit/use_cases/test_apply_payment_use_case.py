"""Unit tests for ApplyPayment use case

Tests cover:
- Oldest-first advance consumption with partial draws
- Payment row only for the remainder
- Audit rows per draw
- Conflict retry and ALLOCATION_CONFLICT
- payment.recorded event
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.repositories.advance_repository import AllocationConflictError
from src.app.use_cases.ledger import ApplyPayment, ApplyPaymentCommandDTO
from src.adapter.services.allocation_lock import InProcessAllocationLock
from src.domain.advance import Advance, AdvanceStatus
from src.domain.customer import Customer
from src.domain.events import PaymentRecorded
from src.domain.payment import PaymentMode
from src.domain.rate_card import MilkType


def consume(advance, take):
    advance.utilized_amount = advance.utilized_amount + take
    if advance.utilized_amount == advance.amount:
        advance.status = AdvanceStatus.UTILIZED
    return advance


@pytest.fixture
def advances():
    """A1 (older) of 100 and A2 (newer) of 200, both untouched"""
    return [
        Advance(id=1, customer_id=7, amount=Decimal("100.00"), utilized_amount=Decimal("0.00")),
        Advance(id=2, customer_id=7, amount=Decimal("200.00"), utilized_amount=Decimal("0.00")),
    ]


@pytest.fixture
def mock_customer_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(
        return_value=Customer(id=7, external_id="1042", name="Ramesh Patil", default_milk_type=MilkType.COW)
    )
    return repo


@pytest.fixture
def mock_advance_repo(advances):
    repo = MagicMock()
    repo.list_active_by_customer = AsyncMock(return_value=advances)
    repo.consume = AsyncMock(side_effect=consume)
    return repo


@pytest.fixture
def mock_payment_repo():
    repo = MagicMock()

    async def persist(payment):
        payment.id = 55
        return payment

    repo.create = AsyncMock(side_effect=persist)
    return repo


@pytest.fixture
def mock_utilization_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda row: row)
    return repo


@pytest.fixture
def apply_use_case(
    mock_uow, mock_customer_repo, mock_payment_repo, mock_advance_repo, mock_utilization_repo, mock_event_publisher
):
    return ApplyPayment(
        uow=mock_uow,
        customer_repo=mock_customer_repo,
        payment_repo=mock_payment_repo,
        advance_repo=mock_advance_repo,
        utilization_repo=mock_utilization_repo,
        allocation_lock=InProcessAllocationLock(),
        event_publisher=mock_event_publisher,
        max_retries=3,
        retry_backoff=0,
    )


def command(amount, use_advance=True, note=None):
    return ApplyPaymentCommandDTO(
        customer_id=7,
        amount=Decimal(amount),
        payment_date=date(2024, 6, 10),
        mode=PaymentMode.CASH,
        use_advance=use_advance,
        note=note,
    )


@pytest.mark.asyncio
class TestAdvanceAllocation:
    """Test oldest-first recovery of advances"""

    async def test_150_consumes_a1_and_part_of_a2(
        self, apply_use_case, advances, mock_payment_repo, mock_utilization_repo, mock_uow
    ):
        """
        Given: A1=100 (older) and A2=200, nothing utilized
        When: 150 is paid with use_advance
        Then: A1 is utilized, A2 has 50 utilized and stays active, no Payment row
        """
        # Act
        result = await apply_use_case.execute(command("150"))

        # Assert
        assert result.is_ok()
        a1, a2 = advances
        assert a1.utilized_amount == Decimal("100.00")
        assert a1.status == AdvanceStatus.UTILIZED
        assert a2.utilized_amount == Decimal("50.00")
        assert a2.status == AdvanceStatus.ACTIVE

        assert result.value.payment is None
        assert result.value.advance_used == Decimal("150.00")
        assert result.value.message == "Payment of 150.00 fully adjusted against advances"
        mock_payment_repo.create.assert_not_called()

        assert [a.amount for a in result.value.allocations] == [Decimal("100.00"), Decimal("50.00")]
        assert mock_utilization_repo.create.await_count == 2
        audit = mock_utilization_repo.create.await_args_list[1].args[0]
        assert audit.advance_id == 2
        assert audit.utilized_before == Decimal("0.00")
        assert audit.utilized_after == Decimal("50.00")
        assert audit.payment_id is None
        mock_uow.commit.assert_awaited_once()

    async def test_250_leaves_a2_partially_used(self, apply_use_case, advances, mock_payment_repo):
        result = await apply_use_case.execute(command("250"))

        assert advances[0].status == AdvanceStatus.UTILIZED
        assert advances[1].utilized_amount == Decimal("150.00")
        assert advances[1].status == AdvanceStatus.ACTIVE
        assert result.value.payment is None
        mock_payment_repo.create.assert_not_called()

    async def test_amount_above_advances_records_remainder(
        self, apply_use_case, advances, mock_payment_repo, mock_utilization_repo
    ):
        """
        Given: 300 outstanding across both advances
        When: 350 is paid with use_advance
        Then: Both advances are utilized and a Payment of 50 records 300 advance_used
        """
        result = await apply_use_case.execute(command("350", note="June"))

        assert all(advance.status == AdvanceStatus.UTILIZED for advance in advances)
        payment = mock_payment_repo.create.await_args.args[0]
        assert payment.amount == Decimal("50.00")
        assert payment.advance_used == Decimal("300.00")
        assert payment.note == "June (300.00 from advance)"
        assert result.value.payment.id == 55
        assert result.value.message == "Payment of 50.00 recorded after recovering 300.00 from advances"
        for call in mock_utilization_repo.create.await_args_list:
            assert call.args[0].payment_id == 55

    async def test_without_use_advance_pays_in_full(self, apply_use_case, mock_advance_repo, mock_payment_repo):
        result = await apply_use_case.execute(command("150", use_advance=False))

        mock_advance_repo.list_active_by_customer.assert_not_called()
        assert result.value.payment.amount == Decimal("150.00")
        assert result.value.advance_used == Decimal("0.00")
        assert result.value.message == "Payment of 150.00 recorded"

    async def test_advances_read_for_update(self, apply_use_case, mock_advance_repo):
        await apply_use_case.execute(command("10"))

        mock_advance_repo.list_active_by_customer.assert_awaited_once_with(7, for_update=True)

    async def test_unknown_customer(self, apply_use_case, mock_customer_repo):
        mock_customer_repo.get_by_id = AsyncMock(return_value=None)

        result = await apply_use_case.execute(command("150"))

        assert result.error.code == "CUSTOMER_NOT_FOUND"


@pytest.mark.asyncio
class TestAllocationConflicts:
    """A lost compare-and-set is retried from a fresh read"""

    async def test_conflict_then_success(self, apply_use_case, mock_advance_repo, mock_uow, advances):
        # Arrange
        calls = {"n": 0}

        async def flaky_consume(advance, take):
            calls["n"] += 1
            if calls["n"] == 1:
                raise AllocationConflictError(advance.id, advance.utilized_amount)
            return consume(advance, take)

        mock_advance_repo.consume = AsyncMock(side_effect=flaky_consume)

        # Act
        result = await apply_use_case.execute(command("50"))

        # Assert
        assert result.is_ok()
        assert mock_advance_repo.list_active_by_customer.await_count == 2
        mock_uow.rollback.assert_awaited_once()
        mock_uow.commit.assert_awaited_once()

    async def test_persistent_conflict_gives_up(self, apply_use_case, mock_advance_repo, mock_uow, mock_event_publisher):
        """
        Given: Every draw loses the race
        When: The retries run out
        Then: ALLOCATION_CONFLICT and nothing committed
        """
        mock_advance_repo.consume = AsyncMock(side_effect=AllocationConflictError(1, Decimal("0.00")))

        result = await apply_use_case.execute(command("50"))

        assert result.is_err()
        assert result.error.code == "ALLOCATION_CONFLICT"
        assert mock_uow.rollback.await_count == 3
        mock_uow.commit.assert_not_called()
        assert mock_event_publisher.events == []

    async def test_unexpected_error_is_not_retried(self, apply_use_case, mock_advance_repo, mock_uow):
        mock_advance_repo.list_active_by_customer = AsyncMock(side_effect=Exception("connection reset"))

        result = await apply_use_case.execute(command("50"))

        assert result.error.code == "APPLY_PAYMENT_FAILED"
        mock_uow.rollback.assert_awaited_once()


@pytest.mark.asyncio
class TestPaymentEvents:

    async def test_payment_recorded_published(self, apply_use_case, mock_event_publisher):
        await apply_use_case.execute(command("150", use_advance=False))

        event = mock_event_publisher.events[0]
        assert isinstance(event, PaymentRecorded)
        assert event.payment_id == 55
        assert event.amount == Decimal("150.00")
        assert event.mode == "CASH"

    async def test_no_event_when_advances_absorb_everything(self, apply_use_case, mock_event_publisher):
        await apply_use_case.execute(command("150"))

        assert mock_event_publisher.events == []
