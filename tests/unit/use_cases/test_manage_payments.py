"""Unit tests for ListPayments and CorrectPayment"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.ledger import ListPayments, CorrectPayment, CorrectPaymentCommandDTO
from src.domain.payment import Payment, PaymentMode


def make_payment(**overrides):
    fields = dict(
        id=5,
        customer_id=7,
        payment_date=date(2024, 6, 10),
        amount=Decimal("300.00"),
        mode=PaymentMode.CASH,
        reference="R-88",
        note=None,
        advance_used=Decimal("50.00"),
    )
    fields.update(overrides)
    return Payment(**fields)


@pytest.fixture
def mock_payment_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=make_payment())
    repo.update = AsyncMock(side_effect=lambda payment: payment)
    repo.list_all = AsyncMock(
        return_value=[make_payment(), make_payment(id=4, amount=Decimal("120.50"), payment_date=date(2024, 6, 1))]
    )
    return repo


@pytest.mark.asyncio
class TestCorrectPayment:

    async def test_only_sent_fields_change(self, mock_uow, mock_payment_repo):
        """
        Given: A cash payment of 300 that recovered 50 of advances
        When: Amount and mode are corrected
        Then: They change; date, reference and advance_used are kept
        """
        # Arrange
        use_case = CorrectPayment(mock_uow, mock_payment_repo)

        # Act
        result = await use_case.execute(
            CorrectPaymentCommandDTO(payment_id=5, amount=Decimal("275.5"), mode=PaymentMode.UPI)
        )

        # Assert
        assert result.is_ok()
        assert result.value.amount == Decimal("275.50")
        assert result.value.mode == PaymentMode.UPI
        assert result.value.payment_date == date(2024, 6, 10)
        assert result.value.reference == "R-88"
        assert result.value.advance_used == Decimal("50.00")
        mock_payment_repo.get_by_id.assert_awaited_once_with(5, for_update=True)
        mock_uow.commit.assert_awaited_once()

    async def test_explicit_null_clears_reference(self, mock_uow, mock_payment_repo):
        result = await CorrectPayment(mock_uow, mock_payment_repo).execute(
            CorrectPaymentCommandDTO(payment_id=5, reference=None)
        )

        assert result.value.reference is None

    async def test_required_fields_cannot_be_cleared(self, mock_uow, mock_payment_repo):
        result = await CorrectPayment(mock_uow, mock_payment_repo).execute(
            CorrectPaymentCommandDTO(payment_id=5, amount=None, mode=None)
        )

        assert result.error.code == "INVALID_CORRECTION"
        assert result.error.message == "amount, mode cannot be cleared"
        mock_payment_repo.update.assert_not_called()

    async def test_unknown_payment(self, mock_uow, mock_payment_repo):
        mock_payment_repo.get_by_id = AsyncMock(return_value=None)

        result = await CorrectPayment(mock_uow, mock_payment_repo).execute(
            CorrectPaymentCommandDTO(payment_id=99, note="typo")
        )

        assert result.error.code == "PAYMENT_NOT_FOUND"

    async def test_repository_failure_rolls_back(self, mock_uow, mock_payment_repo):
        mock_payment_repo.update = AsyncMock(side_effect=Exception("constraint failed"))

        result = await CorrectPayment(mock_uow, mock_payment_repo).execute(
            CorrectPaymentCommandDTO(payment_id=5, note="typo")
        )

        assert result.error.code == "CORRECT_PAYMENT_FAILED"
        mock_uow.rollback.assert_awaited_once()

    def test_zero_amount_is_rejected_by_the_command(self):
        with pytest.raises(ValueError):
            CorrectPaymentCommandDTO(payment_id=5, amount=Decimal("0"))


@pytest.mark.asyncio
class TestListPayments:

    async def test_totals(self, mock_payment_repo):
        result = await ListPayments(mock_payment_repo).execute(customer_id=7, date_from=date(2024, 6, 1))

        assert result.value.total == 2
        assert result.value.total_amount == Decimal("420.50")
        mock_payment_repo.list_all.assert_awaited_once_with(7, date(2024, 6, 1), None)

    async def test_unknown_customer_when_checked(self, mock_payment_repo):
        customer_repo = MagicMock()
        customer_repo.get_by_id = AsyncMock(return_value=None)

        result = await ListPayments(mock_payment_repo, customer_repo).execute(customer_id=99)

        assert result.error.code == "CUSTOMER_NOT_FOUND"
        mock_payment_repo.list_all.assert_not_called()
