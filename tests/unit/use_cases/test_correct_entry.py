"""Unit tests for CorrectEntry use case"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.entries import CorrectEntry, CorrectEntryCommandDTO
from src.domain.milk_entry import EntrySource, MilkEntry, Shift
from src.domain.rate_card import MilkType


@pytest.fixture
def stored_entry():
    return MilkEntry(
        id=101,
        customer_id=7,
        entry_date=date(2024, 6, 1),
        shift=Shift.MORNING,
        milk_type=MilkType.COW,
        quantity_litre=Decimal("10.000"),
        fat=Decimal("4.0"),
        snf=Decimal("8.5"),
        rate_per_litre=Decimal("50.00"),
        amount=Decimal("500.00"),
        source=EntrySource.DEVICE,
    )


@pytest.fixture
def mock_entry_repo(stored_entry):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=stored_entry)
    repo.update = AsyncMock(side_effect=lambda entry: entry)
    return repo


@pytest.fixture
def correct_use_case(mock_uow, mock_entry_repo):
    return CorrectEntry(mock_uow, mock_entry_repo)


@pytest.mark.asyncio
class TestCorrectEntry:

    async def test_new_quantity_recomputes_amount(self, correct_use_case, mock_uow, mock_entry_repo):
        """
        Given: An entry of 10L at 50.00
        When: The quantity is corrected to 12L
        Then: amount becomes 600.00 at the same rate
        """
        # Act
        result = await correct_use_case.execute(CorrectEntryCommandDTO(entry_id=101, quantity_litre=Decimal("12")))

        # Assert
        assert result.is_ok()
        assert result.value.amount == Decimal("600.00")
        assert result.value.rate_per_litre == Decimal("50.00")
        mock_entry_repo.get_by_id.assert_awaited_once_with(101, for_update=True)
        mock_uow.commit.assert_awaited_once()

    async def test_new_amount_rederives_rate(self, correct_use_case):
        result = await correct_use_case.execute(CorrectEntryCommandDTO(entry_id=101, amount=Decimal("475.00")))

        assert result.value.amount == Decimal("475.00")
        assert result.value.rate_per_litre == Decimal("47.50")

    async def test_new_rate_recomputes_amount(self, correct_use_case):
        result = await correct_use_case.execute(CorrectEntryCommandDTO(entry_id=101, rate_per_litre=Decimal("48.00")))

        assert result.value.amount == Decimal("480.00")

    async def test_quality_change_does_not_reprice(self, correct_use_case):
        result = await correct_use_case.execute(CorrectEntryCommandDTO(entry_id=101, fat=Decimal("5.5")))

        assert result.value.fat == Decimal("5.5")
        assert result.value.amount == Decimal("500.00")

    async def test_explicit_null_clears_reading(self, correct_use_case):
        result = await correct_use_case.execute(CorrectEntryCommandDTO(entry_id=101, snf=None))

        assert result.value.snf is None

    async def test_clearing_required_field_is_rejected(self, correct_use_case, mock_entry_repo):
        result = await correct_use_case.execute(CorrectEntryCommandDTO(entry_id=101, quantity_litre=None))

        assert result.is_err()
        assert result.error.code == "INVALID_CORRECTION"
        mock_entry_repo.get_by_id.assert_not_called()

    async def test_zero_amount_is_rejected(self, correct_use_case, mock_uow, stored_entry):
        result = await correct_use_case.execute(CorrectEntryCommandDTO(entry_id=101, amount=Decimal("0")))

        assert result.error.code == "ZERO_AMOUNT_REJECTED"
        mock_uow.commit.assert_not_called()
        mock_uow.rollback.assert_awaited_once()

    async def test_unknown_entry(self, correct_use_case, mock_entry_repo):
        mock_entry_repo.get_by_id = AsyncMock(return_value=None)

        result = await correct_use_case.execute(CorrectEntryCommandDTO(entry_id=999, fat=Decimal("4.0")))

        assert result.error.code == "ENTRY_NOT_FOUND"
