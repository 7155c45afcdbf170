"""Unit tests for IngestEntry use case

Tests cover:
- Pricing from rate cards, operator rate and supplied amount
- Missing readings replaced by defaults
- RATE_UNAVAILABLE and ZERO_AMOUNT_REJECTED
- Unknown customers
- entry.created published after commit
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.entries.ingest_entry import IngestEntry
from src.app.use_cases.entries.dtos import IngestEntryCommandDTO
from src.domain.customer import Customer
from src.domain.events import EntryCreated
from src.domain.milk_entry import EntrySource, Shift
from src.domain.rate_card import MilkType


@pytest.fixture
def sample_customer():
    return Customer(id=7, external_id="1042", name="Ramesh Patil", default_milk_type=MilkType.COW, is_active=True)


@pytest.fixture
def mock_customer_repo(sample_customer):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=sample_customer)
    repo.get_by_external_id = AsyncMock(return_value=sample_customer)
    return repo


@pytest.fixture
def mock_entry_repo():
    repo = MagicMock()

    async def persist(entry):
        entry.id = 101
        return entry

    repo.create = AsyncMock(side_effect=persist)
    return repo


@pytest.fixture
def mock_rate_engine():
    engine = MagicMock()
    engine.get_rate = AsyncMock(return_value=Decimal("50.00"))
    engine.get_default_quality = AsyncMock(return_value=(Decimal("4.0"), Decimal("8.5")))
    return engine


@pytest.fixture
def ingest_use_case(mock_uow, mock_customer_repo, mock_entry_repo, mock_rate_engine, mock_event_publisher):
    return IngestEntry(
        uow=mock_uow,
        customer_repo=mock_customer_repo,
        entry_repo=mock_entry_repo,
        rate_engine=mock_rate_engine,
        event_publisher=mock_event_publisher,
    )


def command(**overrides):
    values = dict(
        customer_external_id="1042",
        entry_date=date(2024, 6, 1),
        shift=Shift.MORNING,
        quantity_litre=Decimal("10"),
        fat=Decimal("4.0"),
        snf=Decimal("8.5"),
        source=EntrySource.DEVICE,
    )
    values.update(overrides)
    return IngestEntryCommandDTO(**values)


@pytest.mark.asyncio
class TestIngestEntryPricing:
    """Test how the entry gets its rate and amount"""

    async def test_prices_from_rate_card(self, ingest_use_case, mock_rate_engine, mock_uow):
        """
        Given: A rate card pays 50.00 for cow milk at fat 4.0
        When: 10L is ingested
        Then: The entry is stored at rate 50.00, amount 500.00
        """
        # Act
        result = await ingest_use_case.execute(command())

        # Assert
        assert result.is_ok()
        assert result.value.id == 101
        assert result.value.rate_per_litre == Decimal("50.00")
        assert result.value.amount == Decimal("500.00")
        assert result.value.milk_type == MilkType.COW
        mock_rate_engine.get_rate.assert_awaited_once_with(MilkType.COW, Decimal("4.0"), Decimal("8.5"))
        mock_uow.commit.assert_awaited_once()

    async def test_missing_readings_use_defaults(self, ingest_use_case, mock_rate_engine):
        mock_rate_engine.get_default_quality = AsyncMock(return_value=(Decimal("3.8"), Decimal("8.2")))

        result = await ingest_use_case.execute(command(fat=None, snf=None))

        assert result.is_ok()
        mock_rate_engine.get_rate.assert_awaited_once_with(MilkType.COW, Decimal("3.8"), Decimal("8.2"))
        assert result.value.fat is None

    async def test_supplied_amount_derives_rate(self, ingest_use_case, mock_rate_engine):
        """Test that a device amount is trusted and the rate derived from it"""
        result = await ingest_use_case.execute(command(quantity_litre=Decimal("5.25"), amount=Decimal("190.31")))

        assert result.value.amount == Decimal("190.31")
        assert result.value.rate_per_litre == Decimal("36.25")
        mock_rate_engine.get_rate.assert_not_called()

    async def test_operator_rate_overrides_cards(self, ingest_use_case, mock_rate_engine):
        result = await ingest_use_case.execute(command(rate_per_litre=Decimal("48.50"), source=EntrySource.MANUAL))

        assert result.value.rate_per_litre == Decimal("48.50")
        assert result.value.amount == Decimal("485.00")
        mock_rate_engine.get_rate.assert_not_called()

    async def test_packet_milk_type_wins_over_customer_default(self, ingest_use_case, mock_rate_engine):
        await ingest_use_case.execute(command(milk_type=MilkType.BUFFALO))

        assert mock_rate_engine.get_rate.await_args.args[0] == MilkType.BUFFALO


@pytest.mark.asyncio
class TestIngestEntryRejections:

    async def test_no_rate_card_is_rate_unavailable(self, ingest_use_case, mock_rate_engine, mock_entry_repo, mock_uow):
        """
        Given: No rate card matches
        When: An entry without amount is ingested
        Then: RATE_UNAVAILABLE, nothing stored
        """
        mock_rate_engine.get_rate = AsyncMock(return_value=Decimal("0"))

        result = await ingest_use_case.execute(command())

        assert result.is_err()
        assert result.error.code == "RATE_UNAVAILABLE"
        assert "Fat: 4.0%" in result.error.message
        mock_entry_repo.create.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_amount_rounding_to_zero_is_rejected(self, ingest_use_case, mock_entry_repo):
        result = await ingest_use_case.execute(command(quantity_litre=Decimal("0.001"), rate_per_litre=Decimal("1.00")))

        assert result.is_err()
        assert result.error.code == "ZERO_AMOUNT_REJECTED"
        mock_entry_repo.create.assert_not_called()

    async def test_zero_supplied_amount_is_rejected(self, ingest_use_case):
        result = await ingest_use_case.execute(command(amount=Decimal("0")))

        assert result.error.code == "ZERO_AMOUNT_REJECTED"

    async def test_unknown_customer(self, ingest_use_case, mock_customer_repo):
        mock_customer_repo.get_by_external_id = AsyncMock(return_value=None)

        result = await ingest_use_case.execute(command(customer_external_id="9999"))

        assert result.error.code == "CUSTOMER_NOT_FOUND"
        assert "9999" in result.error.message

    async def test_inactive_customer(self, ingest_use_case, sample_customer):
        sample_customer.is_active = False

        result = await ingest_use_case.execute(command())

        assert result.error.code == "CUSTOMER_NOT_FOUND"

    async def test_repository_failure_rolls_back(self, ingest_use_case, mock_entry_repo, mock_uow):
        mock_entry_repo.create = AsyncMock(side_effect=Exception("disk full"))

        result = await ingest_use_case.execute(command())

        assert result.error.code == "INGEST_ENTRY_FAILED"
        assert result.error.reason == "disk full"
        mock_uow.rollback.assert_awaited_once()


@pytest.mark.asyncio
class TestIngestEntryEvents:

    async def test_entry_created_published(self, ingest_use_case, mock_event_publisher):
        await ingest_use_case.execute(command())

        assert len(mock_event_publisher.events) == 1
        event = mock_event_publisher.events[0]
        assert isinstance(event, EntryCreated)
        assert event.entry_id == 101
        assert event.customer_external_id == "1042"
        assert event.shift == "M"
        assert event.amount == Decimal("500.00")
        assert event.source == "DEVICE"

    async def test_publisher_failure_keeps_the_entry(self, ingest_use_case, mock_event_publisher):
        mock_event_publisher.publish = MagicMock(side_effect=RuntimeError("bus down"))

        result = await ingest_use_case.execute(command())

        assert result.is_ok()

    async def test_no_event_on_failure(self, ingest_use_case, mock_rate_engine, mock_event_publisher):
        mock_rate_engine.get_rate = AsyncMock(return_value=Decimal("0"))

        await ingest_use_case.execute(command())

        assert mock_event_publisher.events == []
