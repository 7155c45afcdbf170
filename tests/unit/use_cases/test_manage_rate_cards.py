"""Unit tests for rate card management use cases"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.rates import (
    CreateRateCard,
    UpdateRateCard,
    DeactivateRateCard,
    CreateRateCardCommandDTO,
    UpdateRateCardCommandDTO,
)
from src.domain.rate_card import MilkType, RateCard


@pytest.fixture
def mock_rate_card_repo():
    repo = MagicMock()

    async def persist(card):
        card.id = card.id or 1
        return card

    repo.create = AsyncMock(side_effect=persist)
    repo.update = AsyncMock(side_effect=persist)
    return repo


@pytest.fixture
def mock_rate_cache():
    return MagicMock()


@pytest.fixture
def existing_card():
    return RateCard(
        id=5,
        milk_type=MilkType.COW,
        min_fat=Decimal("4.0"),
        max_fat=Decimal("5.0"),
        rate_per_litre=Decimal("50.00"),
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )


@pytest.mark.asyncio
class TestCreateRateCard:

    async def test_creates_card_and_invalidates_cache(self, mock_uow, mock_rate_card_repo, mock_rate_cache):
        """
        Given: A valid band
        When: CreateRateCard is executed
        Then: The card is stored, committed and the cache invalidated
        """
        # Arrange
        use_case = CreateRateCard(mock_uow, mock_rate_card_repo, mock_rate_cache)
        command = CreateRateCardCommandDTO(
            milk_type=MilkType.COW,
            min_fat=Decimal("3.5"),
            max_fat=Decimal("4.0"),
            rate_per_litre=Decimal("45.00"),
        )

        # Act
        result = await use_case.execute(command)

        # Assert
        assert result.is_ok()
        assert result.value.rate_per_litre == Decimal("45.00")
        mock_uow.commit.assert_awaited_once()
        mock_rate_cache.invalidate.assert_called_once()

    async def test_inverted_range_is_rejected(self, mock_uow, mock_rate_card_repo, mock_rate_cache):
        use_case = CreateRateCard(mock_uow, mock_rate_card_repo, mock_rate_cache)
        command = CreateRateCardCommandDTO(
            milk_type=MilkType.COW,
            min_fat=Decimal("5.0"),
            max_fat=Decimal("4.0"),
            rate_per_litre=Decimal("45.00"),
        )

        result = await use_case.execute(command)

        assert result.is_err()
        assert result.error.code == "INVALID_RATE_CARD"
        mock_rate_card_repo.create.assert_not_called()
        mock_rate_cache.invalidate.assert_not_called()


@pytest.mark.asyncio
class TestUpdateRateCard:

    async def test_only_sent_fields_change(self, mock_uow, mock_rate_card_repo, mock_rate_cache, existing_card):
        # Arrange
        mock_rate_card_repo.get_by_id = AsyncMock(return_value=existing_card)
        use_case = UpdateRateCard(mock_uow, mock_rate_card_repo, mock_rate_cache)

        # Act
        result = await use_case.execute(UpdateRateCardCommandDTO(card_id=5, rate_per_litre=Decimal("52.00")))

        # Assert
        assert result.is_ok()
        assert result.value.rate_per_litre == Decimal("52.00")
        assert result.value.min_fat == Decimal("4.0")
        mock_rate_cache.invalidate.assert_called_once()

    async def test_explicit_null_clears_a_bound(self, mock_uow, mock_rate_card_repo, mock_rate_cache, existing_card):
        mock_rate_card_repo.get_by_id = AsyncMock(return_value=existing_card)
        use_case = UpdateRateCard(mock_uow, mock_rate_card_repo, mock_rate_cache)

        result = await use_case.execute(UpdateRateCardCommandDTO(card_id=5, max_fat=None))

        assert result.is_ok()
        assert result.value.max_fat is None

    async def test_clearing_rate_is_rejected_before_any_change(
        self, mock_uow, mock_rate_card_repo, mock_rate_cache, existing_card
    ):
        mock_rate_card_repo.get_by_id = AsyncMock(return_value=existing_card)
        use_case = UpdateRateCard(mock_uow, mock_rate_card_repo, mock_rate_cache)

        result = await use_case.execute(UpdateRateCardCommandDTO(card_id=5, rate_per_litre=None, min_fat=Decimal("1")))

        assert result.is_err()
        assert result.error.code == "INVALID_RATE_CARD"
        assert existing_card.rate_per_litre == Decimal("50.00")
        assert existing_card.min_fat == Decimal("4.0")

    async def test_unknown_card(self, mock_uow, mock_rate_card_repo, mock_rate_cache):
        mock_rate_card_repo.get_by_id = AsyncMock(return_value=None)
        use_case = UpdateRateCard(mock_uow, mock_rate_card_repo, mock_rate_cache)

        result = await use_case.execute(UpdateRateCardCommandDTO(card_id=99, rate_per_litre=Decimal("1")))

        assert result.error.code == "RATE_CARD_NOT_FOUND"


@pytest.mark.asyncio
class TestDeactivateRateCard:

    async def test_deactivates_and_invalidates(self, mock_uow, mock_rate_card_repo, mock_rate_cache, existing_card):
        mock_rate_card_repo.get_by_id = AsyncMock(return_value=existing_card)
        use_case = DeactivateRateCard(mock_uow, mock_rate_card_repo, mock_rate_cache)

        result = await use_case.execute(5)

        assert result.is_ok()
        assert result.value.is_active is False
        mock_rate_cache.invalidate.assert_called_once()
