"""Unit tests for RateEngine

Tests cover:
- Band matching on fat and SNF (half-open ranges)
- No match and failed lookups fail closed at 0
- Cache reuse and invalidation
- Default fat/SNF from settings and configuration
"""

import asyncio
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.adapter.services.rate_cache import InMemoryRateCache
from src.app.use_cases.rates.rate_engine import RateEngine
from src.domain.rate_card import MilkType, RateCard


def card(card_id, milk_type, rate, min_fat=None, max_fat=None, min_snf=None, max_snf=None):
    return RateCard(
        id=card_id,
        milk_type=milk_type,
        min_fat=None if min_fat is None else Decimal(min_fat),
        max_fat=None if max_fat is None else Decimal(max_fat),
        min_snf=None if min_snf is None else Decimal(min_snf),
        max_snf=None if max_snf is None else Decimal(max_snf),
        rate_per_litre=Decimal(rate),
    )


@pytest.fixture
def cow_bands():
    """Cow fat [3.5, 4.0) at 45, [4.0, 5.0) at 50; buffalo unbounded at 60"""
    return [
        card(1, MilkType.COW, "45.00", "3.5", "4.0"),
        card(2, MilkType.COW, "50.00", "4.0", "5.0"),
        card(3, MilkType.BUFFALO, "60.00"),
    ]


@pytest.fixture
def mock_rate_card_repo(cow_bands):
    repo = MagicMock()
    repo.list_active = AsyncMock(return_value=cow_bands)
    return repo


@pytest.fixture
def mock_setting_repo():
    repo = MagicMock()
    repo.get_all = AsyncMock(return_value={})
    return repo


@pytest.fixture
def rate_engine(mock_rate_card_repo, mock_setting_repo):
    return RateEngine(
        rate_card_repo=mock_rate_card_repo,
        setting_repo=mock_setting_repo,
        cache=InMemoryRateCache(ttl_seconds=60),
        lookup_timeout=0.5,
    )


@pytest.mark.asyncio
class TestGetRate:
    """Test band matching"""

    async def test_fat_on_lower_bound_matches_upper_band(self, rate_engine):
        """
        Given: Bands [3.5, 4.0) at 45 and [4.0, 5.0) at 50
        When: Rate for cow milk at fat 4.0 is requested
        Then: 50 is returned (lower bound inclusive, upper exclusive)
        """
        # Act
        rate = await rate_engine.get_rate(MilkType.COW, Decimal("4.0"), Decimal("8.5"))

        # Assert
        assert rate == Decimal("50.00")

    async def test_fat_inside_lower_band(self, rate_engine):
        rate = await rate_engine.get_rate(MilkType.COW, Decimal("3.9"), Decimal("8.5"))

        assert rate == Decimal("45.00")

    async def test_no_band_returns_zero(self, rate_engine):
        rate = await rate_engine.get_rate(MilkType.COW, Decimal("5.0"), Decimal("8.5"))

        assert rate == Decimal("0")

    async def test_other_milk_type_never_matches(self, rate_engine):
        rate = await rate_engine.get_rate(MilkType.MIXED, Decimal("4.2"), Decimal("8.5"))

        assert rate == Decimal("0")

    async def test_unbounded_band_matches_missing_reading(self, rate_engine):
        rate = await rate_engine.get_rate(MilkType.BUFFALO, None, None)

        assert rate == Decimal("60.00")

    async def test_missing_reading_does_not_match_bounded_band(self, rate_engine):
        rate = await rate_engine.get_rate(MilkType.COW, None, Decimal("8.5"))

        assert rate == Decimal("0")

    async def test_snf_range_is_checked(self, mock_setting_repo):
        repo = MagicMock()
        repo.list_active = AsyncMock(return_value=[card(1, MilkType.COW, "40.00", min_snf="8.0", max_snf="9.0")])
        engine = RateEngine(repo, mock_setting_repo, InMemoryRateCache())

        assert await engine.get_rate(MilkType.COW, Decimal("4.0"), Decimal("8.5")) == Decimal("40.00")
        assert await engine.get_rate(MilkType.COW, Decimal("4.0"), Decimal("9.0")) == Decimal("0")


@pytest.mark.asyncio
class TestFailClosed:
    """A failed lookup prices nothing"""

    async def test_timeout_returns_zero(self, mock_setting_repo):
        # Arrange
        async def hang():
            await asyncio.sleep(5)

        repo = MagicMock()
        repo.list_active = AsyncMock(side_effect=hang)
        engine = RateEngine(repo, mock_setting_repo, InMemoryRateCache(), lookup_timeout=0.01)

        # Act
        rate = await engine.get_rate(MilkType.COW, Decimal("4.0"), Decimal("8.5"))

        # Assert
        assert rate == Decimal("0")

    async def test_repository_error_returns_zero(self, mock_setting_repo):
        repo = MagicMock()
        repo.list_active = AsyncMock(side_effect=Exception("database unavailable"))
        engine = RateEngine(repo, mock_setting_repo, InMemoryRateCache())

        rate = await engine.get_rate(MilkType.COW, Decimal("4.0"), Decimal("8.5"))

        assert rate == Decimal("0")


@pytest.mark.asyncio
class TestCaching:

    async def test_cards_loaded_once_per_ttl(self, rate_engine, mock_rate_card_repo):
        await rate_engine.get_rate(MilkType.COW, Decimal("4.0"), Decimal("8.5"))
        await rate_engine.get_rate(MilkType.COW, Decimal("3.6"), Decimal("8.5"))

        mock_rate_card_repo.list_active.assert_awaited_once()

    async def test_invalidation_sees_new_cards(self, rate_engine, mock_rate_card_repo):
        """
        Given: Rates were cached
        When: A card changes and the cache is invalidated
        Then: The next lookup uses the new card
        """
        # Arrange
        await rate_engine.get_rate(MilkType.COW, Decimal("4.0"), Decimal("8.5"))
        mock_rate_card_repo.list_active = AsyncMock(return_value=[card(2, MilkType.COW, "52.00", "4.0", "5.0")])

        # Act
        rate_engine.invalidate_rate_cache()
        rate = await rate_engine.get_rate(MilkType.COW, Decimal("4.0"), Decimal("8.5"))

        # Assert
        assert rate == Decimal("52.00")


@pytest.mark.asyncio
class TestDefaultQuality:

    async def test_configured_defaults_without_settings(self, rate_engine):
        assert await rate_engine.get_default_quality() == (Decimal("4.0"), Decimal("8.5"))

    async def test_settings_override_configuration(self, rate_engine, mock_setting_repo):
        mock_setting_repo.get_all = AsyncMock(return_value={"default_fat": "3.8", "default_snf": "8.2"})

        assert await rate_engine.get_default_quality() == (Decimal("3.8"), Decimal("8.2"))

    async def test_non_numeric_setting_falls_back(self, rate_engine, mock_setting_repo):
        mock_setting_repo.get_all = AsyncMock(return_value={"default_fat": "high"})

        fat, snf = await rate_engine.get_default_quality()

        assert fat == Decimal("4.0")
        assert snf == Decimal("8.5")


class TestCalculateAmount:

    def test_uses_money_rounding(self, rate_engine):
        assert rate_engine.calculate_amount(Decimal("5.25"), Decimal("36.25")) == Decimal("190.31")
