"""Rate Engine

Tiered price-per-litre lookup over active rate cards, backed by a TTL cache
shared by the whole process.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional, Tuple
from src.app.repositories.rate_card_repository import RateCardRepository
from src.app.repositories.setting_repository import SettingRepository
from src.app.services.rate_cache import RateCache
from src.domain.money import ZERO, calculate_amount
from src.domain.rate_card import MilkType, RateCard

logger = logging.getLogger(__name__)

RATES_CACHE_KEY = "rates"


@dataclass(frozen=True)
class RateBand:
    """Immutable copy of an active RateCard, safe to share across sessions"""

    card_id: int
    milk_type: MilkType
    min_fat: Optional[Decimal]
    max_fat: Optional[Decimal]
    min_snf: Optional[Decimal]
    max_snf: Optional[Decimal]
    rate_per_litre: Decimal

    @classmethod
    def from_card(cls, card: RateCard) -> "RateBand":
        return cls(
            card_id=card.id,
            milk_type=MilkType(card.milk_type),
            min_fat=card.min_fat,
            max_fat=card.max_fat,
            min_snf=card.min_snf,
            max_snf=card.max_snf,
            rate_per_litre=card.rate_per_litre,
        )

    def matches(self, milk_type: MilkType, fat: Decimal, snf: Decimal) -> bool:
        return (
            self.milk_type == milk_type
            and _in_range(fat, self.min_fat, self.max_fat)
            and _in_range(snf, self.min_snf, self.max_snf)
        )


@dataclass(frozen=True)
class RateSnapshot:
    bands: Tuple[RateBand, ...]
    settings: Mapping[str, str]


def _in_range(value: Optional[Decimal], lower: Optional[Decimal], upper: Optional[Decimal]) -> bool:
    # [lower, upper); a missing bound is unbounded, a missing value only fits unbounded ranges
    if value is None:
        return lower is None and upper is None
    if lower is not None and value < lower:
        return False
    if upper is not None and value >= upper:
        return False
    return True


class RateEngine:
    """
    Rate Engine - price lookup for milk entries

    Business Rules:
    1. First active card of the milk type whose fat and SNF ranges contain
       the reading wins (cards ordered by milk_type, min_fat ascending)
    2. No match returns 0; the caller decides whether that is fatal
    3. A lookup that times out or fails returns 0 (fail closed, never free)
    4. Rate cards and settings are cached for the cache TTL and reloaded
       immediately after invalidate_rate_cache()
    """

    def __init__(
        self,
        rate_card_repo: RateCardRepository,
        setting_repo: SettingRepository,
        cache: RateCache,
        lookup_timeout: float = 2.0,
        default_fat: Decimal = Decimal("4.0"),
        default_snf: Decimal = Decimal("8.5"),
    ):
        self.rate_card_repo = rate_card_repo
        self.setting_repo = setting_repo
        self.cache = cache
        self.lookup_timeout = lookup_timeout
        self.default_fat = Decimal(str(default_fat))
        self.default_snf = Decimal(str(default_snf))

    async def _load_snapshot(self) -> RateSnapshot:
        cards = await self.rate_card_repo.list_active()
        settings = await self.setting_repo.get_all()
        logger.info(f"Loaded {len(cards)} active rate cards and {len(settings)} settings")
        return RateSnapshot(
            bands=tuple(RateBand.from_card(card) for card in cards),
            settings=dict(settings),
        )

    async def snapshot(self) -> RateSnapshot:
        """
        Cached rate cards and settings, bounded by lookup_timeout

        Raises:
            asyncio.TimeoutError: If loading takes longer than lookup_timeout
        """
        return await asyncio.wait_for(
            self.cache.get_or_load(RATES_CACHE_KEY, self._load_snapshot),
            timeout=self.lookup_timeout,
        )

    async def get_rate(self, milk_type: MilkType, fat: Optional[Decimal], snf: Optional[Decimal]) -> Decimal:
        """
        Look up the price per litre

        Args:
            milk_type: Milk type of the pour
            fat: Fat reading
            snf: SNF reading

        Returns:
            Rate per litre, or Decimal 0 when nothing matches or the
            lookup failed
        """
        try:
            snapshot = await self.snapshot()
        except asyncio.TimeoutError:
            logger.error(f"Rate lookup timed out after {self.lookup_timeout}s, failing closed")
            return ZERO
        except Exception as e:
            logger.error(f"Rate lookup failed, failing closed: {e}")
            return ZERO

        for band in snapshot.bands:
            if band.matches(milk_type, fat, snf):
                return band.rate_per_litre

        logger.warning(f"No rate card for milk_type={milk_type.value} fat={fat} snf={snf}")
        return ZERO

    def calculate_amount(self, quantity: Decimal, rate: Decimal) -> Decimal:
        return calculate_amount(quantity, rate)

    async def get_default_quality(self) -> Tuple[Decimal, Decimal]:
        """
        Fat and SNF to assume when a reading is missing

        Settings default_fat/default_snf win over configuration.

        Returns:
            (default_fat, default_snf)
        """
        try:
            settings = (await self.snapshot()).settings
        except Exception as e:
            logger.error(f"Could not load settings, using configured defaults: {e}")
            settings = {}

        return (
            _setting_decimal(settings, "default_fat", self.default_fat),
            _setting_decimal(settings, "default_snf", self.default_snf),
        )

    def invalidate_rate_cache(self) -> None:
        self.cache.invalidate()


def _setting_decimal(settings: Mapping[str, str], key: str, fallback: Decimal) -> Decimal:
    value = settings.get(key)
    if value is None:
        return fallback
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning(f"Setting {key}={value!r} is not a number, using {fallback}")
        return fallback
