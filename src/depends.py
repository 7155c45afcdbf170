from decimal import Decimal
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories.rate_card_repository import SqlAlchemyRateCardRepository
from src.adapter.repositories.setting_repository import SqlAlchemySettingRepository
from src.adapter.services.allocation_lock import InProcessAllocationLock
from src.adapter.services.event_bus import InMemoryEventBus
from src.adapter.services.rate_cache import InMemoryRateCache
from src.app.services.rate_cache import RateCache
from src.app.use_cases.rates.rate_engine import RateEngine

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Process-wide collaborators; one instance each per process
rate_cache = InMemoryRateCache(ttl_seconds=ApplicationConfig.RATE_CACHE_TTL_SECONDS)
event_bus = InMemoryEventBus(queue_size=ApplicationConfig.EVENT_QUEUE_SIZE)
allocation_lock = InProcessAllocationLock()


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def get_rate_cache() -> InMemoryRateCache:
    return rate_cache


def get_event_bus() -> InMemoryEventBus:
    return event_bus


def get_allocation_lock() -> InProcessAllocationLock:
    return allocation_lock


def rate_engine_options() -> dict:
    return dict(
        lookup_timeout=ApplicationConfig.RATE_LOOKUP_TIMEOUT_SECONDS,
        default_fat=Decimal(ApplicationConfig.DEFAULT_FAT),
        default_snf=Decimal(ApplicationConfig.DEFAULT_SNF),
    )


def build_rate_engine(session: AsyncSession, cache: RateCache) -> RateEngine:
    """Rate engine bound to a request session and the shared cache"""
    return RateEngine(
        rate_card_repo=SqlAlchemyRateCardRepository(session),
        setting_repo=SqlAlchemySettingRepository(session),
        cache=cache,
        **rate_engine_options(),
    )
