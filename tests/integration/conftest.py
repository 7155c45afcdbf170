import pytest_asyncio
from datetime import date
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401
from src.depends import get_session
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.advance import Advance, AdvanceStatus
from src.domain.customer import Customer
from src.domain.rate_card import MilkType, RateCard


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create a throwaway SQLite database per test"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'dairy_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def uow(db_session):
    return SqlAlchemyUnitOfWork(db_session)


@pytest_asyncio.fixture
async def customer(db_session):
    customer = Customer(external_id="1042", name="Ramesh Patil", default_milk_type=MilkType.COW)
    db_session.add(customer)
    await db_session.commit()
    await db_session.refresh(customer)
    return customer


@pytest_asyncio.fixture
async def cow_rate_cards(db_session):
    """Two cow bands: fat [3.5, 4.0) at 45 and fat [4.0, 5.0) at 50"""
    cards = [
        RateCard(milk_type=MilkType.COW, min_fat=Decimal("3.5"), max_fat=Decimal("4.0"), rate_per_litre=Decimal("45.00")),
        RateCard(milk_type=MilkType.COW, min_fat=Decimal("4.0"), max_fat=Decimal("5.0"), rate_per_litre=Decimal("50.00")),
    ]
    for card in cards:
        db_session.add(card)
    await db_session.commit()
    return cards


@pytest_asyncio.fixture
async def two_advances(db_session, customer):
    """Advances of 100 then 200, created in that order"""
    advances = []
    for amount in ("100.00", "200.00"):
        advance = Advance(
            customer_id=customer.id,
            advance_date=date(2024, 6, 1),
            amount=Decimal(amount),
            utilized_amount=Decimal("0.00"),
            status=AdvanceStatus.ACTIVE,
        )
        db_session.add(advance)
        await db_session.commit()
        await db_session.refresh(advance)
        advances.append(advance)
    return advances


@pytest_asyncio.fixture
async def client(db_session):
    """Create test client with database session override"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(autouse=True)
async def fresh_rate_cache():
    """The process-wide rate cache must not carry bands between test databases"""
    from src.depends import rate_cache

    rate_cache.invalidate()
    yield
    rate_cache.invalidate()
