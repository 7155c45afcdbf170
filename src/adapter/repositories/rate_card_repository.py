"""SQLAlchemy implementation of RateCardRepository

Returns cards in match order so the rate engine can take the first hit.
"""

from datetime import datetime
from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.rate_card_repository import RateCardRepository
from src.domain.rate_card import RateCard


class SqlAlchemyRateCardRepository(RateCardRepository):
    """
    SQLAlchemy implementation of RateCardRepository

    Features:
    - Deterministic match order (milk_type, min_fat NULLS FIRST, id)
    - Soft delete through is_active
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _ordered(self, stmt):
        return stmt.order_by(
            RateCard.milk_type,
            RateCard.min_fat.asc().nulls_first(),
            RateCard.id,
        )

    async def list_active(self) -> List[RateCard]:
        """
        Retrieve active cards in match order

        Returns:
            Active cards ordered by milk_type, min_fat ascending, id
        """
        stmt = self._ordered(select(RateCard).where(RateCard.is_active == True))  # noqa: E712
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self, include_inactive: bool = False) -> List[RateCard]:
        stmt = select(RateCard)
        if not include_inactive:
            stmt = stmt.where(RateCard.is_active == True)  # noqa: E712
        result = await self.session.execute(self._ordered(stmt))
        return list(result.scalars().all())

    async def get_by_id(self, card_id: int) -> Optional[RateCard]:
        stmt = select(RateCard).where(RateCard.id == card_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, card: RateCard) -> RateCard:
        self.session.add(card)
        await self.session.flush()
        await self.session.refresh(card)
        return card

    async def update(self, card: RateCard) -> RateCard:
        """
        Persist changes to an existing card and bump updated_at

        Args:
            card: Modified RateCard

        Returns:
            Refreshed RateCard
        """
        card.updated_at = datetime.utcnow()
        self.session.add(card)
        await self.session.flush()
        await self.session.refresh(card)
        return card
