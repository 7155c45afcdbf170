"""Rate API Routes

Rate card administration, settings and rate quotes.
"""

from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.rate_request import UpdateRateCardRequestSchema
from src.app.use_cases.rates import (
    CreateRateCard,
    UpdateRateCard,
    DeactivateRateCard,
    ListRateCards,
    GetSettings,
    UpdateSettings,
    LookupRate,
    CreateRateCardCommandDTO,
    UpdateRateCardCommandDTO,
    RateCardDTO,
    ListRateCardsResponseDTO,
    RateQuoteCommandDTO,
    RateQuoteResponseDTO,
    SettingsResponseDTO,
    UpdateSettingsCommandDTO,
)
from src.adapter.repositories.rate_card_repository import SqlAlchemyRateCardRepository
from src.adapter.repositories.setting_repository import SqlAlchemySettingRepository
from src.adapter.services.rate_cache import InMemoryRateCache
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.rate_card import MilkType
from src.depends import get_session, get_rate_cache, build_rate_engine
from src.api.error import raise_for_error

router = APIRouter(prefix="/rates", tags=["Rates"])

INVALID_CARD_RESPONSE = {
    400: {
        "description": "Invalid band",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INVALID_RATE_CARD",
                        "message": "min_fat must be less than max_fat"
                    }
                }
            }
        }
    }
}


@router.get("/cards", response_model=ListRateCardsResponseDTO)
async def list_rate_cards(
    include_inactive: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
):
    result = await ListRateCards(SqlAlchemyRateCardRepository(session)).execute(include_inactive)
    return result.value


@router.post(
    "/cards",
    response_model=RateCardDTO,
    status_code=status.HTTP_201_CREATED,
    responses=INVALID_CARD_RESPONSE,
)
async def create_rate_card(
    request: CreateRateCardCommandDTO,
    session: AsyncSession = Depends(get_session),
    rate_cache: InMemoryRateCache = Depends(get_rate_cache),
):
    """Add a price band. Lookups see it immediately."""
    use_case = CreateRateCard(SqlAlchemyUnitOfWork(session), SqlAlchemyRateCardRepository(session), rate_cache)
    result = await use_case.execute(request)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.patch("/cards/{card_id}", response_model=RateCardDTO, responses=INVALID_CARD_RESPONSE)
async def update_rate_card(
    card_id: int,
    request: UpdateRateCardRequestSchema,
    session: AsyncSession = Depends(get_session),
    rate_cache: InMemoryRateCache = Depends(get_rate_cache),
):
    """Partially update a band. Send null to clear a bound."""
    command = UpdateRateCardCommandDTO(card_id=card_id, **request.model_dump(exclude_unset=True))

    use_case = UpdateRateCard(SqlAlchemyUnitOfWork(session), SqlAlchemyRateCardRepository(session), rate_cache)
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete("/cards/{card_id}", response_model=RateCardDTO)
async def deactivate_rate_card(
    card_id: int,
    session: AsyncSession = Depends(get_session),
    rate_cache: InMemoryRateCache = Depends(get_rate_cache),
):
    """Deactivate a band (soft delete)."""
    use_case = DeactivateRateCard(SqlAlchemyUnitOfWork(session), SqlAlchemyRateCardRepository(session), rate_cache)
    result = await use_case.execute(card_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/lookup", response_model=RateQuoteResponseDTO)
async def lookup_rate(
    milk_type: MilkType = Query(...),
    fat: Optional[Decimal] = Query(default=None, ge=0),
    snf: Optional[Decimal] = Query(default=None, ge=0),
    quantity_litre: Optional[Decimal] = Query(default=None, gt=0),
    session: AsyncSession = Depends(get_session),
    rate_cache: InMemoryRateCache = Depends(get_rate_cache),
):
    """
    Quote the rate for a reading.

    `matched` is false and `rate_per_litre` is 0 when no active card matches.
    """
    command = RateQuoteCommandDTO(milk_type=milk_type, fat=fat, snf=snf, quantity_litre=quantity_litre)
    result = await LookupRate(build_rate_engine(session, rate_cache)).execute(command)
    return result.value


@router.get("/settings", response_model=SettingsResponseDTO)
async def get_settings(session: AsyncSession = Depends(get_session)):
    result = await GetSettings(SqlAlchemySettingRepository(session)).execute()
    return result.value


@router.put("/settings", response_model=SettingsResponseDTO)
async def update_settings(
    request: UpdateSettingsCommandDTO,
    session: AsyncSession = Depends(get_session),
    rate_cache: InMemoryRateCache = Depends(get_rate_cache),
):
    use_case = UpdateSettings(SqlAlchemyUnitOfWork(session), SqlAlchemySettingRepository(session), rate_cache)
    result = await use_case.execute(request)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
