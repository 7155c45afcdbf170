"""Rate Card Management Use Cases

Create, update, deactivate and list rate cards. Every write invalidates the
rate cache so the next lookup in this process sees it.
"""

from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.rate_cache import RateCache
from src.app.repositories.rate_card_repository import RateCardRepository
from src.domain.rate_card import RateCard
from .dtos import (
    CreateRateCardCommandDTO,
    UpdateRateCardCommandDTO,
    RateCardDTO,
    ListRateCardsResponseDTO,
)

NULLABLE_FIELDS = {"min_fat", "max_fat", "min_snf", "max_snf", "effective_from"}
REQUIRED_FIELDS = {"milk_type", "rate_per_litre", "is_active"}


def to_rate_card_dto(card: RateCard) -> RateCardDTO:
    return RateCardDTO(
        id=card.id,
        milk_type=card.milk_type,
        min_fat=card.min_fat,
        max_fat=card.max_fat,
        min_snf=card.min_snf,
        max_snf=card.max_snf,
        rate_per_litre=card.rate_per_litre,
        effective_from=card.effective_from,
        is_active=card.is_active,
        created_at=card.created_at,
        updated_at=card.updated_at,
    )


def validate_bounds(card) -> Optional[Error]:
    """Both bounds present means min must be below max"""
    for name, lower, upper in (
        ("fat", card.min_fat, card.max_fat),
        ("snf", card.min_snf, card.max_snf),
    ):
        if lower is not None and upper is not None and lower >= upper:
            return Error(
                code="INVALID_RATE_CARD",
                message=f"min_{name} must be less than max_{name}",
                reason=f"min_{name}={lower}, max_{name}={upper}",
            )
    return None


class CreateRateCard:
    """
    Use Case: Add a price band

    Business Rules:
    1. rate_per_litre > 0
    2. min < max when both bounds of a range are given
    3. Cache invalidated after commit
    """

    def __init__(self, uow: UnitOfWork, rate_card_repo: RateCardRepository, rate_cache: RateCache):
        self.uow = uow
        self.rate_card_repo = rate_card_repo
        self.rate_cache = rate_cache

    async def execute(self, command: CreateRateCardCommandDTO) -> Result[RateCardDTO]:
        try:
            # Step 1: Validate ranges
            error = validate_bounds(command)
            if error:
                return Return.err(error)

            # Step 2: Persist
            card = await self.rate_card_repo.create(
                RateCard(
                    milk_type=command.milk_type,
                    min_fat=command.min_fat,
                    max_fat=command.max_fat,
                    min_snf=command.min_snf,
                    max_snf=command.max_snf,
                    rate_per_litre=command.rate_per_litre,
                    effective_from=command.effective_from,
                    is_active=command.is_active,
                )
            )
            await self.uow.commit()

            # Step 3: Make the new band visible to lookups
            self.rate_cache.invalidate()

            return Return.ok(to_rate_card_dto(card))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_RATE_CARD_FAILED",
                    message="Failed to create rate card",
                    reason=str(e),
                )
            )


class UpdateRateCard:
    """
    Use Case: Partially update a price band

    Merge semantics per field: absent = unchanged, explicit null = cleared
    (bounds and effective_from only), value = set.
    """

    def __init__(self, uow: UnitOfWork, rate_card_repo: RateCardRepository, rate_cache: RateCache):
        self.uow = uow
        self.rate_card_repo = rate_card_repo
        self.rate_cache = rate_cache

    async def execute(self, command: UpdateRateCardCommandDTO) -> Result[RateCardDTO]:
        try:
            # Step 1: Load the card
            card = await self.rate_card_repo.get_by_id(command.card_id)
            if not card:
                return Return.err(
                    Error(
                        code="RATE_CARD_NOT_FOUND",
                        message=f"Rate card {command.card_id} not found",
                    )
                )

            # Step 2: Apply only the fields the caller sent
            changes = {
                name: getattr(command, name)
                for name in command.model_fields_set
                if name in NULLABLE_FIELDS | REQUIRED_FIELDS
            }
            cleared = sorted(name for name, value in changes.items() if value is None and name in REQUIRED_FIELDS)
            if cleared:
                return Return.err(
                    Error(
                        code="INVALID_RATE_CARD",
                        message=f"{', '.join(cleared)} cannot be cleared",
                    )
                )
            for name, value in changes.items():
                setattr(card, name, value)

            # Step 3: Validate the merged card
            error = validate_bounds(card)
            if error:
                await self.uow.rollback()
                return Return.err(error)

            # Step 4: Persist and invalidate
            card = await self.rate_card_repo.update(card)
            await self.uow.commit()
            self.rate_cache.invalidate()

            return Return.ok(to_rate_card_dto(card))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_RATE_CARD_FAILED",
                    message="Failed to update rate card",
                    reason=str(e),
                )
            )


class DeactivateRateCard:
    """Use Case: Soft-delete a price band (is_active = False)"""

    def __init__(self, uow: UnitOfWork, rate_card_repo: RateCardRepository, rate_cache: RateCache):
        self.uow = uow
        self.rate_card_repo = rate_card_repo
        self.rate_cache = rate_cache

    async def execute(self, card_id: int) -> Result[RateCardDTO]:
        try:
            card = await self.rate_card_repo.get_by_id(card_id)
            if not card:
                return Return.err(
                    Error(
                        code="RATE_CARD_NOT_FOUND",
                        message=f"Rate card {card_id} not found",
                    )
                )

            card.is_active = False
            card = await self.rate_card_repo.update(card)
            await self.uow.commit()
            self.rate_cache.invalidate()

            return Return.ok(to_rate_card_dto(card))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DEACTIVATE_RATE_CARD_FAILED",
                    message="Failed to deactivate rate card",
                    reason=str(e),
                )
            )


class ListRateCards:
    """Use Case: List rate cards in match order"""

    def __init__(self, rate_card_repo: RateCardRepository):
        self.rate_card_repo = rate_card_repo

    async def execute(self, include_inactive: bool = False) -> Result[ListRateCardsResponseDTO]:
        cards = await self.rate_card_repo.list_all(include_inactive=include_inactive)
        dtos = [to_rate_card_dto(card) for card in cards]
        return Return.ok(ListRateCardsResponseDTO(rate_cards=dtos, total=len(dtos)))
