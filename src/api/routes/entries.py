"""Milk Entry API Routes

FastAPI routes for recording and correcting milk entries.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.entry_request import CreateEntryRequestSchema, CorrectEntryRequestSchema
from src.app.use_cases.entries import (
    IngestEntry,
    CorrectEntry,
    ListEntries,
    IngestEntryCommandDTO,
    CorrectEntryCommandDTO,
    EntryResponseDTO,
    ListEntriesResponseDTO,
)
from src.adapter.repositories.customer_repository import SqlAlchemyCustomerRepository
from src.adapter.repositories.milk_entry_repository import SqlAlchemyMilkEntryRepository
from src.adapter.services.event_bus import InMemoryEventBus
from src.adapter.services.rate_cache import InMemoryRateCache
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.milk_entry import EntrySource, Shift
from src.depends import get_session, get_rate_cache, get_event_bus, build_rate_engine
from src.api.error import raise_for_error

router = APIRouter(tags=["Entries"])


@router.post(
    "/entries",
    response_model=EntryResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        422: {
            "description": "No rate card matches and no amount/rate supplied",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "RATE_UNAVAILABLE",
                            "message": "No rate card found for COW milk with Fat: 4.0%, SNF: 8.5%"
                        }
                    }
                }
            }
        },
        404: {
            "description": "Customer not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CUSTOMER_NOT_FOUND",
                            "message": "Customer not found: 1042"
                        }
                    }
                }
            }
        },
        400: {
            "description": "Validation error",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "VALIDATION_ERROR",
                            "message": "quantity_litre: Input should be greater than 0"
                        }
                    }
                }
            }
        }
    }
)
async def create_entry(
    request: CreateEntryRequestSchema,
    session: AsyncSession = Depends(get_session),
    rate_cache: InMemoryRateCache = Depends(get_rate_cache),
    event_bus: InMemoryEventBus = Depends(get_event_bus),
):
    """
    Record a manual milk entry.

    Pricing precedence:
    - `amount` given: stored as-is, rate derived as amount / quantity
    - `rate_per_litre` given: amount = quantity x rate
    - otherwise the active rate cards are used (missing fat/snf take the
      configured defaults)

    **Returns:**
    - 201: Entry stored
    - 404: Unknown or inactive customer
    - 422: No rate card matches, or amount is not positive
    """
    command = IngestEntryCommandDTO(
        **request.model_dump(exclude_unset=True),
        source=EntrySource.MANUAL,
    )

    use_case = IngestEntry(
        uow=SqlAlchemyUnitOfWork(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        entry_repo=SqlAlchemyMilkEntryRepository(session),
        rate_engine=build_rate_engine(session, rate_cache),
        event_publisher=event_bus,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.patch("/entries/{entry_id}", response_model=EntryResponseDTO)
async def correct_entry(
    entry_id: int,
    request: CorrectEntryRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Correct a stored entry.

    Only the fields present in the body change. Changing quantity or rate
    recomputes the amount; sending an amount re-derives the rate.
    """
    command = CorrectEntryCommandDTO(entry_id=entry_id, **request.model_dump(exclude_unset=True))

    use_case = CorrectEntry(SqlAlchemyUnitOfWork(session), SqlAlchemyMilkEntryRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/customers/{customer_id}/entries", response_model=ListEntriesResponseDTO)
async def list_entries(
    customer_id: int,
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    shift: Optional[Shift] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    use_case = ListEntries(SqlAlchemyCustomerRepository(session), SqlAlchemyMilkEntryRepository(session))
    result = await use_case.execute(customer_id, date_from, date_to, shift)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
