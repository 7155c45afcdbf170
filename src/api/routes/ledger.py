"""Ledger API Routes

FastAPI routes for statements, payments and advances, plus listing and
correcting recorded payments and advances.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.ledger_request import (
    ApplyPaymentRequestSchema,
    CreateAdvanceRequestSchema,
    CorrectPaymentRequestSchema,
    UpdateAdvanceRequestSchema,
)
from src.app.use_cases.ledger import (
    GetStatement,
    ApplyPayment,
    CreateAdvance,
    GetAdvanceBalance,
    ListPayments,
    CorrectPayment,
    ListAdvances,
    UpdateAdvance,
    ApplyPaymentCommandDTO,
    ApplyPaymentResponseDTO,
    CreateAdvanceCommandDTO,
    AdvanceDTO,
    AdvanceBalanceResponseDTO,
    StatementResponseDTO,
    PaymentDTO,
    ListPaymentsResponseDTO,
    CorrectPaymentCommandDTO,
    ListAdvancesResponseDTO,
    UpdateAdvanceCommandDTO,
)
from src.adapter.repositories.customer_repository import SqlAlchemyCustomerRepository
from src.adapter.repositories.milk_entry_repository import SqlAlchemyMilkEntryRepository
from src.adapter.repositories.payment_repository import SqlAlchemyPaymentRepository
from src.adapter.repositories.advance_repository import SqlAlchemyAdvanceRepository
from src.adapter.repositories.advance_utilization_repository import SqlAlchemyAdvanceUtilizationRepository
from src.adapter.services.allocation_lock import InProcessAllocationLock
from src.adapter.services.event_bus import InMemoryEventBus
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.advance import AdvanceStatus
from src.depends import get_session, get_allocation_lock, get_event_bus
from src.api.error import raise_for_error

router = APIRouter(tags=["Ledger"])


@router.get(
    "/customers/{customer_id}/statement",
    response_model=StatementResponseDTO,
    responses={
        404: {
            "description": "Customer not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CUSTOMER_NOT_FOUND",
                            "message": "Customer 99 not found"
                        }
                    }
                }
            }
        },
        504: {
            "description": "Statement took too long",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "STATEMENT_TIMEOUT",
                            "message": "Statement took too long to build"
                        }
                    }
                }
            }
        }
    }
)
async def get_statement(
    customer_id: int,
    date_from: Optional[date] = Query(default=None, description="Inclusive; applies to entries and payments"),
    date_to: Optional[date] = Query(default=None, description="Inclusive; applies to entries and payments"),
    session: AsyncSession = Depends(get_session),
):
    """
    Customer passbook with running balance.

    Milk entries are credits, payments and outstanding advances are debits.
    `closing_balance` = milk amount - payments - outstanding advances.
    """
    use_case = GetStatement(
        customer_repo=SqlAlchemyCustomerRepository(session),
        entry_repo=SqlAlchemyMilkEntryRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        advance_repo=SqlAlchemyAdvanceRepository(session),
        timeout=ApplicationConfig.REQUEST_TIMEOUT_SECONDS,
    )
    result = await use_case.execute(customer_id, date_from, date_to)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/customers/{customer_id}/payments",
    response_model=ApplyPaymentResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "description": "Advances changed concurrently",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "ALLOCATION_CONFLICT",
                            "message": "Advances changed concurrently, payment not applied"
                        }
                    }
                }
            }
        }
    }
)
async def apply_payment(
    customer_id: int,
    request: ApplyPaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
    allocation_lock: InProcessAllocationLock = Depends(get_allocation_lock),
    event_bus: InMemoryEventBus = Depends(get_event_bus),
):
    """
    Pay a farmer.

    With `use_advance`, outstanding advances are recovered first, oldest
    first. Only the remainder is recorded as a payment; when advances absorb
    everything, `payment` is null.
    """
    command = ApplyPaymentCommandDTO(customer_id=customer_id, **request.model_dump())

    use_case = ApplyPayment(
        uow=SqlAlchemyUnitOfWork(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
        advance_repo=SqlAlchemyAdvanceRepository(session),
        utilization_repo=SqlAlchemyAdvanceUtilizationRepository(session),
        allocation_lock=allocation_lock,
        event_publisher=event_bus,
        max_retries=ApplicationConfig.ALLOCATION_MAX_RETRIES,
        retry_backoff=ApplicationConfig.ALLOCATION_RETRY_BACKOFF_SECONDS,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/customers/{customer_id}/advances", response_model=AdvanceDTO, status_code=status.HTTP_201_CREATED)
async def create_advance(
    customer_id: int,
    request: CreateAdvanceRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    command = CreateAdvanceCommandDTO(customer_id=customer_id, **request.model_dump())

    use_case = CreateAdvance(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyAdvanceRepository(session),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/customers/{customer_id}/advance-balance", response_model=AdvanceBalanceResponseDTO)
async def get_advance_balance(customer_id: int, session: AsyncSession = Depends(get_session)):
    use_case = GetAdvanceBalance(SqlAlchemyCustomerRepository(session), SqlAlchemyAdvanceRepository(session))
    result = await use_case.execute(customer_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/customers/{customer_id}/payments", response_model=ListPaymentsResponseDTO)
async def list_customer_payments(
    customer_id: int,
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    use_case = ListPayments(SqlAlchemyPaymentRepository(session), SqlAlchemyCustomerRepository(session))
    result = await use_case.execute(customer_id, date_from, date_to)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/payments", response_model=ListPaymentsResponseDTO)
async def list_payments(
    customer_id: Optional[int] = Query(default=None),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    """All payments, newest first."""
    result = await ListPayments(SqlAlchemyPaymentRepository(session)).execute(customer_id, date_from, date_to)
    return result.value


@router.patch("/payments/{payment_id}", response_model=PaymentDTO)
async def correct_payment(
    payment_id: int,
    request: CorrectPaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Correct a recorded payment.

    Only the fields present in the body change. Advance recovery made when
    the payment was applied is left as it was.
    """
    command = CorrectPaymentCommandDTO(payment_id=payment_id, **request.model_dump(exclude_unset=True))

    use_case = CorrectPayment(SqlAlchemyUnitOfWork(session), SqlAlchemyPaymentRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/customers/{customer_id}/advances", response_model=ListAdvancesResponseDTO)
async def list_customer_advances(
    customer_id: int,
    advance_status: Optional[AdvanceStatus] = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_session),
):
    use_case = ListAdvances(SqlAlchemyAdvanceRepository(session), SqlAlchemyCustomerRepository(session))
    result = await use_case.execute(customer_id, advance_status)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/advances", response_model=ListAdvancesResponseDTO)
async def list_advances(
    customer_id: Optional[int] = Query(default=None),
    advance_status: Optional[AdvanceStatus] = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_session),
):
    """All advances, newest first."""
    result = await ListAdvances(SqlAlchemyAdvanceRepository(session)).execute(customer_id, advance_status)
    return result.value


@router.patch(
    "/advances/{advance_id}",
    response_model=AdvanceDTO,
    responses={
        400: {
            "description": "utilized_amount outside 0..amount",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_ADVANCE",
                            "message": "utilized_amount must be between 0 and amount"
                        }
                    }
                }
            }
        }
    }
)
async def update_advance(
    advance_id: int,
    request: UpdateAdvanceRequestSchema,
    session: AsyncSession = Depends(get_session),
    allocation_lock: InProcessAllocationLock = Depends(get_allocation_lock),
):
    """
    Correct an advance.

    `status` follows `utilized_amount`: utilized when it equals `amount`,
    active otherwise.
    """
    command = UpdateAdvanceCommandDTO(advance_id=advance_id, **request.model_dump(exclude_unset=True))

    use_case = UpdateAdvance(SqlAlchemyUnitOfWork(session), SqlAlchemyAdvanceRepository(session), allocation_lock)
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
