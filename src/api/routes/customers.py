"""Customer API Routes"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.customer_request import UpdateCustomerRequestSchema
from src.app.use_cases.customers import (
    CreateCustomer,
    GetCustomer,
    UpdateCustomer,
    ListCustomers,
    CreateCustomerCommandDTO,
    UpdateCustomerCommandDTO,
    CustomerDTO,
    ListCustomersResponseDTO,
)
from src.adapter.repositories.customer_repository import SqlAlchemyCustomerRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.rate_card import MilkType
from src.depends import get_session
from src.api.error import raise_for_error

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post(
    "",
    response_model=CustomerDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "description": "Duplicate external id",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CUSTOMER_EXISTS",
                            "message": "Customer with external id 1042 already exists"
                        }
                    }
                }
            }
        }
    }
)
async def create_customer(
    request: CreateCustomerCommandDTO,
    session: AsyncSession = Depends(get_session)
):
    """Register a farmer. `external_id` is the CID the collection unit sends."""
    use_case = CreateCustomer(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCustomerRepository(session),
        default_milk_type=MilkType(ApplicationConfig.DEFAULT_MILK_TYPE),
    )
    result = await use_case.execute(request)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("", response_model=ListCustomersResponseDTO)
async def list_customers(
    include_inactive: bool = Query(default=False, description="Also list deactivated farmers"),
    session: AsyncSession = Depends(get_session),
):
    result = await ListCustomers(SqlAlchemyCustomerRepository(session)).execute(include_inactive)
    return result.value


@router.get("/{customer_id}", response_model=CustomerDTO)
async def get_customer(customer_id: int, session: AsyncSession = Depends(get_session)):
    result = await GetCustomer(SqlAlchemyCustomerRepository(session)).execute(customer_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.patch("/{customer_id}", response_model=CustomerDTO)
async def update_customer(
    customer_id: int,
    request: UpdateCustomerRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """Edit a farmer. Only the fields present in the body change."""
    command = UpdateCustomerCommandDTO(customer_id=customer_id, **request.model_dump(exclude_unset=True))

    use_case = UpdateCustomer(SqlAlchemyUnitOfWork(session), SqlAlchemyCustomerRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete("/{customer_id}", response_model=CustomerDTO)
async def deactivate_customer(customer_id: int, session: AsyncSession = Depends(get_session)):
    """
    Deactivate a farmer.

    The ledger is kept; new entries, payments and advances are refused
    until the farmer is reactivated with PATCH is_active=true.
    """
    use_case = UpdateCustomer(SqlAlchemyUnitOfWork(session), SqlAlchemyCustomerRepository(session))
    result = await use_case.execute(UpdateCustomerCommandDTO(customer_id=customer_id, is_active=False))

    if result.is_err():
        raise_for_error(result.error)

    return result.value
