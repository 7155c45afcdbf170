"""Customer Use Cases

Register, edit, deactivate and list farmers. Deactivation is a soft delete:
the row and its ledger stay, but new entries, payments and advances are
refused.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.customer_repository import CustomerRepository
from src.domain.customer import Customer
from src.domain.rate_card import MilkType
from .dtos import CreateCustomerCommandDTO, CustomerDTO, ListCustomersResponseDTO, UpdateCustomerCommandDTO

logger = logging.getLogger(__name__)

CLEARABLE_FIELDS = {"phone", "address"}
REQUIRED_FIELDS = {"external_id", "name", "default_milk_type", "is_active"}


def to_customer_dto(customer: Customer) -> CustomerDTO:
    return CustomerDTO(
        id=customer.id,
        external_id=customer.external_id,
        name=customer.name,
        phone=customer.phone,
        address=customer.address,
        default_milk_type=customer.default_milk_type,
        is_active=customer.is_active,
        created_at=customer.created_at,
    )


def _duplicate(external_id: str) -> Error:
    return Error(
        code="CUSTOMER_EXISTS",
        message=f"Customer with external id {external_id} already exists",
    )


class CreateCustomer:
    """
    Use Case: Register a farmer

    Business Rules:
    1. external_id (CID) is unique
    2. default_milk_type falls back to the configured default
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        default_milk_type: MilkType = MilkType.COW,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.default_milk_type = default_milk_type

    async def execute(self, command: CreateCustomerCommandDTO) -> Result[CustomerDTO]:
        try:
            existing = await self.customer_repo.get_by_external_id(command.external_id)
            if existing:
                return Return.err(_duplicate(command.external_id))

            customer = await self.customer_repo.create(
                Customer(
                    external_id=command.external_id,
                    name=command.name,
                    phone=command.phone,
                    address=command.address,
                    default_milk_type=command.default_milk_type or self.default_milk_type,
                )
            )
            await self.uow.commit()
            return Return.ok(to_customer_dto(customer))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_CUSTOMER_FAILED",
                    message="Failed to create customer",
                    reason=str(e),
                )
            )


class GetCustomer:

    def __init__(self, customer_repo: CustomerRepository):
        self.customer_repo = customer_repo

    async def execute(self, customer_id: int) -> Result[CustomerDTO]:
        customer = await self.customer_repo.get_by_id(customer_id)
        if not customer:
            return Return.err(
                Error(code="CUSTOMER_NOT_FOUND", message=f"Customer {customer_id} not found")
            )
        return Return.ok(to_customer_dto(customer))


class UpdateCustomer:
    """
    Use Case: Edit or deactivate a farmer

    Business Rules:
    1. Only fields present in the command change; phone/address may be
       cleared with an explicit null, the rest may not
    2. A new external_id must still be unique
    3. is_active=False is the soft delete; is_active=True reactivates
    """

    def __init__(self, uow: UnitOfWork, customer_repo: CustomerRepository):
        self.uow = uow
        self.customer_repo = customer_repo

    async def execute(self, command: UpdateCustomerCommandDTO) -> Result[CustomerDTO]:
        try:
            changed = command.model_fields_set - {"customer_id"}

            # Step 1: Reject clearing required fields
            cleared = sorted(name for name in changed & REQUIRED_FIELDS if getattr(command, name) is None)
            if cleared:
                return Return.err(
                    Error(
                        code="INVALID_CUSTOMER",
                        message=f"{', '.join(cleared)} cannot be cleared",
                    )
                )

            # Step 2: Load
            customer = await self.customer_repo.get_by_id(command.customer_id)
            if not customer:
                return Return.err(
                    Error(code="CUSTOMER_NOT_FOUND", message=f"Customer {command.customer_id} not found")
                )

            # Step 3: Keep the CID unique
            if "external_id" in changed and command.external_id != customer.external_id:
                existing = await self.customer_repo.get_by_external_id(command.external_id)
                if existing and existing.id != customer.id:
                    return Return.err(_duplicate(command.external_id))

            # Step 4: Apply and persist
            for name in changed & (CLEARABLE_FIELDS | REQUIRED_FIELDS):
                setattr(customer, name, getattr(command, name))

            customer = await self.customer_repo.update(customer)
            await self.uow.commit()
            if "is_active" in changed:
                logger.info(f"Customer {customer.id} is_active set to {customer.is_active}")

            return Return.ok(to_customer_dto(customer))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_CUSTOMER_FAILED",
                    message="Failed to update customer",
                    reason=str(e),
                )
            )


class ListCustomers:
    """Use Case: List farmers by CID"""

    def __init__(self, customer_repo: CustomerRepository):
        self.customer_repo = customer_repo

    async def execute(self, include_inactive: bool = False) -> Result[ListCustomersResponseDTO]:
        customers = await self.customer_repo.list_all(include_inactive=include_inactive)
        dtos = [to_customer_dto(customer) for customer in customers]
        return Return.ok(ListCustomersResponseDTO(customers=dtos, total=len(dtos)))
