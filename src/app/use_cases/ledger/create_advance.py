"""CreateAdvance Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.advance_repository import AdvanceRepository
from src.domain.advance import Advance, AdvanceStatus
from src.domain.money import ZERO, to_money
from .dtos import AdvanceDTO, CreateAdvanceCommandDTO

logger = logging.getLogger(__name__)


def to_advance_dto(advance: Advance) -> AdvanceDTO:
    return AdvanceDTO(
        id=advance.id,
        customer_id=advance.customer_id,
        advance_date=advance.advance_date,
        amount=advance.amount,
        utilized_amount=advance.utilized_amount,
        outstanding=advance.outstanding,
        status=advance.status,
        note=advance.note,
        created_at=advance.created_at,
    )


class CreateAdvance:
    """
    Use Case: Lend money to a farmer

    New advances start active with nothing utilized.
    """

    def __init__(self, uow: UnitOfWork, customer_repo: CustomerRepository, advance_repo: AdvanceRepository):
        self.uow = uow
        self.customer_repo = customer_repo
        self.advance_repo = advance_repo

    async def execute(self, command: CreateAdvanceCommandDTO) -> Result[AdvanceDTO]:
        try:
            customer = await self.customer_repo.get_by_id(command.customer_id)
            if not customer or not customer.is_active:
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer {command.customer_id} not found",
                    )
                )

            advance = await self.advance_repo.create(
                Advance(
                    customer_id=command.customer_id,
                    advance_date=command.advance_date,
                    amount=to_money(command.amount),
                    utilized_amount=ZERO,
                    status=AdvanceStatus.ACTIVE,
                    note=command.note,
                )
            )
            await self.uow.commit()
            logger.info(f"Advance {advance.id} of {advance.amount} given to customer {command.customer_id}")

            return Return.ok(to_advance_dto(advance))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_ADVANCE_FAILED",
                    message="Failed to create advance",
                    reason=str(e),
                )
            )
