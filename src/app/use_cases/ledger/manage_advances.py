"""Advance listing and correction

Corrections hold the same per-customer lock as payment allocation, so an
edit never interleaves with a draw-down in this process. Allocation's
compare-and-set catches edits made by other processes.
"""

import logging
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.allocation_lock import AllocationLock
from src.app.repositories.advance_repository import AdvanceRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.domain.advance import Advance, AdvanceStatus
from src.domain.money import ZERO, to_money
from .create_advance import to_advance_dto
from .dtos import AdvanceDTO, ListAdvancesResponseDTO, UpdateAdvanceCommandDTO

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"advance_date", "amount", "utilized_amount"}


def status_for(amount: Decimal, utilized: Decimal) -> AdvanceStatus:
    """utilized only when nothing is left to recover"""
    return AdvanceStatus.UTILIZED if utilized == amount else AdvanceStatus.ACTIVE


def validate_advance(amount: Decimal, utilized: Decimal) -> Optional[Error]:
    if amount <= ZERO:
        return Error(code="INVALID_ADVANCE", message=f"Advance amount must be greater than 0, got {amount}")
    if utilized < ZERO or utilized > amount:
        return Error(
            code="INVALID_ADVANCE",
            message="utilized_amount must be between 0 and amount",
            reason=f"amount={amount}, utilized_amount={utilized}",
        )
    return None


class ListAdvances:
    """Use Case: List advances, newest first, optionally for one customer or status"""

    def __init__(self, advance_repo: AdvanceRepository, customer_repo: Optional[CustomerRepository] = None):
        self.advance_repo = advance_repo
        self.customer_repo = customer_repo

    async def execute(
        self,
        customer_id: Optional[int] = None,
        status: Optional[AdvanceStatus] = None,
    ) -> Result[ListAdvancesResponseDTO]:
        if customer_id is not None and self.customer_repo is not None:
            if not await self.customer_repo.get_by_id(customer_id):
                return Return.err(
                    Error(code="CUSTOMER_NOT_FOUND", message=f"Customer {customer_id} not found")
                )

        advances = await self.advance_repo.list_all(customer_id=customer_id, status=status)
        dtos = [to_advance_dto(advance) for advance in advances]
        return Return.ok(
            ListAdvancesResponseDTO(
                advances=dtos,
                total=len(dtos),
                total_outstanding=sum((a.outstanding for a in dtos), ZERO),
            )
        )


class UpdateAdvance:
    """
    Use Case: Correct an advance

    Business Rules:
    1. Only fields present in the command change; note may be cleared
    2. amount > 0 and 0 <= utilized_amount <= amount after the change
    3. status is recomputed: utilized iff utilized_amount == amount
    """

    def __init__(self, uow: UnitOfWork, advance_repo: AdvanceRepository, allocation_lock: AllocationLock):
        self.uow = uow
        self.advance_repo = advance_repo
        self.allocation_lock = allocation_lock

    async def execute(self, command: UpdateAdvanceCommandDTO) -> Result[AdvanceDTO]:
        changed = command.model_fields_set - {"advance_id"}

        # Step 1: Reject clearing required fields
        cleared = sorted(name for name in changed & REQUIRED_FIELDS if getattr(command, name) is None)
        if cleared:
            return Return.err(
                Error(
                    code="INVALID_ADVANCE",
                    message=f"{', '.join(cleared)} cannot be cleared",
                )
            )

        try:
            # Step 2: Find the owner so we can take its allocation lock
            advance = await self.advance_repo.get_by_id(command.advance_id)
            if not advance:
                return Return.err(
                    Error(
                        code="ADVANCE_NOT_FOUND",
                        message=f"Advance {command.advance_id} not found",
                    )
                )

            async with self.allocation_lock.hold(advance.customer_id):
                return await self._apply(command, changed)

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_ADVANCE_FAILED",
                    message="Failed to update advance",
                    reason=str(e),
                )
            )

    async def _apply(self, command: UpdateAdvanceCommandDTO, changed: set) -> Result[AdvanceDTO]:
        # Step 3: Re-read under the row lock
        advance: Advance = await self.advance_repo.get_by_id(command.advance_id, for_update=True)

        amount = to_money(command.amount) if "amount" in changed else advance.amount
        utilized = to_money(command.utilized_amount) if "utilized_amount" in changed else advance.utilized_amount

        # Step 4: Validate the merged advance
        error = validate_advance(amount, utilized)
        if error:
            await self.uow.rollback()
            return Return.err(error)

        # Step 5: Apply and persist
        if "advance_date" in changed:
            advance.advance_date = command.advance_date
        if "note" in changed:
            advance.note = command.note
        before = advance.utilized_amount
        advance.amount = amount
        advance.utilized_amount = utilized
        advance.status = status_for(amount, utilized)

        advance = await self.advance_repo.update(advance)
        await self.uow.commit()
        if before != utilized:
            logger.info(f"Advance {advance.id} utilized_amount corrected from {before} to {utilized}")

        return Return.ok(to_advance_dto(advance))
