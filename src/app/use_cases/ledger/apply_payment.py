"""ApplyPayment Use Case

Pays a farmer, optionally settling outstanding advances first
(oldest-created first, partial consumption allowed).
"""

import asyncio
import logging
from contextlib import nullcontext
from decimal import Decimal
from typing import List, Optional, Tuple
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.services.allocation_lock import AllocationLock
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.app.repositories.advance_repository import AdvanceRepository, AllocationConflictError
from src.app.repositories.advance_utilization_repository import AdvanceUtilizationRepository
from src.domain.advance import Advance
from src.domain.advance_utilization import AdvanceUtilization
from src.domain.events import PaymentRecorded
from src.domain.money import ZERO, to_money
from src.domain.payment import Payment
from .dtos import (
    AdvanceAllocationDTO,
    ApplyPaymentCommandDTO,
    ApplyPaymentResponseDTO,
    PaymentDTO,
)

logger = logging.getLogger(__name__)


def to_payment_dto(payment: Payment) -> PaymentDTO:
    return PaymentDTO(
        id=payment.id,
        customer_id=payment.customer_id,
        payment_date=payment.payment_date,
        amount=payment.amount,
        mode=payment.mode,
        reference=payment.reference,
        note=payment.note,
        advance_used=payment.advance_used,
        created_at=payment.created_at,
    )


class ApplyPayment:
    """
    Use Case: Record a payment with advance recovery

    Business Rules:
    1. Customer must exist and be active
    2. Without use_advance the full amount is recorded as a Payment
    3. With use_advance, active advances absorb the amount oldest first;
       each draw takes min(outstanding, remaining) and an advance flips to
       utilized when fully consumed
    4. A Payment row is written for the remainder only; none when advances
       absorbed everything
    5. Every draw writes an AdvanceUtilization audit row
    6. All writes commit together

    Concurrency:
    - Allocations for one customer are serialized by the allocation lock
    - Advances are read with SELECT FOR UPDATE
    - Each draw is a compare-and-set on utilized_amount; a lost race rolls
      back and retries up to max_retries times, then ALLOCATION_CONFLICT
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        payment_repo: PaymentRepository,
        advance_repo: AdvanceRepository,
        utilization_repo: AdvanceUtilizationRepository,
        allocation_lock: Optional[AllocationLock] = None,
        event_publisher: Optional[EventPublisher] = None,
        max_retries: int = 3,
        retry_backoff: float = 0.05,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.payment_repo = payment_repo
        self.advance_repo = advance_repo
        self.utilization_repo = utilization_repo
        self.allocation_lock = allocation_lock
        self.event_publisher = event_publisher
        self.max_retries = max(1, max_retries)
        self.retry_backoff = retry_backoff

    async def execute(self, command: ApplyPaymentCommandDTO) -> Result[ApplyPaymentResponseDTO]:
        """
        Execute payment allocation

        Args:
            command: ApplyPaymentCommandDTO

        Returns:
            Result[ApplyPaymentResponseDTO]: payment (or None), advance_used
            and per-advance allocations
        """
        lock = self.allocation_lock.hold(command.customer_id) if self.allocation_lock else nullcontext()

        async with lock:
            for attempt in range(1, self.max_retries + 1):
                try:
                    return await self._allocate(command)

                except AllocationConflictError as e:
                    await self.uow.rollback()
                    logger.warning(
                        f"Allocation conflict for customer {command.customer_id} "
                        f"(attempt {attempt}/{self.max_retries}): {e}"
                    )
                    if attempt < self.max_retries:
                        await asyncio.sleep(self.retry_backoff * attempt)

                except Exception as e:
                    await self.uow.rollback()
                    return Return.err(
                        Error(
                            code="APPLY_PAYMENT_FAILED",
                            message="Failed to apply payment",
                            reason=str(e),
                        )
                    )

        return Return.err(
            Error(
                code="ALLOCATION_CONFLICT",
                message="Advances changed concurrently, payment not applied",
                reason=f"gave up after {self.max_retries} attempts",
            )
        )

    async def _allocate(self, command: ApplyPaymentCommandDTO) -> Result[ApplyPaymentResponseDTO]:
        # Step 1: Customer
        customer = await self.customer_repo.get_by_id(command.customer_id)
        if not customer or not customer.is_active:
            return Return.err(
                Error(
                    code="CUSTOMER_NOT_FOUND",
                    message=f"Customer {command.customer_id} not found",
                    reason="Unknown or inactive customer",
                )
            )

        requested = to_money(command.amount)
        remaining = requested
        draws: List[Tuple[Advance, Decimal, Decimal]] = []

        # Step 2: Draw down active advances, oldest first
        if command.use_advance:
            advances = await self.advance_repo.list_active_by_customer(command.customer_id, for_update=True)
            for advance in advances:
                if remaining <= ZERO:
                    break
                available = advance.amount - advance.utilized_amount
                if available <= ZERO:
                    continue
                take = min(available, remaining)
                utilized_before = advance.utilized_amount
                await self.advance_repo.consume(advance, take)
                draws.append((advance, take, utilized_before))
                remaining -= take

        advance_used = requested - remaining

        # Step 3: Payment row for whatever the advances did not absorb
        payment = None
        if remaining > ZERO:
            note = command.note
            if advance_used > ZERO:
                note = f"{command.note or ''} ({advance_used} from advance)".strip()
            payment = await self.payment_repo.create(
                Payment(
                    customer_id=command.customer_id,
                    payment_date=command.payment_date,
                    amount=remaining,
                    mode=command.mode,
                    reference=command.reference,
                    note=note,
                    advance_used=advance_used,
                )
            )

        # Step 4: Audit trail
        allocations = []
        for advance, take, utilized_before in draws:
            await self.utilization_repo.create(
                AdvanceUtilization(
                    advance_id=advance.id,
                    customer_id=command.customer_id,
                    payment_id=payment.id if payment else None,
                    amount=take,
                    utilized_before=utilized_before,
                    utilized_after=utilized_before + take,
                )
            )
            allocations.append(
                AdvanceAllocationDTO(
                    advance_id=advance.id,
                    amount=take,
                    utilized_before=utilized_before,
                    utilized_after=utilized_before + take,
                    status=advance.status,
                )
            )

        # Step 5: Commit everything at once
        await self.uow.commit()

        if payment:
            message = f"Payment of {payment.amount} recorded"
            if advance_used > ZERO:
                message += f" after recovering {advance_used} from advances"
        else:
            message = f"Payment of {requested} fully adjusted against advances"
        logger.info(f"Customer {command.customer_id}: {message}")

        # Step 6: Announce
        if payment:
            self._publish(payment)

        return Return.ok(
            ApplyPaymentResponseDTO(
                customer_id=command.customer_id,
                requested_amount=requested,
                advance_used=advance_used,
                payment=to_payment_dto(payment) if payment else None,
                allocations=allocations,
                message=message,
            )
        )

    def _publish(self, payment: Payment) -> None:
        if self.event_publisher is None:
            return
        try:
            self.event_publisher.publish(
                PaymentRecorded(
                    payment_id=payment.id,
                    customer_id=payment.customer_id,
                    amount=payment.amount,
                    advance_used=payment.advance_used,
                    mode=payment.mode.value,
                )
            )
        except Exception as e:
            logger.error(f"Failed to publish payment.recorded for payment {payment.id}: {e}")
