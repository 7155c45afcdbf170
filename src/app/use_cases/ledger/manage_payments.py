"""Payment listing and correction"""

from datetime import date
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.money import ZERO, to_money
from .apply_payment import to_payment_dto
from .dtos import CorrectPaymentCommandDTO, ListPaymentsResponseDTO, PaymentDTO

CLEARABLE_FIELDS = {"reference", "note"}
REQUIRED_FIELDS = {"payment_date", "amount", "mode"}


class ListPayments:
    """
    Use Case: List payments, newest first, optionally for one customer

    With a customer_repo, an unknown customer_id is CUSTOMER_NOT_FOUND
    rather than an empty list.
    """

    def __init__(self, payment_repo: PaymentRepository, customer_repo: Optional[CustomerRepository] = None):
        self.payment_repo = payment_repo
        self.customer_repo = customer_repo

    async def execute(
        self,
        customer_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Result[ListPaymentsResponseDTO]:
        if customer_id is not None and self.customer_repo is not None:
            if not await self.customer_repo.get_by_id(customer_id):
                return Return.err(
                    Error(code="CUSTOMER_NOT_FOUND", message=f"Customer {customer_id} not found")
                )

        payments = await self.payment_repo.list_all(customer_id, date_from, date_to)
        dtos = [to_payment_dto(payment) for payment in payments]
        return Return.ok(
            ListPaymentsResponseDTO(
                payments=dtos,
                total=len(dtos),
                total_amount=sum((p.amount for p in dtos), ZERO),
            )
        )


class CorrectPayment:
    """
    Use Case: Correct a recorded payment

    Business Rules:
    1. Only fields present in the command change
    2. amount, payment_date and mode cannot be cleared; amount stays > 0
    3. Advance recovery already made for this payment is not replayed
    """

    def __init__(self, uow: UnitOfWork, payment_repo: PaymentRepository):
        self.uow = uow
        self.payment_repo = payment_repo

    async def execute(self, command: CorrectPaymentCommandDTO) -> Result[PaymentDTO]:
        try:
            changed = command.model_fields_set - {"payment_id"}

            # Step 1: Reject clearing required fields
            cleared = sorted(name for name in changed & REQUIRED_FIELDS if getattr(command, name) is None)
            if cleared:
                return Return.err(
                    Error(
                        code="INVALID_CORRECTION",
                        message=f"{', '.join(cleared)} cannot be cleared",
                    )
                )

            # Step 2: Load with row lock
            payment = await self.payment_repo.get_by_id(command.payment_id, for_update=True)
            if not payment:
                return Return.err(
                    Error(
                        code="PAYMENT_NOT_FOUND",
                        message=f"Payment {command.payment_id} not found",
                    )
                )

            # Step 3: Apply and persist
            for name in changed:
                setattr(payment, name, getattr(command, name))
            if "amount" in changed:
                payment.amount = to_money(command.amount)

            payment = await self.payment_repo.update(payment)
            await self.uow.commit()

            return Return.ok(to_payment_dto(payment))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CORRECT_PAYMENT_FAILED",
                    message="Failed to correct payment",
                    reason=str(e),
                )
            )
