"""GetStatement Use Case

Builds a customer's passbook: every entry, payment and advance as a dated
line with a running balance.
"""

import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from libs.result import Result, Return, Error
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.milk_entry_repository import MilkEntryRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.app.repositories.advance_repository import AdvanceRepository
from src.domain.advance import Advance
from src.domain.milk_entry import MilkEntry
from src.domain.money import ZERO, to_money
from src.domain.payment import Payment
from .dtos import LedgerLineDTO, LedgerLineKind, StatementResponseDTO, StatementSummaryDTO

logger = logging.getLogger(__name__)


def _entry_line(entry: MilkEntry) -> LedgerLineDTO:
    return LedgerLineDTO(
        kind=LedgerLineKind.MILK,
        reference_id=entry.id,
        line_date=entry.entry_date,
        description=f"Milk {entry.shift.value} {entry.milk_type.value} {entry.quantity_litre}L @ {entry.rate_per_litre}",
        credit=to_money(entry.amount),
        debit=ZERO,
        running_balance=ZERO,
    )


def _payment_line(payment: Payment) -> LedgerLineDTO:
    description = f"Payment ({payment.mode.value})"
    if payment.reference:
        description += f" Ref: {payment.reference}"
    return LedgerLineDTO(
        kind=LedgerLineKind.PAYMENT,
        reference_id=payment.id,
        line_date=payment.payment_date,
        description=description,
        credit=ZERO,
        debit=to_money(payment.amount),
        running_balance=ZERO,
    )


def _advance_line(advance: Advance) -> LedgerLineDTO:
    # Only the unrecovered part still counts against the farmer
    description = f"Advance {advance.amount} ({advance.status.value})"
    if advance.note:
        description += f" {advance.note}"
    return LedgerLineDTO(
        kind=LedgerLineKind.ADVANCE,
        reference_id=advance.id,
        line_date=advance.advance_date,
        description=description,
        credit=ZERO,
        debit=to_money(advance.outstanding),
        running_balance=ZERO,
    )


class GetStatement:
    """
    Use Case: Customer statement (passbook)

    Business Rules:
    1. Entries are credits, payments are debits, advances are debits at
       their outstanding amount (utilized advances show a zero debit)
    2. Entries and payments honour the date range; advances do not
    3. Lines are ordered by date; same-date lines keep the order entries,
       payments, advances (stable sort)
    4. running_balance accumulates credit - debit in one pass
    5. closing_balance = milk amount - payments - outstanding advances
    6. Pure read: the same data always yields the same statement
    """

    def __init__(
        self,
        customer_repo: CustomerRepository,
        entry_repo: MilkEntryRepository,
        payment_repo: PaymentRepository,
        advance_repo: AdvanceRepository,
        timeout: float = 10.0,
    ):
        self.customer_repo = customer_repo
        self.entry_repo = entry_repo
        self.payment_repo = payment_repo
        self.advance_repo = advance_repo
        self.timeout = timeout

    async def execute(
        self,
        customer_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Result[StatementResponseDTO]:
        """
        Build the statement

        Args:
            customer_id: Customer ID
            date_from: Inclusive lower bound for entries and payments
            date_to: Inclusive upper bound for entries and payments

        Returns:
            Result[StatementResponseDTO]
        """
        try:
            return await asyncio.wait_for(
                self._build(customer_id, date_from, date_to), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Statement for customer {customer_id} timed out after {self.timeout}s")
            return Return.err(
                Error(
                    code="STATEMENT_TIMEOUT",
                    message="Statement took too long to build",
                    reason=f"timeout={self.timeout}s",
                )
            )
        except Exception as e:
            return Return.err(
                Error(
                    code="GET_STATEMENT_FAILED",
                    message="Failed to build statement",
                    reason=str(e),
                )
            )

    async def _build(
        self, customer_id: int, date_from: Optional[date], date_to: Optional[date]
    ) -> Result[StatementResponseDTO]:
        # Step 1: Customer
        customer = await self.customer_repo.get_by_id(customer_id)
        if not customer:
            return Return.err(
                Error(code="CUSTOMER_NOT_FOUND", message=f"Customer {customer_id} not found")
            )

        # Step 2: Fetch
        entries = await self.entry_repo.list_by_customer(customer_id, date_from, date_to)
        payments = await self.payment_repo.list_by_customer(customer_id, date_from, date_to)
        advances = await self.advance_repo.list_by_customer(customer_id)

        # Step 3: Lines, stable-sorted by date
        lines: List[LedgerLineDTO] = (
            [_entry_line(entry) for entry in entries]
            + [_payment_line(payment) for payment in payments]
            + [_advance_line(advance) for advance in advances]
        )
        lines.sort(key=lambda line: line.line_date)

        # Step 4: Running balance
        balance = ZERO
        for line in lines:
            balance = balance + line.credit - line.debit
            line.running_balance = balance

        # Step 5: Summary
        total_milk_amount = to_money(sum((entry.amount for entry in entries), ZERO))
        total_payments = to_money(sum((payment.amount for payment in payments), ZERO))
        total_outstanding = to_money(sum((advance.outstanding for advance in advances), ZERO))

        summary = StatementSummaryDTO(
            total_milk_litres=sum((entry.quantity_litre for entry in entries), Decimal("0")),
            total_milk_amount=total_milk_amount,
            total_payments=total_payments,
            total_outstanding_advance=total_outstanding,
            closing_balance=total_milk_amount - total_payments - total_outstanding,
            entry_count=len(entries),
            payment_count=len(payments),
            advance_count=len(advances),
        )

        return Return.ok(
            StatementResponseDTO(
                customer_id=customer.id,
                customer_external_id=customer.external_id,
                customer_name=customer.name,
                date_from=date_from,
                date_to=date_to,
                lines=lines,
                summary=summary,
            )
        )
