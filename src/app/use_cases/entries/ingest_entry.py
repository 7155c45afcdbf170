"""IngestEntry Use Case

Validates, prices and stores one milk entry, then announces it.
Shared by manual entry and the collection unit stream.
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.milk_entry_repository import MilkEntryRepository
from src.app.use_cases.rates.rate_engine import RateEngine
from src.domain.customer import Customer
from src.domain.events import EntryCreated
from src.domain.milk_entry import MilkEntry
from src.domain.money import ZERO, calculate_amount, derive_rate, to_money
from .dtos import IngestEntryCommandDTO, EntryResponseDTO

logger = logging.getLogger(__name__)


def to_entry_dto(entry: MilkEntry) -> EntryResponseDTO:
    return EntryResponseDTO(
        id=entry.id,
        customer_id=entry.customer_id,
        entry_date=entry.entry_date,
        entry_time=entry.entry_time,
        shift=entry.shift,
        milk_type=entry.milk_type,
        quantity_litre=entry.quantity_litre,
        fat=entry.fat,
        snf=entry.snf,
        clr=entry.clr,
        rate_per_litre=entry.rate_per_litre,
        amount=entry.amount,
        source=entry.source,
        notes=entry.notes,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


class IngestEntry:
    """
    Use Case: Record a milk entry

    Business Rules:
    1. Customer must exist and be active
    2. Milk type falls back to the customer's default
    3. A supplied amount is trusted; rate = round(amount / quantity, 2)
    4. Otherwise rate comes from the operator override or the rate cards
       (missing fat/snf replaced by the configured defaults) and
       amount = round(quantity * rate, 2)
    5. No amount and no rate means a rate card is missing: reject
    6. Amount must be > 0
    7. entry.created is published after commit; publishing failures never
       undo the entry

    Flow:
    1. Resolve customer
    2. Resolve milk type
    3. Price the entry
    4. Validate amount
    5. Persist and commit
    6. Publish event
    """

    def __init__(
        self,
        uow: UnitOfWork,
        customer_repo: CustomerRepository,
        entry_repo: MilkEntryRepository,
        rate_engine: RateEngine,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.uow = uow
        self.customer_repo = customer_repo
        self.entry_repo = entry_repo
        self.rate_engine = rate_engine
        self.event_publisher = event_publisher

    async def execute(self, command: IngestEntryCommandDTO) -> Result[EntryResponseDTO]:
        """
        Execute entry ingestion

        Args:
            command: IngestEntryCommandDTO

        Returns:
            Result[EntryResponseDTO]: Stored entry or error
            (CUSTOMER_NOT_FOUND, RATE_UNAVAILABLE, ZERO_AMOUNT_REJECTED)
        """
        try:
            # Step 1: Resolve customer
            customer = await self._resolve_customer(command)
            if not customer or not customer.is_active:
                customer_ref = command.customer_external_id or command.customer_id
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer not found: {customer_ref}",
                        reason="Unknown or inactive customer",
                    )
                )

            # Step 2: Resolve milk type
            milk_type = command.milk_type or customer.default_milk_type

            # Step 3: Price the entry
            quantity = command.quantity_litre
            if command.amount is not None:
                amount = to_money(command.amount)
                rate = derive_rate(amount, quantity)
            else:
                if command.rate_per_litre is not None:
                    rate = to_money(command.rate_per_litre)
                else:
                    default_fat, default_snf = await self.rate_engine.get_default_quality()
                    fat = command.fat if command.fat is not None else default_fat
                    snf = command.snf if command.snf is not None else default_snf
                    rate = await self.rate_engine.get_rate(milk_type, fat, snf)

                    if rate <= ZERO:
                        logger.error(
                            f"No rate card for {milk_type.value} milk with fat={fat} snf={snf}; "
                            f"configure rate cards"
                        )
                        return Return.err(
                            Error(
                                code="RATE_UNAVAILABLE",
                                message=f"No rate card found for {milk_type.value} milk with Fat: {fat}%, SNF: {snf}%",
                                reason="Configure rate cards first",
                            )
                        )

                amount = calculate_amount(quantity, rate)

            # Step 4: Validate amount
            if amount <= ZERO:
                return Return.err(
                    Error(
                        code="ZERO_AMOUNT_REJECTED",
                        message=f"Entry amount must be greater than 0, got {amount}",
                        reason=f"quantity={quantity}, rate={rate}",
                    )
                )

            # Step 5: Persist and commit
            entry = await self.entry_repo.create(
                MilkEntry(
                    customer_id=customer.id,
                    entry_date=command.entry_date,
                    entry_time=command.entry_time,
                    shift=command.shift,
                    milk_type=milk_type,
                    quantity_litre=quantity,
                    fat=command.fat,
                    snf=command.snf,
                    clr=command.clr,
                    rate_per_litre=rate,
                    amount=amount,
                    source=command.source,
                    notes=command.notes,
                )
            )
            await self.uow.commit()

            logger.info(
                f"Entry {entry.id} stored for customer {customer.external_id}: "
                f"{quantity}L x {rate} = {amount} ({command.source.value})"
            )

            # Step 6: Publish event (fire-and-forget)
            self._publish(entry, customer)

            return Return.ok(to_entry_dto(entry))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="INGEST_ENTRY_FAILED",
                    message="Failed to ingest milk entry",
                    reason=str(e),
                )
            )

    async def _resolve_customer(self, command: IngestEntryCommandDTO) -> Optional[Customer]:
        if command.customer_id is not None:
            return await self.customer_repo.get_by_id(command.customer_id)
        return await self.customer_repo.get_by_external_id(command.customer_external_id)

    def _publish(self, entry: MilkEntry, customer: Customer) -> None:
        if self.event_publisher is None:
            return
        try:
            self.event_publisher.publish(
                EntryCreated(
                    entry_id=entry.id,
                    customer_id=customer.id,
                    customer_external_id=customer.external_id,
                    customer_name=customer.name,
                    entry_date=entry.entry_date.isoformat(),
                    shift=entry.shift.value,
                    milk_type=entry.milk_type.value,
                    quantity_litre=entry.quantity_litre,
                    fat=entry.fat,
                    snf=entry.snf,
                    rate_per_litre=entry.rate_per_litre,
                    amount=entry.amount,
                    source=entry.source.value,
                )
            )
        except Exception as e:
            logger.error(f"Failed to publish entry.created for entry {entry.id}: {e}")
