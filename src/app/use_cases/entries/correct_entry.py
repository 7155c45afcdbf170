"""CorrectEntry Use Case

Explicit administrative correction of a stored entry.
"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.milk_entry_repository import MilkEntryRepository
from src.domain.money import ZERO, calculate_amount, derive_rate, to_money
from .dtos import CorrectEntryCommandDTO, EntryResponseDTO
from .ingest_entry import to_entry_dto

CLEARABLE_FIELDS = {"entry_time", "fat", "snf", "clr", "notes"}
REQUIRED_FIELDS = {"entry_date", "shift", "milk_type", "quantity_litre", "rate_per_litre", "amount"}
PLAIN_FIELDS = CLEARABLE_FIELDS | {"entry_date", "shift", "milk_type"}


class CorrectEntry:
    """
    Use Case: Correct a milk entry

    Business Rules:
    1. Only fields present in the command change; explicit null clears a
       nullable field and is rejected for required ones
    2. A new amount re-derives the rate: rate = round(amount / quantity, 2)
    3. A new quantity or rate recomputes amount = round(quantity * rate, 2)
    4. Quality readings (fat/snf/clr) are informational here and do not reprice
    5. amount > 0 still holds after the correction
    """

    def __init__(self, uow: UnitOfWork, entry_repo: MilkEntryRepository):
        self.uow = uow
        self.entry_repo = entry_repo

    async def execute(self, command: CorrectEntryCommandDTO) -> Result[EntryResponseDTO]:
        try:
            changed = command.model_fields_set - {"entry_id"}

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
            entry = await self.entry_repo.get_by_id(command.entry_id, for_update=True)
            if not entry:
                return Return.err(
                    Error(
                        code="ENTRY_NOT_FOUND",
                        message=f"Entry {command.entry_id} not found",
                    )
                )

            # Step 3: Apply plain fields
            for name in changed & PLAIN_FIELDS:
                setattr(entry, name, getattr(command, name))

            # Step 4: Reprice
            quantity = command.quantity_litre if "quantity_litre" in changed else entry.quantity_litre
            if "amount" in changed:
                amount = to_money(command.amount)
                rate = derive_rate(amount, quantity)
            elif changed & {"quantity_litre", "rate_per_litre"}:
                rate = to_money(command.rate_per_litre) if "rate_per_litre" in changed else entry.rate_per_litre
                amount = calculate_amount(quantity, rate)
            else:
                rate, amount = entry.rate_per_litre, entry.amount

            if amount <= ZERO:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="ZERO_AMOUNT_REJECTED",
                        message=f"Entry amount must be greater than 0, got {amount}",
                        reason=f"quantity={quantity}, rate={rate}",
                    )
                )

            entry.quantity_litre = quantity
            entry.rate_per_litre = rate
            entry.amount = amount

            # Step 5: Persist
            entry = await self.entry_repo.update(entry)
            await self.uow.commit()

            return Return.ok(to_entry_dto(entry))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CORRECT_ENTRY_FAILED",
                    message="Failed to correct entry",
                    reason=str(e),
                )
            )
