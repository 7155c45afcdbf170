"""
List Entries Use Case

Retrieves a customer's milk entries with optional date and shift filters.
"""
from datetime import date
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.milk_entry_repository import MilkEntryRepository
from src.domain.milk_entry import Shift
from src.domain.money import to_money
from .dtos import ListEntriesResponseDTO
from .ingest_entry import to_entry_dto


class ListEntries:

    def __init__(self, customer_repo: CustomerRepository, entry_repo: MilkEntryRepository):
        self.customer_repo = customer_repo
        self.entry_repo = entry_repo

    async def execute(
        self,
        customer_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        shift: Optional[Shift] = None,
    ) -> Result[ListEntriesResponseDTO]:
        customer = await self.customer_repo.get_by_id(customer_id)
        if not customer:
            return Return.err(
                Error(code="CUSTOMER_NOT_FOUND", message=f"Customer {customer_id} not found")
            )

        entries = await self.entry_repo.list_by_customer(customer_id, date_from, date_to, shift)
        return Return.ok(
            ListEntriesResponseDTO(
                entries=[to_entry_dto(entry) for entry in entries],
                total=len(entries),
                total_litres=sum((entry.quantity_litre for entry in entries), Decimal("0")),
                total_amount=to_money(sum((entry.amount for entry in entries), Decimal("0"))),
            )
        )
