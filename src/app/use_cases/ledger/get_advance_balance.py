"""
Get Advance Balance Use Case

Summarizes what a farmer still owes on advances.
"""
from libs.result import Result, Return, Error
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.advance_repository import AdvanceRepository
from src.domain.advance import AdvanceStatus
from src.domain.money import ZERO
from .create_advance import to_advance_dto
from .dtos import AdvanceBalanceResponseDTO


class GetAdvanceBalance:

    def __init__(self, customer_repo: CustomerRepository, advance_repo: AdvanceRepository):
        self.customer_repo = customer_repo
        self.advance_repo = advance_repo

    async def execute(self, customer_id: int) -> Result[AdvanceBalanceResponseDTO]:
        """
        Args:
            customer_id: Customer ID

        Returns:
            Result[AdvanceBalanceResponseDTO]: totals over all advances;
            available_balance counts active advances only
        """
        customer = await self.customer_repo.get_by_id(customer_id)
        if not customer:
            return Return.err(
                Error(code="CUSTOMER_NOT_FOUND", message=f"Customer {customer_id} not found")
            )

        advances = await self.advance_repo.list_by_customer(customer_id)
        active = [advance for advance in advances if advance.status == AdvanceStatus.ACTIVE]

        return Return.ok(
            AdvanceBalanceResponseDTO(
                customer_id=customer_id,
                total_advanced=sum((advance.amount for advance in advances), ZERO),
                total_utilized=sum((advance.utilized_amount for advance in advances), ZERO),
                available_balance=sum((advance.outstanding for advance in active), ZERO),
                active_count=len(active),
                advances=[to_advance_dto(advance) for advance in advances],
            )
        )
