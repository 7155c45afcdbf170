"""
Lookup Rate Use Case

Quotes the rate (and optionally the amount) a pour would be paid, using the
same engine and defaults as ingestion.
"""
from libs.result import Result, Return
from src.domain.money import ZERO
from .dtos import RateQuoteCommandDTO, RateQuoteResponseDTO
from .rate_engine import RateEngine


class LookupRate:

    def __init__(self, rate_engine: RateEngine):
        self.rate_engine = rate_engine

    async def execute(self, command: RateQuoteCommandDTO) -> Result[RateQuoteResponseDTO]:
        default_fat, default_snf = await self.rate_engine.get_default_quality()
        fat = command.fat if command.fat is not None else default_fat
        snf = command.snf if command.snf is not None else default_snf

        rate = await self.rate_engine.get_rate(command.milk_type, fat, snf)
        matched = rate > ZERO

        amount = None
        if matched and command.quantity_litre is not None:
            amount = self.rate_engine.calculate_amount(command.quantity_litre, rate)

        return Return.ok(
            RateQuoteResponseDTO(
                milk_type=command.milk_type,
                fat=fat,
                snf=snf,
                rate_per_litre=rate,
                matched=matched,
                quantity_litre=command.quantity_litre,
                amount=amount,
            )
        )
