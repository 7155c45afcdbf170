"""Wiring from decoder outcomes to the ingestion use cases

Each outcome is processed in its own session so one bad packet can never
poison the next.
"""

import logging
from typing import Optional
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from src.adapter.repositories.amcu_log_repository import SqlAlchemyAmcuLogRepository
from src.adapter.repositories.customer_repository import SqlAlchemyCustomerRepository
from src.adapter.repositories.milk_entry_repository import SqlAlchemyMilkEntryRepository
from src.adapter.repositories.rate_card_repository import SqlAlchemyRateCardRepository
from src.adapter.repositories.setting_repository import SqlAlchemySettingRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.services.rate_cache import RateCache
from src.app.use_cases.entries import IngestEntry, IngestPacket, RecordDecodeFailure, PacketIngestResultDTO
from src.app.use_cases.rates.rate_engine import RateEngine
from .protocol_decoder import DecodeOutcome

logger = logging.getLogger(__name__)


class PacketIngestor:
    """
    Turns DecodeOutcomes into stored entries and packet logs

    Usage:
        ingestor = PacketIngestor(session_factory, rate_cache, event_bus)
        for outcome in decoder.feed(chunk):
            await ingestor.process(outcome)
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker],
        rate_cache: RateCache,
        event_publisher: Optional[EventPublisher] = None,
        rate_engine_options: Optional[dict] = None,
    ):
        self.session_factory = session_factory
        self.rate_cache = rate_cache
        self.event_publisher = event_publisher
        self.rate_engine_options = rate_engine_options or {}

    async def process(self, outcome: DecodeOutcome) -> PacketIngestResultDTO:
        """
        Ingest or record one outcome

        Returns:
            PacketIngestResultDTO describing what happened
        """
        async with self.session_factory() as session:
            return await self.process_in_session(session, outcome)

    async def record_dropped(self, outcome: DecodeOutcome, reason: str) -> PacketIngestResultDTO:
        """
        Log a packet that was never ingested and raise decoder.error (QUEUE_FULL)

        Args:
            outcome: The outcome that could not be queued
            reason: Operator-facing explanation
        """
        async with self.session_factory() as session:
            result = await RecordDecodeFailure(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyAmcuLogRepository(session),
                self.event_publisher,
            ).execute(outcome.raw, reason, raw_text=outcome.raw_text, code="QUEUE_FULL")
            return result.value

    async def process_in_session(self, session: AsyncSession, outcome: DecodeOutcome) -> PacketIngestResultDTO:
        """Same as process() but inside a caller-owned session"""
        uow = SqlAlchemyUnitOfWork(session)
        amcu_log_repo = SqlAlchemyAmcuLogRepository(session)

        if not outcome.ok:
            result = await RecordDecodeFailure(uow, amcu_log_repo, self.event_publisher).execute(
                outcome.raw, outcome.error.reason, raw_text=outcome.raw_text
            )
            return result.value

        rate_engine = RateEngine(
            rate_card_repo=SqlAlchemyRateCardRepository(session),
            setting_repo=SqlAlchemySettingRepository(session),
            cache=self.rate_cache,
            **self.rate_engine_options,
        )
        ingest_entry = IngestEntry(
            uow=uow,
            customer_repo=SqlAlchemyCustomerRepository(session),
            entry_repo=SqlAlchemyMilkEntryRepository(session),
            rate_engine=rate_engine,
            event_publisher=self.event_publisher,
        )
        result = await IngestPacket(uow, ingest_entry, amcu_log_repo, self.event_publisher).execute(
            outcome.packet, raw_text=outcome.raw_text
        )

        if result.is_ok():
            return result.value
        return PacketIngestResultDTO(
            parsed_ok=False,
            error_code=result.error.code,
            error_message=result.error.message,
        )
