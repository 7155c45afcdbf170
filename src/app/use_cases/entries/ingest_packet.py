"""IngestPacket Use Case

Bridges a decoded collection unit packet into IngestEntry and keeps the
packet-level log (amcu_logs) and decoder.error events in step.
"""

import logging
from typing import Dict, Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.repositories.amcu_log_repository import AmcuLogRepository
from src.domain.amcu_log import AmcuLog
from src.domain.events import DecoderError, DecoderErrorType
from src.domain.milk_entry import EntrySource
from .dtos import DecodedPacketDTO, IngestEntryCommandDTO, PacketIngestResultDTO
from .ingest_entry import IngestEntry

logger = logging.getLogger(__name__)

RATE_ERROR_CODES = {"RATE_UNAVAILABLE", "ZERO_AMOUNT_REJECTED"}


def classify_error(code: str) -> DecoderErrorType:
    if code == "DECODE_ERROR":
        return DecoderErrorType.PARSE_ERROR
    if code in RATE_ERROR_CODES:
        return DecoderErrorType.RATE_ERROR
    if code == "QUEUE_FULL":
        return DecoderErrorType.QUEUE_FULL
    return DecoderErrorType.INGEST_ERROR


class _PacketLogMixin:
    uow: UnitOfWork
    amcu_log_repo: AmcuLogRepository
    event_publisher: Optional[EventPublisher]

    async def _log(self, raw_text: str, error: Optional[Error], entry_id: Optional[int] = None) -> Optional[int]:
        try:
            log = await self.amcu_log_repo.create(
                AmcuLog(
                    raw_text=raw_text,
                    parsed_ok=error is None,
                    error_code=error.code if error else None,
                    error_message=error.message if error else None,
                    entry_id=entry_id,
                )
            )
            await self.uow.commit()
            return log.id
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to write AMCU log: {e}")
            return None

    def _publish_error(self, error: Error, raw: Dict[str, str]) -> None:
        if self.event_publisher is None:
            return
        try:
            self.event_publisher.publish(
                DecoderError(
                    error_type=classify_error(error.code),
                    reason=error.message,
                    raw_packet=dict(raw),
                )
            )
        except Exception as e:
            logger.error(f"Failed to publish decoder.error: {e}")


class IngestPacket(_PacketLogMixin):
    """
    Use Case: Ingest one decoded packet

    Flow:
    1. Map the packet to an IngestEntry command (source DEVICE)
    2. Run IngestEntry
    3. Log the packet (parsed_ok, error)
    4. On failure publish decoder.error (RATE_ERROR or INGEST_ERROR)

    A failed packet is reported in the result, never raised.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ingest_entry: IngestEntry,
        amcu_log_repo: AmcuLogRepository,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.uow = uow
        self.ingest_entry = ingest_entry
        self.amcu_log_repo = amcu_log_repo
        self.event_publisher = event_publisher

    async def execute(self, packet: DecodedPacketDTO, raw_text: Optional[str] = None) -> Result[PacketIngestResultDTO]:
        """
        Execute packet ingestion

        Args:
            packet: Decoded packet
            raw_text: Packet as received, for the log (rebuilt from packet.raw when omitted)

        Returns:
            Result[PacketIngestResultDTO]; is_err() mirrors the IngestEntry error
        """
        raw_text = raw_text or _raw_text(packet.raw)

        # Step 1: Map to command
        command = IngestEntryCommandDTO(
            customer_external_id=packet.customer_external_id,
            entry_date=packet.entry_date,
            entry_time=packet.entry_time,
            shift=packet.shift,
            milk_type=packet.milk_type,
            quantity_litre=packet.quantity_litre,
            fat=packet.fat,
            snf=packet.snf,
            clr=packet.clr,
            amount=packet.amount,
            source=EntrySource.DEVICE,
        )

        # Step 2: Ingest
        result = await self.ingest_entry.execute(command)

        # Step 3: Log
        if result.is_ok():
            log_id = await self._log(raw_text, None, entry_id=result.value.id)
            return Return.ok(PacketIngestResultDTO(parsed_ok=True, log_id=log_id, entry=result.value))

        error = result.error
        logger.error(f"AMCU packet from CID {packet.customer_external_id} failed: {error.code} {error.message}")
        await self._log(raw_text, error)

        # Step 4: Alert the operator
        self._publish_error(error, packet.raw)
        return Return.err(error)


class RecordDecodeFailure(_PacketLogMixin):
    """
    Use Case: Record a packet that never reached IngestEntry

    Logs it with parsed_ok=False and publishes decoder.error. The default
    code DECODE_ERROR (PARSE_ERROR) covers decoder rejections; the listener
    uses QUEUE_FULL for packets it had to drop.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        amcu_log_repo: AmcuLogRepository,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.uow = uow
        self.amcu_log_repo = amcu_log_repo
        self.event_publisher = event_publisher

    async def execute(
        self,
        raw: Dict[str, str],
        reason: str,
        raw_text: Optional[str] = None,
        code: str = "DECODE_ERROR",
    ) -> Result[PacketIngestResultDTO]:
        error = Error(code=code, message=reason)
        log_id = await self._log(raw_text or _raw_text(raw), error)
        self._publish_error(error, raw)
        return Return.ok(
            PacketIngestResultDTO(
                parsed_ok=False,
                log_id=log_id,
                error_code=error.code,
                error_message=error.message,
            )
        )


def _raw_text(raw: Dict[str, str]) -> str:
    return "\n".join([f"{key}:{value}" for key, value in raw.items()] + ["END"])
