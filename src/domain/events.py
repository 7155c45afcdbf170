"""Domain Events

Published on the in-process event bus after the state they describe is
committed. Delivery is best effort.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, Field
from src.domain.base import generate_uuid


class EventEnvelope(BaseModel):
    """Fields common to every event"""
    event_id: str = Field(default_factory=generate_uuid)
    occurred_at: datetime = Field(default_factory=datetime.utcnow)


class DecoderErrorType(str, Enum):
    PARSE_ERROR = "PARSE_ERROR"      # Packet could not be decoded
    RATE_ERROR = "RATE_ERROR"        # No rate card matched
    INGEST_ERROR = "INGEST_ERROR"    # Any other ingestion failure
    QUEUE_FULL = "QUEUE_FULL"        # Listener backlog full, packet not ingested


class EntryCreated(EventEnvelope):
    name: Literal["entry.created"] = "entry.created"
    entry_id: int
    customer_id: int
    customer_external_id: Optional[str] = None
    customer_name: Optional[str] = None
    entry_date: str
    shift: str
    milk_type: str
    quantity_litre: Decimal
    fat: Optional[Decimal] = None
    snf: Optional[Decimal] = None
    rate_per_litre: Decimal
    amount: Decimal
    source: str


class DecoderError(EventEnvelope):
    name: Literal["decoder.error"] = "decoder.error"
    error_type: DecoderErrorType
    reason: str
    raw_packet: Dict[str, Any] = Field(default_factory=dict)


class PaymentRecorded(EventEnvelope):
    name: Literal["payment.recorded"] = "payment.recorded"
    payment_id: int
    customer_id: int
    amount: Decimal
    advance_used: Decimal
    mode: str


DomainEvent = Union[EntryCreated, DecoderError, PaymentRecorded]
