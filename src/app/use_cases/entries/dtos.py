"""Data Transfer Objects for Entry Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, model_validator
from src.domain.milk_entry import EntrySource, Shift
from src.domain.rate_card import MilkType


class DecodedPacketDTO(BaseModel):
    """
    One farmer's pour as decoded from the collection unit stream

    Produced by AmcuProtocolDecoder; consumed by IngestPacket.
    """

    customer_external_id: str = Field(..., description="CID sent by the device")
    quantity_litre: Decimal = Field(..., gt=0, description="QTY")
    fat: Optional[Decimal] = Field(default=None, description="FAT (None when absent, zero or non-numeric)")
    snf: Optional[Decimal] = Field(default=None, description="SNF")
    clr: Optional[Decimal] = Field(default=None, description="CLR")
    amount: Optional[Decimal] = Field(default=None, description="AMT computed by the device")
    shift: Shift = Field(..., description="SHIFT or derived from the packet time")
    milk_type: Optional[MilkType] = Field(default=None, description="MILK; None means customer default")
    entry_date: date
    entry_time: time
    raw: Dict[str, str] = Field(default_factory=dict, description="Field map as received")


class IngestEntryCommandDTO(BaseModel):
    """
    Command DTO for recording a milk entry

    Identify the customer by customer_id or customer_external_id.
    Pricing precedence: amount, then rate_per_litre, then rate cards.
    """

    customer_id: Optional[int] = Field(default=None, description="Internal customer ID")
    customer_external_id: Optional[str] = Field(default=None, description="Collection unit customer id (CID)")
    entry_date: date = Field(default_factory=date.today)
    entry_time: Optional[time] = None
    shift: Shift
    milk_type: Optional[MilkType] = Field(default=None, description="Defaults to the customer's milk type")
    quantity_litre: Decimal = Field(..., gt=0, description="Quantity in litres (must be > 0)")
    fat: Optional[Decimal] = Field(default=None, ge=0)
    snf: Optional[Decimal] = Field(default=None, ge=0)
    clr: Optional[Decimal] = Field(default=None, ge=0)
    rate_per_litre: Optional[Decimal] = Field(default=None, gt=0, description="Operator rate override")
    amount: Optional[Decimal] = Field(default=None, description="Amount supplied directly; rate is derived")
    source: EntrySource = Field(default=EntrySource.MANUAL)
    notes: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def require_customer(self):
        if self.customer_id is None and not self.customer_external_id:
            raise ValueError("customer_id or customer_external_id is required")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "customer_external_id": "1042",
                "entry_date": "2024-06-01",
                "shift": "M",
                "milk_type": "COW",
                "quantity_litre": "5.25",
                "fat": "4.1",
                "snf": "8.6",
            }
        }


class CorrectEntryCommandDTO(BaseModel):
    """
    Command DTO for an explicit entry correction

    Only fields present in the request are applied (model_fields_set);
    an explicit null clears fat/snf/clr/entry_time/notes.
    """

    entry_id: int
    entry_date: Optional[date] = None
    entry_time: Optional[time] = None
    shift: Optional[Shift] = None
    milk_type: Optional[MilkType] = None
    quantity_litre: Optional[Decimal] = Field(default=None, gt=0)
    fat: Optional[Decimal] = Field(default=None, ge=0)
    snf: Optional[Decimal] = Field(default=None, ge=0)
    clr: Optional[Decimal] = Field(default=None, ge=0)
    rate_per_litre: Optional[Decimal] = Field(default=None, gt=0)
    amount: Optional[Decimal] = None
    notes: Optional[str] = Field(default=None, max_length=500)


class EntryResponseDTO(BaseModel):
    id: int
    customer_id: int
    entry_date: date
    entry_time: Optional[time] = None
    shift: Shift
    milk_type: MilkType
    quantity_litre: Decimal
    fat: Optional[Decimal] = None
    snf: Optional[Decimal] = None
    clr: Optional[Decimal] = None
    rate_per_litre: Decimal
    amount: Decimal
    source: EntrySource
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ListEntriesResponseDTO(BaseModel):
    entries: List[EntryResponseDTO] = Field(default_factory=list)
    total: int
    total_litres: Decimal
    total_amount: Decimal


class PacketIngestResultDTO(BaseModel):
    """Outcome of one packet from the collection unit"""

    parsed_ok: bool
    log_id: Optional[int] = None
    entry: Optional[EntryResponseDTO] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None


class AmcuLogDTO(BaseModel):
    id: int
    raw_text: str
    parsed_ok: bool
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    entry_id: Optional[int] = None
    created_at: datetime
