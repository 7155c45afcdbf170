"""Request schemas for Entry API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date, time
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, model_validator
from src.domain.milk_entry import Shift
from src.domain.rate_card import MilkType


class CreateEntryRequestSchema(BaseModel):
    """
    Request schema for a manual milk entry

    Used for POST /entries endpoint.
    """

    customer_id: Optional[int] = Field(default=None, description="Internal customer ID")
    customer_external_id: Optional[str] = Field(default=None, description="Collection unit customer id")
    entry_date: date = Field(default_factory=date.today)
    entry_time: Optional[time] = None
    shift: Shift
    milk_type: Optional[MilkType] = None
    quantity_litre: Decimal = Field(..., gt=0, description="Quantity in litres (must be > 0)")
    fat: Optional[Decimal] = Field(default=None, ge=0)
    snf: Optional[Decimal] = Field(default=None, ge=0)
    clr: Optional[Decimal] = Field(default=None, ge=0)
    rate_per_litre: Optional[Decimal] = Field(default=None, gt=0, description="Rate override")
    amount: Optional[Decimal] = Field(default=None, description="Amount override; rate is derived")
    notes: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def require_customer(self):
        if self.customer_id is None and not self.customer_external_id:
            raise ValueError("customer_id or customer_external_id is required")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": 1,
                "entry_date": "2024-06-01",
                "shift": "E",
                "quantity_litre": "6.50",
                "fat": "6.8",
                "snf": "9.0",
            }
        }


class CorrectEntryRequestSchema(BaseModel):
    """
    Request schema for PATCH /entries/{entry_id}

    Send only the fields to change; null clears optional readings.
    """

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
