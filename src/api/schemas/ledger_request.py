"""Request schemas for Ledger API"""

from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from src.domain.payment import PaymentMode


class ApplyPaymentRequestSchema(BaseModel):
    """
    Request schema for paying a farmer

    Used for POST /customers/{customer_id}/payments endpoint.
    """

    amount: Decimal = Field(..., gt=0, description="Payment amount (must be > 0)")
    payment_date: date = Field(default_factory=date.today)
    mode: PaymentMode = Field(default=PaymentMode.CASH)
    reference: Optional[str] = Field(default=None, max_length=100)
    note: Optional[str] = Field(default=None, max_length=400)
    use_advance: bool = Field(default=False, description="Recover outstanding advances first")

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "1500.00",
                "payment_date": "2024-06-10",
                "mode": "CASH",
                "use_advance": True,
            }
        }


class CreateAdvanceRequestSchema(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Amount advanced (must be > 0)")
    advance_date: date = Field(default_factory=date.today)
    note: Optional[str] = Field(default=None, max_length=500)


class CorrectPaymentRequestSchema(BaseModel):
    """
    Request schema for PATCH /payments/{payment_id}

    Send only the fields to change; null clears reference or note.
    """

    payment_date: Optional[date] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    mode: Optional[PaymentMode] = None
    reference: Optional[str] = Field(default=None, max_length=100)
    note: Optional[str] = Field(default=None, max_length=400)


class UpdateAdvanceRequestSchema(BaseModel):
    """
    Request schema for PATCH /advances/{advance_id}

    status is derived from utilized_amount and cannot be sent.
    """

    advance_date: Optional[date] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    utilized_amount: Optional[Decimal] = Field(default=None, ge=0)
    note: Optional[str] = Field(default=None, max_length=500)

    class Config:
        extra = "forbid"
        json_schema_extra = {"example": {"utilized_amount": "250.00", "note": "Recovered in cash"}}
