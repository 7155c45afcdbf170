"""Data Transfer Objects for Ledger Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.advance import AdvanceStatus
from src.domain.payment import PaymentMode


class LedgerLineKind(str, Enum):
    MILK = "MILK"
    PAYMENT = "PAYMENT"
    ADVANCE = "ADVANCE"


class LedgerLineDTO(BaseModel):
    """
    One passbook line

    Derived on every request, never stored.
    """

    kind: LedgerLineKind
    reference_id: int = Field(..., description="ID of the entry, payment or advance")
    line_date: date
    description: str
    credit: Decimal = Field(..., description="Money owed to the farmer")
    debit: Decimal = Field(..., description="Money paid or advanced to the farmer")
    running_balance: Decimal


class StatementSummaryDTO(BaseModel):
    total_milk_litres: Decimal
    total_milk_amount: Decimal
    total_payments: Decimal
    total_outstanding_advance: Decimal
    closing_balance: Decimal = Field(
        ...,
        description="total_milk_amount - total_payments - total_outstanding_advance"
    )
    entry_count: int
    payment_count: int
    advance_count: int


class StatementResponseDTO(BaseModel):
    customer_id: int
    customer_external_id: str
    customer_name: str
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    lines: List[LedgerLineDTO] = Field(default_factory=list)
    summary: StatementSummaryDTO

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": 1,
                "customer_external_id": "1042",
                "customer_name": "Ramesh Patil",
                "date_from": None,
                "date_to": None,
                "lines": [
                    {
                        "kind": "MILK",
                        "reference_id": 10,
                        "line_date": "2024-06-01",
                        "description": "Milk M COW 10.000L @ 50.00",
                        "credit": "500.00",
                        "debit": "0.00",
                        "running_balance": "500.00",
                    }
                ],
                "summary": {
                    "total_milk_litres": "10.000",
                    "total_milk_amount": "500.00",
                    "total_payments": "0.00",
                    "total_outstanding_advance": "0.00",
                    "closing_balance": "500.00",
                    "entry_count": 1,
                    "payment_count": 0,
                    "advance_count": 0,
                },
            }
        }


class ApplyPaymentCommandDTO(BaseModel):
    """
    Command DTO for paying a farmer

    With use_advance, outstanding advances absorb the amount first
    (oldest-created first); only the remainder becomes a Payment.
    """

    customer_id: int
    amount: Decimal = Field(..., gt=0, description="Requested payment (must be > 0)")
    payment_date: date = Field(default_factory=date.today)
    mode: PaymentMode = Field(default=PaymentMode.CASH)
    reference: Optional[str] = Field(default=None, max_length=100)
    note: Optional[str] = Field(default=None, max_length=400)
    use_advance: bool = Field(default=False, description="Settle outstanding advances first")

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": 1,
                "amount": "1500.00",
                "payment_date": "2024-06-10",
                "mode": "UPI",
                "reference": "UPI-88231",
                "use_advance": True,
            }
        }


class PaymentDTO(BaseModel):
    id: int
    customer_id: int
    payment_date: date
    amount: Decimal
    mode: PaymentMode
    reference: Optional[str] = None
    note: Optional[str] = None
    advance_used: Decimal
    created_at: datetime


class AdvanceAllocationDTO(BaseModel):
    advance_id: int
    amount: Decimal = Field(..., description="Drawn from this advance")
    utilized_before: Decimal
    utilized_after: Decimal
    status: AdvanceStatus


class ApplyPaymentResponseDTO(BaseModel):
    customer_id: int
    requested_amount: Decimal
    advance_used: Decimal
    payment: Optional[PaymentDTO] = Field(
        default=None,
        description="None when advances absorbed the whole amount"
    )
    allocations: List[AdvanceAllocationDTO] = Field(default_factory=list)
    message: str


class CreateAdvanceCommandDTO(BaseModel):
    customer_id: int
    amount: Decimal = Field(..., gt=0, description="Amount advanced (must be > 0)")
    advance_date: date = Field(default_factory=date.today)
    note: Optional[str] = Field(default=None, max_length=500)


class AdvanceDTO(BaseModel):
    id: int
    customer_id: int
    advance_date: date
    amount: Decimal
    utilized_amount: Decimal
    outstanding: Decimal
    status: AdvanceStatus
    note: Optional[str] = None
    created_at: datetime


class AdvanceBalanceResponseDTO(BaseModel):
    customer_id: int
    total_advanced: Decimal
    total_utilized: Decimal
    available_balance: Decimal = Field(..., description="Outstanding across active advances")
    active_count: int
    advances: List[AdvanceDTO] = Field(default_factory=list)


class ListPaymentsResponseDTO(BaseModel):
    payments: List[PaymentDTO] = Field(default_factory=list)
    total: int
    total_amount: Decimal


class CorrectPaymentCommandDTO(BaseModel):
    """
    Command DTO for correcting a recorded payment

    Only fields present in the request are applied (model_fields_set);
    an explicit null clears reference/note. advance_used is history and
    cannot be edited.
    """

    payment_id: int
    payment_date: Optional[date] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    mode: Optional[PaymentMode] = None
    reference: Optional[str] = Field(default=None, max_length=100)
    note: Optional[str] = Field(default=None, max_length=400)


class ListAdvancesResponseDTO(BaseModel):
    advances: List[AdvanceDTO] = Field(default_factory=list)
    total: int
    total_outstanding: Decimal


class UpdateAdvanceCommandDTO(BaseModel):
    """
    Command DTO for correcting an advance

    Only fields present in the request are applied (model_fields_set).
    status follows utilized_amount and is never set directly.
    """

    advance_id: int
    advance_date: Optional[date] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    utilized_amount: Optional[Decimal] = Field(default=None, ge=0)
    note: Optional[str] = Field(default=None, max_length=500)
