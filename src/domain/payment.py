"""Payment Domain Entity"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from src.domain.base import BaseModel, IdType


class PaymentMode(str, Enum):
    CASH = "CASH"
    UPI = "UPI"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHEQUE = "CHEQUE"


class Payment(BaseModel, table=True):
    """
    Payment - Cash paid out to a farmer

    Domain Rules:
    - amount > 0
    - advance_used records how much of the requested payment was absorbed
      by outstanding advances before this row was written
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint('amount > 0', name='payment_amount_positive'),
        CheckConstraint('advance_used >= 0', name='payment_advance_used_non_negative'),
        Index('ix_payments_customer_date', 'customer_id', 'payment_date'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    customer_id: int = Field(
        sa_column=Column(IdType, ForeignKey("customers.id"), nullable=False),
    )

    payment_date: date = Field(default_factory=date.today)

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Cash paid (> 0)"
    )

    mode: PaymentMode = Field(default=PaymentMode.CASH)

    reference: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
        description="UPI/cheque/bank reference"
    )

    note: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
    )

    advance_used: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
        description="Portion of the requested amount settled from advances"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
