"""Advance Utilization Domain Entity

Append-only audit trail of advance draw-downs made by payment allocation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Numeric
from src.domain.base import BaseModel, IdType


class AdvanceUtilization(BaseModel, table=True):
    """
    Advance Utilization - One draw-down of one advance

    Domain Rules:
    - Rows are immutable (append-only)
    - utilized_after == utilized_before + amount
    - payment_id is None when the whole payment was absorbed by advances
      and no Payment row was written
    """

    __tablename__ = "advance_utilizations"
    __table_args__ = (
        Index('ix_advance_utilizations_advance', 'advance_id'),
        Index('ix_advance_utilizations_customer', 'customer_id', 'created_at'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    advance_id: int = Field(
        sa_column=Column(IdType, ForeignKey("advances.id"), nullable=False),
    )

    customer_id: int = Field(
        sa_column=Column(IdType, ForeignKey("customers.id"), nullable=False),
    )

    payment_id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, ForeignKey("payments.id"), nullable=True),
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Amount drawn from the advance"
    )

    utilized_before: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
    )

    utilized_after: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
