"""Advance Domain Entity

Money lent to a farmer ahead of collections, recovered from later payments.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from src.domain.base import BaseModel, IdType


class AdvanceStatus(str, Enum):
    ACTIVE = "active"        # Some amount still outstanding
    UTILIZED = "utilized"    # Fully recovered


class Advance(BaseModel, table=True):
    """
    Advance - Outstanding loan against a farmer's future collections

    Domain Rules:
    - amount > 0
    - 0 <= utilized_amount <= amount
    - status is UTILIZED iff utilized_amount == amount
    - Consumed oldest-created first by payment allocation
    """

    __tablename__ = "advances"
    __table_args__ = (
        CheckConstraint('amount > 0', name='advance_amount_positive'),
        CheckConstraint(
            'utilized_amount >= 0 AND utilized_amount <= amount',
            name='advance_utilized_within_amount',
        ),
        Index('ix_advances_customer_status', 'customer_id', 'status'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    customer_id: int = Field(
        sa_column=Column(IdType, ForeignKey("customers.id"), nullable=False),
    )

    advance_date: date = Field(default_factory=date.today)

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Amount advanced (> 0)"
    )

    utilized_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
        description="Amount already recovered"
    )

    status: AdvanceStatus = Field(default=AdvanceStatus.ACTIVE)

    note: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def outstanding(self) -> Decimal:
        """Amount still owed on this advance"""
        return self.amount - self.utilized_amount
