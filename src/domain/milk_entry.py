"""Milk Entry Domain Entity

One farmer's pour in one shift, priced at ingestion time.
"""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from src.domain.base import BaseModel, IdType
from src.domain.rate_card import MilkType


class Shift(str, Enum):
    """Collection shift"""
    MORNING = "M"
    EVENING = "E"


class EntrySource(str, Enum):
    """Where an entry came from"""
    MANUAL = "MANUAL"    # Operator typed it in
    DEVICE = "DEVICE"    # Decoded from the collection unit stream


class MilkEntry(BaseModel, table=True):
    """
    Milk Entry - A priced collection record

    Domain Rules:
    - amount > 0 always
    - amount == round(quantity_litre * rate_per_litre, 2) when the rate came
      from a rate card or an operator override
    - rate_per_litre == round(amount / quantity_litre, 2) when the amount was
      supplied directly (device or operator)
    - Immutable once created except through an explicit correction
    """

    __tablename__ = "milk_entries"
    __table_args__ = (
        CheckConstraint('amount > 0', name='entry_amount_positive'),
        CheckConstraint('quantity_litre > 0', name='entry_quantity_positive'),
        Index('ix_milk_entries_customer_date', 'customer_id', 'entry_date'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique entry identifier (auto-increment)"
    )

    customer_id: int = Field(
        sa_column=Column(IdType, ForeignKey("customers.id"), nullable=False),
        description="Foreign key to Customer"
    )

    entry_date: date = Field(description="Collection date")

    entry_time: Optional[time] = Field(default=None, description="Collection time")

    shift: Shift = Field(description="M (morning) or E (evening)")

    milk_type: MilkType = Field(description="Milk type poured")

    quantity_litre: Decimal = Field(
        sa_column=Column(Numeric(10, 3), nullable=False),
        description="Quantity in litres"
    )

    fat: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(5, 2), nullable=True),
        description="Fat percentage"
    )

    snf: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(5, 2), nullable=True),
        description="Solids-not-fat percentage"
    )

    clr: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(5, 2), nullable=True),
        description="Corrected lactometer reading"
    )

    rate_per_litre: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Price per litre applied"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Amount credited to the farmer (> 0)"
    )

    source: EntrySource = Field(
        default=EntrySource.MANUAL,
        description="MANUAL or DEVICE"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)
