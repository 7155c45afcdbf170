"""Rate Card Domain Entity

Tiered price-per-litre bands keyed by milk type, fat and SNF.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Numeric
from src.domain.base import BaseModel, IdType


class MilkType(str, Enum):
    """Milk types accepted at the collection centre"""
    COW = "COW"
    BUFFALO = "BUFFALO"
    MIXED = "MIXED"


class RateCard(BaseModel, table=True):
    """
    Rate Card - One price band for a milk type

    Domain Rules:
    - Ranges are half-open: min inclusive, max exclusive
    - A null bound is unbounded on that side
    - rate_per_litre must be positive
    - Cards are deactivated, never deleted
    - Overlapping active cards for one milk type are a data-quality bug;
      the lowest min_fat wins
    """

    __tablename__ = "rate_cards"
    __table_args__ = (
        CheckConstraint('rate_per_litre > 0', name='rate_per_litre_positive'),
        Index('ix_rate_cards_lookup', 'milk_type', 'is_active', 'min_fat'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique rate card identifier (auto-increment)"
    )

    milk_type: MilkType = Field(
        description="Milk type this band prices"
    )

    min_fat: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(5, 2), nullable=True),
        description="Inclusive lower fat bound (None = unbounded)"
    )

    max_fat: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(5, 2), nullable=True),
        description="Exclusive upper fat bound (None = unbounded)"
    )

    min_snf: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(5, 2), nullable=True),
        description="Inclusive lower SNF bound (None = unbounded)"
    )

    max_snf: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(5, 2), nullable=True),
        description="Exclusive upper SNF bound (None = unbounded)"
    )

    rate_per_litre: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Price per litre for this band"
    )

    effective_from: Optional[date] = Field(
        default=None,
        description="Informational start date of the band"
    )

    is_active: bool = Field(
        default=True,
        description="Inactive cards are ignored by rate lookups"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )
