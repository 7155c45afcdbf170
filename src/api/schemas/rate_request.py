"""Request schemas for Rate API"""

from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from src.domain.rate_card import MilkType


class UpdateRateCardRequestSchema(BaseModel):
    """
    Request schema for PATCH /rates/cards/{card_id}

    Send only the fields to change; null clears a bound.
    """

    milk_type: Optional[MilkType] = None
    min_fat: Optional[Decimal] = Field(default=None, ge=0)
    max_fat: Optional[Decimal] = Field(default=None, ge=0)
    min_snf: Optional[Decimal] = Field(default=None, ge=0)
    max_snf: Optional[Decimal] = Field(default=None, ge=0)
    rate_per_litre: Optional[Decimal] = Field(default=None, gt=0)
    effective_from: Optional[date] = None
    is_active: Optional[bool] = None
