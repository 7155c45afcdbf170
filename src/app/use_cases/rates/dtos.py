"""Data Transfer Objects for Rate Use Cases"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from src.domain.rate_card import MilkType


class CreateRateCardCommandDTO(BaseModel):
    """
    Command DTO for creating a rate card

    Ranges are half-open [min, max); omit a bound for "unbounded".
    """

    milk_type: MilkType = Field(..., description="Milk type priced by this band")
    min_fat: Optional[Decimal] = Field(default=None, ge=0, description="Inclusive lower fat bound")
    max_fat: Optional[Decimal] = Field(default=None, ge=0, description="Exclusive upper fat bound")
    min_snf: Optional[Decimal] = Field(default=None, ge=0, description="Inclusive lower SNF bound")
    max_snf: Optional[Decimal] = Field(default=None, ge=0, description="Exclusive upper SNF bound")
    rate_per_litre: Decimal = Field(..., gt=0, description="Price per litre (must be > 0)")
    effective_from: Optional[date] = Field(default=None, description="Informational start date")
    is_active: bool = Field(default=True)

    class Config:
        json_schema_extra = {
            "example": {
                "milk_type": "COW",
                "min_fat": "4.0",
                "max_fat": "4.5",
                "min_snf": None,
                "max_snf": None,
                "rate_per_litre": "36.25",
                "effective_from": "2024-04-01",
                "is_active": True,
            }
        }


class UpdateRateCardCommandDTO(BaseModel):
    """
    Command DTO for a partial rate card update

    Only fields present in the request are applied (model_fields_set).
    An explicit null clears a nullable bound.
    """

    card_id: int = Field(..., description="Rate card ID")
    milk_type: Optional[MilkType] = None
    min_fat: Optional[Decimal] = Field(default=None, ge=0)
    max_fat: Optional[Decimal] = Field(default=None, ge=0)
    min_snf: Optional[Decimal] = Field(default=None, ge=0)
    max_snf: Optional[Decimal] = Field(default=None, ge=0)
    rate_per_litre: Optional[Decimal] = Field(default=None, gt=0)
    effective_from: Optional[date] = None
    is_active: Optional[bool] = None


class RateCardDTO(BaseModel):
    id: int
    milk_type: MilkType
    min_fat: Optional[Decimal] = None
    max_fat: Optional[Decimal] = None
    min_snf: Optional[Decimal] = None
    max_snf: Optional[Decimal] = None
    rate_per_litre: Decimal
    effective_from: Optional[date] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ListRateCardsResponseDTO(BaseModel):
    rate_cards: List[RateCardDTO] = Field(default_factory=list)
    total: int = Field(..., description="Number of cards returned")


class RateQuoteCommandDTO(BaseModel):
    """Ask what a pour would be paid"""

    milk_type: MilkType
    fat: Optional[Decimal] = Field(default=None, ge=0, description="Defaults to the configured default fat")
    snf: Optional[Decimal] = Field(default=None, ge=0, description="Defaults to the configured default SNF")
    quantity_litre: Optional[Decimal] = Field(default=None, gt=0)


class RateQuoteResponseDTO(BaseModel):
    milk_type: MilkType
    fat: Decimal
    snf: Decimal
    rate_per_litre: Decimal = Field(..., description="0 when no active card matches")
    matched: bool
    quantity_litre: Optional[Decimal] = None
    amount: Optional[Decimal] = None


class SettingsResponseDTO(BaseModel):
    settings: Dict[str, str] = Field(default_factory=dict)


class UpdateSettingsCommandDTO(BaseModel):
    settings: Dict[str, str] = Field(..., description="Keys to create or overwrite")

    class Config:
        json_schema_extra = {
            "example": {"settings": {"default_fat": "4.0", "default_snf": "8.5", "dairy_name": "Gokul Dairy"}}
        }
