"""Request schemas for Customer API"""

from typing import Optional
from pydantic import BaseModel, Field
from src.domain.rate_card import MilkType


class UpdateCustomerRequestSchema(BaseModel):
    """
    Request schema for PATCH /customers/{customer_id}

    Send only the fields to change; null clears phone or address.
    """

    external_id: Optional[str] = Field(default=None, min_length=1, max_length=64)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = None
    default_milk_type: Optional[MilkType] = None
    is_active: Optional[bool] = Field(default=None, description="false deactivates the farmer")
