"""Data Transfer Objects for Customer Use Cases"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.rate_card import MilkType


class CreateCustomerCommandDTO(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=64, description="Collection unit customer id (CID)")
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = None
    default_milk_type: Optional[MilkType] = Field(default=None, description="Defaults to the configured DEFAULT_MILK_TYPE")

    class Config:
        json_schema_extra = {
            "example": {
                "external_id": "1042",
                "name": "Ramesh Patil",
                "phone": "9876543210",
                "default_milk_type": "BUFFALO",
            }
        }


class CustomerDTO(BaseModel):
    id: int
    external_id: str
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    default_milk_type: MilkType
    is_active: bool
    created_at: datetime


class UpdateCustomerCommandDTO(BaseModel):
    """
    Command DTO for editing a farmer

    Only fields present in the request are applied (model_fields_set);
    an explicit null clears phone/address. is_active=false deactivates.
    """

    customer_id: int
    external_id: Optional[str] = Field(default=None, min_length=1, max_length=64)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = None
    default_milk_type: Optional[MilkType] = None
    is_active: Optional[bool] = None


class ListCustomersResponseDTO(BaseModel):
    customers: List[CustomerDTO] = Field(default_factory=list)
    total: int
