"""Customer Domain Entity

A dairy farmer who pours milk at the collection centre.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, IdType
from src.domain.rate_card import MilkType


class Customer(BaseModel, table=True):
    """
    Customer - Farmer owning entries, payments and advances

    Domain Rules:
    - external_id is the id the collection unit sends as CID (unique)
    - default_milk_type applies when an entry omits the milk type
    - Inactive customers cannot receive entries or payments
    """

    __tablename__ = "customers"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique customer identifier (auto-increment)"
    )

    external_id: str = Field(
        sa_column=Column(String(64), unique=True, index=True, nullable=False),
        description="Collection unit customer id (CID)"
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Farmer name"
    )

    phone: Optional[str] = Field(default=None, description="Contact phone")

    address: Optional[str] = Field(default=None, description="Postal address")

    default_milk_type: MilkType = Field(
        default=MilkType.COW,
        description="Milk type used when an entry omits it"
    )

    is_active: bool = Field(default=True, description="Soft-delete flag")

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)
