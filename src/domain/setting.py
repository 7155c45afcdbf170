"""Setting Domain Entity

Global key/value configuration edited by the dairy operator
(default_fat, default_snf, dairy_name, ...).
"""

from datetime import datetime
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel


class Setting(BaseModel, table=True):
    __tablename__ = "settings"

    key: str = Field(
        sa_column=Column(String(100), primary_key=True),
    )

    value: str = Field(sa_column=Column(String(500), nullable=False))

    updated_at: datetime = Field(default_factory=datetime.utcnow)
