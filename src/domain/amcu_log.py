"""AMCU Log Domain Entity

Raw record of every packet the collection unit sent, parsed or not.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String, Text
from src.domain.base import BaseModel, IdType


class AmcuLog(BaseModel, table=True):
    """
    AMCU Log - Packet-level audit of the device stream

    Domain Rules:
    - One row per finalized packet
    - parsed_ok is False when decoding or ingestion failed;
      error_code/error_message then say why
    """

    __tablename__ = "amcu_logs"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    raw_text: str = Field(sa_column=Column(Text, nullable=False))

    parsed_ok: bool = Field(default=False)

    error_code: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
    )

    error_message: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    entry_id: Optional[int] = Field(default=None, description="Entry created from this packet")

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
