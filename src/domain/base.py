"""Shared base for domain entities"""

import uuid
from sqlalchemy import BigInteger, Integer
from sqlmodel import SQLModel

# SQLite only autoincrements INTEGER PRIMARY KEY columns
IdType = BigInteger().with_variant(Integer, "sqlite")


class BaseModel(SQLModel):
    """Base class for all table models"""
    pass


def generate_uuid() -> str:
    return str(uuid.uuid4())
