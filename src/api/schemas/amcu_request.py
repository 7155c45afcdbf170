"""Request schemas for AMCU API"""

from pydantic import BaseModel, Field


class SimulatePacketRequestSchema(BaseModel):
    """
    Raw collection unit text, one or more packets

    Used for POST /amcu/simulate endpoint.
    """

    text: str = Field(..., min_length=1, description="KEY:VALUE lines, each packet closed by END")

    class Config:
        json_schema_extra = {
            "example": {"text": "CID:1042\nQTY:5.25\nFAT:4.1\nSNF:8.6\nSHIFT:M\nEND\n"}
        }
