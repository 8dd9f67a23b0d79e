"""Redeem request records."""
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class RedeemStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RedeemRequest(BaseModel):
    """Points a user asked to convert to currency."""

    id: str
    user_id: str
    user_email: str
    points: int = Field(gt=0)
    amount: float
    status: RedeemStatus = RedeemStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
