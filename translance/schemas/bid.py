"""Bid schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from translance.models.bid import BidStatus
from translance.schemas.account import AccountPublic
from translance.schemas.escrow import EscrowTransactionRead


class BidCreate(BaseModel):
    project_id: int
    amount: Decimal = Field(ge=Decimal("1"))
    estimated_time: str = Field(min_length=1, max_length=100)

    @field_validator("estimated_time")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Estimated time required")
        return value.strip()


class BidRead(BaseModel):
    id: int
    project_id: int
    bidder_id: int
    amount: Decimal
    estimated_time: str
    status: BidStatus
    bidder: AccountPublic
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BidAcceptance(BaseModel):
    bid: BidRead
    transaction: EscrowTransactionRead
