"""Escrow transaction schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from translance.models.escrow import EscrowStatus


class PaymentIntentCreate(BaseModel):
    project_id: int
    amount: Decimal = Field(ge=Decimal("1"))


class PaymentIntentRead(BaseModel):
    client_secret: str
    payment_intent_id: str


class PaymentConfirm(BaseModel):
    payment_intent_id: str = Field(min_length=1)
    project_id: int
    payee_id: int


class RefundRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class EscrowTransactionRead(BaseModel):
    id: int
    project_id: int
    payer_id: int
    payee_id: int
    amount: Decimal
    currency: str
    status: EscrowStatus
    funded_at: datetime | None = None
    settled_at: datetime | None = None
    refund_reason: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
