"""Escrow transaction endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from translance.db import get_db
from translance.models.account import Account
from translance.models.escrow import EscrowTransaction
from translance.schemas.escrow import (
    EscrowTransactionRead,
    PaymentConfirm,
    PaymentIntentCreate,
    PaymentIntentRead,
    RefundRequest,
)
from translance.security import require_account
from translance.services import escrow as escrow_service
from translance.services.payments import (
    PaymentProcessor,
    get_optional_payment_processor,
    get_payment_processor,
)
from translance.utils.errors import error_response

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("/my-transactions", response_model=list[EscrowTransactionRead])
def my_transactions(
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
) -> list[EscrowTransaction]:
    """Escrow rows where the caller is payer or payee."""

    return escrow_service.list_for_account(db, account)


@router.post("/create-payment-intent", response_model=PaymentIntentRead)
def create_payment_intent(
    payload: PaymentIntentCreate,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
    processor: PaymentProcessor = Depends(get_payment_processor),
) -> PaymentIntentRead:
    hold = escrow_service.create_payment_intent(db, account, payload, processor)
    if not hold.client_secret:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=error_response("PAYMENT_PROVIDER_ERROR", "Payment provider returned no client secret"),
        )
    return PaymentIntentRead(client_secret=hold.client_secret, payment_intent_id=hold.id)


@router.post("/confirm-payment", response_model=EscrowTransactionRead)
def confirm_payment(
    payload: PaymentConfirm,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
    processor: PaymentProcessor = Depends(get_payment_processor),
) -> EscrowTransaction:
    return escrow_service.confirm_payment(db, account, payload, processor)


@router.post("/{transaction_id}/release", response_model=EscrowTransactionRead)
def release_payment(
    transaction_id: int,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
    processor: PaymentProcessor | None = Depends(get_optional_payment_processor),
) -> EscrowTransaction:
    return escrow_service.release(db, transaction_id, account, processor)


@router.post("/{transaction_id}/refund", response_model=EscrowTransactionRead)
def refund_payment(
    transaction_id: int,
    payload: RefundRequest | None = None,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
    processor: PaymentProcessor | None = Depends(get_optional_payment_processor),
) -> EscrowTransaction:
    reason = payload.reason if payload is not None else None
    return escrow_service.refund(db, transaction_id, account, processor, reason=reason)
