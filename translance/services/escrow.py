"""Escrow transaction ledger services."""
from __future__ import annotations

import logging

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from translance.config import get_settings
from translance.models.account import Account, AccountRole
from translance.models.bid import Bid, BidStatus
from translance.models.escrow import EscrowStatus, EscrowTransaction
from translance.models.project import Project, ProjectStatus
from translance.schemas.escrow import PaymentConfirm, PaymentIntentCreate
from translance.services.accounts import get_account_or_404
from translance.services.payments import PaymentHold, PaymentProcessor, require_processor
from translance.services.projects import get_project_or_404
from translance.utils.audit import actor_for, log_audit
from translance.utils.errors import conflict, forbidden, not_found, validation_error
from translance.utils.money import to_decimal
from translance.utils.time import utcnow

logger = logging.getLogger(__name__)

_TERMINAL_PROJECT_STATUSES = {ProjectStatus.PAID, ProjectStatus.CANCELLED}
# Funds go to the freelancer only once work has started.
_RELEASABLE_PROJECT_STATUSES = {ProjectStatus.IN_PROGRESS, ProjectStatus.COMPLETED}


def _escrow_for_project(db: Session, project_id: int) -> EscrowTransaction | None:
    stmt = select(EscrowTransaction).where(EscrowTransaction.project_id == project_id)
    return db.scalars(stmt).first()


def _get_escrow_or_404(db: Session, transaction_id: int) -> EscrowTransaction:
    escrow = db.get(EscrowTransaction, transaction_id)
    if escrow is None:
        raise not_found("TRANSACTION_NOT_FOUND", "Transaction not found")
    return escrow


def create_payment_intent(
    db: Session,
    caller: Account,
    payload: PaymentIntentCreate,
    processor: PaymentProcessor,
) -> PaymentHold:
    """Ask the processor to hold funds for a project owned by ``caller``.

    The escrow row written at bid acceptance is an unfunded placeholder and does
    not block a hold; a row that already carries a confirmed payment or has
    been settled does.
    """

    project = get_project_or_404(db, payload.project_id)
    if project.owner_id != caller.id:
        raise forbidden("NOT_PROJECT_OWNER", "Not authorized for this project")
    if project.status in _TERMINAL_PROJECT_STATUSES:
        raise conflict("PROJECT_CLOSED", "Project is closed for payment")

    existing = _escrow_for_project(db, project.id)
    if existing is not None and (existing.is_funded or existing.status != EscrowStatus.PENDING):
        raise conflict("PAYMENT_EXISTS", "Payment already exists for this project")

    amount = to_decimal(payload.amount)
    hold = processor.create_hold(
        amount=amount,
        currency=get_settings().PAYMENT_CURRENCY,
        metadata={"project_id": str(project.id), "client_id": str(caller.id)},
    )
    log_audit(
        db,
        actor=actor_for(caller),
        action="PAYMENT_INTENT_CREATED",
        entity="Project",
        entity_id=project.id,
        data={"amount": str(amount), "payment_intent_id": hold.id},
    )
    db.commit()
    logger.info("Payment intent created", extra={"project_id": project.id})
    return hold


def _payee_for(db: Session, project: Project, payee_id: int) -> Account:
    """Once a bid is accepted only its bidder may be paid; before that, any freelancer."""

    accepted_bidder = db.scalars(
        select(Bid.bidder_id).where(Bid.project_id == project.id, Bid.status == BidStatus.ACCEPTED)
    ).first()
    if accepted_bidder is not None and payee_id != accepted_bidder:
        raise validation_error("INVALID_PAYEE", "Payee must be the accepted bidder")
    payee = get_account_or_404(db, payee_id)
    if payee.role != AccountRole.FREELANCER:
        raise validation_error("INVALID_PAYEE", "Payee must be a freelancer")
    return payee


def confirm_payment(
    db: Session,
    caller: Account,
    payload: PaymentConfirm,
    processor: PaymentProcessor,
) -> EscrowTransaction:
    """Verify the hold succeeded and record it as the project's PENDING escrow."""

    project = get_project_or_404(db, payload.project_id)
    if project.owner_id != caller.id:
        raise forbidden("NOT_PROJECT_OWNER", "Not authorized for this project")
    if project.status in _TERMINAL_PROJECT_STATUSES:
        raise conflict("PROJECT_CLOSED", "Project is closed for payment")
    payee = _payee_for(db, project, payload.payee_id)

    hold = processor.confirm_hold(payload.payment_intent_id)
    if not hold.succeeded:
        logger.info(
            "Payment confirmation refused",
            extra={"project_id": project.id, "hold_status": hold.status},
        )
        raise validation_error("PAYMENT_NOT_COMPLETED", "Payment not completed")
    hold_project = hold.metadata.get("project_id")
    if hold_project is not None and hold_project != str(project.id):
        raise validation_error("PAYMENT_PROJECT_MISMATCH", "Payment does not belong to this project")

    now = utcnow()
    escrow = _escrow_for_project(db, project.id)
    if escrow is None:
        escrow = EscrowTransaction(
            project_id=project.id,
            payer_id=caller.id,
            payee_id=payee.id,
            currency=hold.currency,
            status=EscrowStatus.PENDING,
        )
        db.add(escrow)
    elif escrow.status != EscrowStatus.PENDING:
        raise conflict("TRANSACTION_SETTLED", "Transaction is already settled")
    elif escrow.is_funded and escrow.payment_intent_id != hold.id:
        raise conflict("PAYMENT_EXISTS", "Payment already exists for this project")

    escrow.payee_id = payee.id
    escrow.amount = to_decimal(hold.amount)
    escrow.payment_intent_id = hold.id
    escrow.funded_at = escrow.funded_at or now
    db.flush()
    log_audit(
        db,
        actor=actor_for(caller),
        action="ESCROW_FUNDED",
        entity="EscrowTransaction",
        entity_id=escrow.id,
        data={
            "project_id": project.id,
            "amount": str(escrow.amount),
            "payment_intent_id": hold.id,
        },
    )
    db.commit()
    db.refresh(escrow)
    logger.info("Escrow funded", extra={"escrow_id": escrow.id, "project_id": project.id})
    return escrow


def _settle(
    db: Session,
    escrow: EscrowTransaction,
    *,
    escrow_status: EscrowStatus,
    project_status: ProjectStatus,
    from_statuses: set[ProjectStatus],
    refund_reason: str | None = None,
) -> None:
    """Flip escrow and project status in one commit.

    Both updates are guarded: the escrow must still be PENDING and the project
    must still be in one of ``from_statuses``. Losing either race is a conflict
    and rolls back both writes.
    """

    now = utcnow()
    values: dict[str, object] = {"status": escrow_status, "settled_at": now, "updated_at": now}
    if refund_reason is not None:
        values["refund_reason"] = refund_reason
    try:
        claimed = db.execute(
            update(EscrowTransaction)
            .where(
                EscrowTransaction.id == escrow.id,
                EscrowTransaction.status == EscrowStatus.PENDING,
            )
            .values(**values)
        ).rowcount
        if claimed != 1:
            raise conflict("TRANSACTION_NOT_PENDING", "Transaction is already settled")
        moved = db.execute(
            update(Project)
            .where(Project.id == escrow.project_id, Project.status.in_(list(from_statuses)))
            .values(status=project_status, updated_at=now)
        ).rowcount
        if moved != 1:
            raise conflict("PROJECT_STATUS_CHANGED", "Project cannot be settled in its current status")
    except Exception:
        db.rollback()
        raise


def release(
    db: Session,
    transaction_id: int,
    caller: Account,
    processor: PaymentProcessor | None,
) -> EscrowTransaction:
    """Release held funds to the freelancer: escrow RELEASED, project PAID."""

    escrow = _get_escrow_or_404(db, transaction_id)
    if escrow.payer_id != caller.id:
        raise forbidden("NOT_PAYER", "Not authorized to release this payment")
    if escrow.status != EscrowStatus.PENDING:
        raise conflict("TRANSACTION_NOT_PENDING", "Payment cannot be released")
    if escrow.project.status not in _RELEASABLE_PROJECT_STATUSES:
        raise conflict("PROJECT_NOT_RELEASABLE", "Project work has not started")

    if escrow.payment_intent_id:
        require_processor(processor).release(
            escrow.payment_intent_id,
            amount=escrow.amount,
            metadata={"project_id": str(escrow.project_id), "payee_id": str(escrow.payee_id)},
        )

    _settle(
        db,
        escrow,
        escrow_status=EscrowStatus.RELEASED,
        project_status=ProjectStatus.PAID,
        from_statuses=_RELEASABLE_PROJECT_STATUSES,
    )
    log_audit(
        db,
        actor=actor_for(caller),
        action="ESCROW_RELEASED",
        entity="EscrowTransaction",
        entity_id=escrow.id,
        data={"project_id": escrow.project_id, "amount": str(escrow.amount)},
    )
    db.commit()
    db.refresh(escrow)
    logger.info("Escrow released", extra={"escrow_id": escrow.id, "project_id": escrow.project_id})
    return escrow


def refund(
    db: Session,
    transaction_id: int,
    caller: Account,
    processor: PaymentProcessor | None,
    *,
    reason: str | None = None,
) -> EscrowTransaction:
    """Return held funds to the client: escrow REFUNDED, project CANCELLED."""

    escrow = _get_escrow_or_404(db, transaction_id)
    if escrow.payer_id != caller.id:
        raise forbidden("NOT_PAYER", "Not authorized to refund this payment")
    if escrow.status != EscrowStatus.PENDING:
        raise conflict("TRANSACTION_NOT_PENDING", "Payment cannot be refunded")
    if escrow.project.status in _TERMINAL_PROJECT_STATUSES:
        raise conflict("PROJECT_CLOSED", "Project is already closed")

    if escrow.payment_intent_id:
        require_processor(processor).refund(escrow.payment_intent_id, reason=reason)

    _settle(
        db,
        escrow,
        escrow_status=EscrowStatus.REFUNDED,
        project_status=ProjectStatus.CANCELLED,
        from_statuses=set(ProjectStatus) - _TERMINAL_PROJECT_STATUSES,
        refund_reason=reason,
    )
    log_audit(
        db,
        actor=actor_for(caller),
        action="ESCROW_REFUNDED",
        entity="EscrowTransaction",
        entity_id=escrow.id,
        data={"project_id": escrow.project_id, "reason": reason},
    )
    db.commit()
    db.refresh(escrow)
    logger.info("Escrow refunded", extra={"escrow_id": escrow.id, "project_id": escrow.project_id})
    return escrow


def list_for_account(db: Session, account: Account) -> list[EscrowTransaction]:
    stmt = (
        select(EscrowTransaction)
        .where(or_(EscrowTransaction.payer_id == account.id, EscrowTransaction.payee_id == account.id))
        .order_by(EscrowTransaction.created_at.desc(), EscrowTransaction.id.desc())
    )
    return list(db.scalars(stmt).all())


__all__ = [
    "create_payment_intent",
    "confirm_payment",
    "release",
    "refund",
    "list_for_account",
]
