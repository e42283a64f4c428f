"""Bid ledger services."""
from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from translance.config import get_settings
from translance.models.account import Account
from translance.models.bid import Bid, BidStatus
from translance.models.escrow import EscrowStatus, EscrowTransaction
from translance.models.project import Project, ProjectStatus
from translance.schemas.bid import BidCreate
from translance.services.projects import get_project_or_404
from translance.utils.audit import actor_for, log_audit
from translance.utils.errors import conflict, forbidden, not_found, validation_error
from translance.utils.money import to_decimal
from translance.utils.time import utcnow

logger = logging.getLogger(__name__)


def _get_bid_or_404(db: Session, bid_id: int) -> Bid:
    bid = db.get(Bid, bid_id)
    if bid is None:
        raise not_found("BID_NOT_FOUND", "Bid not found")
    return bid


def _existing_bid(db: Session, project_id: int, bidder_id: int) -> Bid | None:
    stmt = select(Bid).where(Bid.project_id == project_id, Bid.bidder_id == bidder_id)
    return db.scalars(stmt).first()


def submit_bid(db: Session, bidder: Account, payload: BidCreate) -> Bid:
    """Record a PENDING bid from ``bidder`` on an open project."""

    project = get_project_or_404(db, payload.project_id)
    if project.status != ProjectStatus.POSTED:
        raise conflict("PROJECT_NOT_OPEN", "Project is no longer accepting bids")
    if project.owner_id == bidder.id:
        raise conflict("OWN_PROJECT", "Cannot bid on your own project")
    if not bidder.languages:
        raise validation_error(
            "LANGUAGES_REQUIRED", "Add at least one language to your profile before bidding"
        )
    if _existing_bid(db, project.id, bidder.id) is not None:
        raise conflict("DUPLICATE_BID", "You have already bid on this project")

    bid = Bid(
        project=project,
        bidder_id=bidder.id,
        amount=to_decimal(payload.amount),
        estimated_time=payload.estimated_time,
        status=BidStatus.PENDING,
    )
    db.add(bid)
    try:
        db.flush()
    except IntegrityError as exc:
        # A concurrent request from the same freelancer won the unique constraint.
        db.rollback()
        raise conflict("DUPLICATE_BID", "You have already bid on this project") from exc

    log_audit(
        db,
        actor=actor_for(bidder),
        action="BID_SUBMITTED",
        entity="Bid",
        entity_id=bid.id,
        data={"project_id": project.id, "amount": str(bid.amount)},
    )
    db.commit()
    db.refresh(bid)
    logger.info("Bid submitted", extra={"bid_id": bid.id, "project_id": project.id})
    return bid


def accept_bid(db: Session, bid_id: int, caller: Account) -> tuple[Bid, EscrowTransaction]:
    """Accept one bid and settle the rest of the project in a single transaction.

    Within one commit the target bid becomes ACCEPTED, the project moves to
    IN_PROGRESS, every other PENDING bid on the project becomes REJECTED and a
    PENDING escrow transaction for the bid amount is recorded. The project flip
    is a guarded ``UPDATE ... WHERE status = 'POSTED'`` so two concurrent
    acceptances cannot both succeed; any failure rolls back all four writes.
    """

    bid = _get_bid_or_404(db, bid_id)
    project = bid.project
    if project.owner_id != caller.id:
        raise forbidden("NOT_PROJECT_OWNER", "Not authorized to accept this bid")
    if project.status != ProjectStatus.POSTED:
        raise conflict("PROJECT_NOT_OPEN", "Project is no longer accepting bids")
    if bid.status != BidStatus.PENDING:
        raise conflict("BID_NOT_PENDING", "Bid cannot be accepted")

    now = utcnow()
    try:
        claimed = db.execute(
            update(Project)
            .where(Project.id == project.id, Project.status == ProjectStatus.POSTED)
            .values(status=ProjectStatus.IN_PROGRESS, updated_at=now)
        ).rowcount
        if claimed != 1:
            raise conflict("PROJECT_NOT_OPEN", "Project is no longer accepting bids")

        bid.status = BidStatus.ACCEPTED
        rejected = db.execute(
            update(Bid)
            .where(
                Bid.project_id == project.id,
                Bid.id != bid.id,
                Bid.status == BidStatus.PENDING,
            )
            .values(status=BidStatus.REJECTED, updated_at=now)
        ).rowcount

        escrow = db.scalars(
            select(EscrowTransaction).where(EscrowTransaction.project_id == project.id)
        ).first()
        if escrow is None:
            escrow = EscrowTransaction(
                project_id=project.id,
                payer_id=project.owner_id,
                payee_id=bid.bidder_id,
                amount=to_decimal(bid.amount),
                currency=get_settings().PAYMENT_CURRENCY,
                status=EscrowStatus.PENDING,
            )
            db.add(escrow)
        else:
            # Funds confirmed before acceptance: the hold now belongs to this bidder.
            escrow.payee_id = bid.bidder_id
        db.flush()

        log_audit(
            db,
            actor=actor_for(caller),
            action="BID_ACCEPTED",
            entity="Bid",
            entity_id=bid.id,
            data={
                "project_id": project.id,
                "amount": str(bid.amount),
                "rejected_bids": rejected,
                "escrow_id": escrow.id,
            },
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(bid)
    db.refresh(project)
    db.refresh(escrow)
    logger.info(
        "Bid accepted",
        extra={"bid_id": bid.id, "project_id": project.id, "escrow_id": escrow.id},
    )
    return bid, escrow


def reject_bid(db: Session, bid_id: int, caller: Account) -> Bid:
    bid = _get_bid_or_404(db, bid_id)
    if bid.project.owner_id != caller.id:
        raise forbidden("NOT_PROJECT_OWNER", "Not authorized to reject this bid")
    if bid.status != BidStatus.PENDING:
        raise conflict("BID_NOT_PENDING", "Bid cannot be rejected")

    bid.status = BidStatus.REJECTED
    log_audit(
        db,
        actor=actor_for(caller),
        action="BID_REJECTED",
        entity="Bid",
        entity_id=bid.id,
        data={"project_id": bid.project_id},
    )
    db.commit()
    db.refresh(bid)
    logger.info("Bid rejected", extra={"bid_id": bid.id, "project_id": bid.project_id})
    return bid


def list_for_project(db: Session, project_id: int) -> list[Bid]:
    get_project_or_404(db, project_id)
    stmt = select(Bid).where(Bid.project_id == project_id).order_by(Bid.created_at.desc(), Bid.id.desc())
    return list(db.scalars(stmt).unique().all())


def list_for_bidder(db: Session, bidder: Account) -> list[Bid]:
    stmt = select(Bid).where(Bid.bidder_id == bidder.id).order_by(Bid.created_at.desc(), Bid.id.desc())
    return list(db.scalars(stmt).unique().all())


__all__ = ["submit_bid", "accept_bid", "reject_bid", "list_for_project", "list_for_bidder"]
