"""Bid endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from translance.db import get_db
from translance.models.account import Account, AccountRole
from translance.models.bid import Bid
from translance.schemas.bid import BidAcceptance, BidCreate, BidRead
from translance.schemas.escrow import EscrowTransactionRead
from translance.security import require_account, require_role
from translance.services import bids as bids_service

router = APIRouter(prefix="/bids", tags=["bids"])

_require_freelancer = require_role({AccountRole.FREELANCER})


@router.get("/project/{project_id}", response_model=list[BidRead])
def list_project_bids(project_id: int, db: Session = Depends(get_db)) -> list[Bid]:
    return bids_service.list_for_project(db, project_id)


@router.get("/my-bids", response_model=list[BidRead])
def list_my_bids(
    db: Session = Depends(get_db),
    freelancer: Account = Depends(_require_freelancer),
) -> list[Bid]:
    return bids_service.list_for_bidder(db, freelancer)


@router.post("", response_model=BidRead, status_code=status.HTTP_201_CREATED)
def submit_bid(
    payload: BidCreate,
    db: Session = Depends(get_db),
    freelancer: Account = Depends(_require_freelancer),
) -> Bid:
    return bids_service.submit_bid(db, freelancer, payload)


@router.put("/{bid_id}/accept", response_model=BidAcceptance)
def accept_bid(
    bid_id: int,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
) -> BidAcceptance:
    """Accept a bid: rejects its siblings and opens the project's escrow."""

    bid, escrow = bids_service.accept_bid(db, bid_id, account)
    return BidAcceptance(
        bid=BidRead.model_validate(bid),
        transaction=EscrowTransactionRead.model_validate(escrow),
    )


@router.put("/{bid_id}/reject", response_model=BidRead)
def reject_bid(
    bid_id: int,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
) -> Bid:
    return bids_service.reject_bid(db, bid_id, account)
