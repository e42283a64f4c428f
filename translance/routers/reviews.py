"""Review endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from translance.db import get_db
from translance.models.account import Account
from translance.models.review import Review
from translance.schemas.review import ReviewCreate, ReviewRead, ReviewSummary, ReviewUpdate
from translance.security import require_account
from translance.services import reviews as reviews_service

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("/user/{account_id}", response_model=ReviewSummary)
def reviews_for_user(account_id: int, db: Session = Depends(get_db)) -> ReviewSummary:
    reviews, average = reviews_service.summary_for(db, account_id)
    return ReviewSummary(
        reviews=[ReviewRead.model_validate(review) for review in reviews],
        average_rating=average,
        total_reviews=len(reviews),
    )


@router.post("", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
def create_review(
    payload: ReviewCreate,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
) -> Review:
    """Review the other participant of a completed or paid project."""

    return reviews_service.create_review(db, account, payload)


@router.put("/{review_id}", response_model=ReviewRead)
def update_review(
    review_id: int,
    payload: ReviewUpdate,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
) -> Review:
    return reviews_service.update_review(db, review_id, account, payload)
