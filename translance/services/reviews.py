"""Review ledger services and aggregate rating upkeep."""
from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from translance.models.account import Account
from translance.models.bid import Bid, BidStatus
from translance.models.project import REVIEWABLE_STATUSES, Project
from translance.models.review import Review
from translance.schemas.review import ReviewCreate, ReviewUpdate
from translance.services.accounts import get_account_or_404
from translance.services.projects import get_project_or_404
from translance.utils.audit import actor_for, log_audit
from translance.utils.errors import conflict, forbidden, not_found, validation_error
from translance.utils.money import mean_rating

logger = logging.getLogger(__name__)


def _accepted_bidder_id(db: Session, project: Project) -> int | None:
    stmt = select(Bid.bidder_id).where(Bid.project_id == project.id, Bid.status == BidStatus.ACCEPTED)
    return db.scalars(stmt).first()


def recompute_rating(db: Session, account_id: int) -> Decimal:
    """Recompute and store the mean rating ``account_id`` has received.

    The account row is locked first (``FOR UPDATE`` where the backend supports
    it) so concurrent review writes for the same reviewee apply one at a time.
    Must run inside the caller's transaction, after the review write is flushed.
    """

    account = db.scalars(
        select(Account).where(Account.id == account_id).with_for_update()
    ).one()
    ratings = db.scalars(select(Review.rating).where(Review.reviewee_id == account_id)).all()
    account.rating = mean_rating(ratings)
    return account.rating


def create_review(db: Session, reviewer: Account, payload: ReviewCreate) -> Review:
    project = get_project_or_404(db, payload.project_id)
    if project.status not in REVIEWABLE_STATUSES:
        raise conflict("PROJECT_NOT_COMPLETED", "Project must be completed before reviewing")

    freelancer_id = _accepted_bidder_id(db, project)
    participants = {project.owner_id, freelancer_id} - {None}
    if reviewer.id not in participants:
        raise forbidden("NOT_PROJECT_PARTICIPANT", "Not authorized to review this project")
    if payload.reviewee_id == reviewer.id or payload.reviewee_id not in participants:
        raise validation_error(
            "INVALID_REVIEWEE", "Reviewee must be the other participant of this project"
        )
    get_account_or_404(db, payload.reviewee_id)

    duplicate = db.scalars(
        select(Review).where(
            Review.project_id == project.id,
            Review.reviewer_id == reviewer.id,
            Review.reviewee_id == payload.reviewee_id,
        )
    ).first()
    if duplicate is not None:
        raise conflict("DUPLICATE_REVIEW", "You have already reviewed this user for this project")

    review = Review(
        project_id=project.id,
        reviewer_id=reviewer.id,
        reviewee_id=payload.reviewee_id,
        rating=payload.rating,
        comment=payload.comment,
    )
    db.add(review)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise conflict("DUPLICATE_REVIEW", "You have already reviewed this user for this project") from exc

    new_rating = recompute_rating(db, payload.reviewee_id)
    log_audit(
        db,
        actor=actor_for(reviewer),
        action="REVIEW_CREATED",
        entity="Review",
        entity_id=review.id,
        data={
            "project_id": project.id,
            "reviewee_id": payload.reviewee_id,
            "rating": payload.rating,
            "reviewee_rating": str(new_rating),
        },
    )
    db.commit()
    db.refresh(review)
    logger.info(
        "Review created",
        extra={"review_id": review.id, "reviewee_id": review.reviewee_id, "rating": review.rating},
    )
    return review


def update_review(db: Session, review_id: int, caller: Account, payload: ReviewUpdate) -> Review:
    review = db.get(Review, review_id)
    if review is None:
        raise not_found("REVIEW_NOT_FOUND", "Review not found")
    if review.reviewer_id != caller.id:
        raise forbidden("NOT_REVIEWER", "Not authorized to update this review")

    changes = payload.model_dump(exclude_unset=True)
    rating_changed = changes.get("rating") is not None and changes["rating"] != review.rating
    if changes.get("rating") is not None:
        review.rating = changes["rating"]
    if "comment" in changes:
        comment = changes["comment"]
        review.comment = comment.strip() if comment is not None else None

    data: dict[str, object] = {"fields": sorted(changes)}
    if rating_changed:
        db.flush()
        data["reviewee_rating"] = str(recompute_rating(db, review.reviewee_id))

    log_audit(
        db,
        actor=actor_for(caller),
        action="REVIEW_UPDATED",
        entity="Review",
        entity_id=review.id,
        data=data,
    )
    db.commit()
    db.refresh(review)
    return review


def summary_for(db: Session, account_id: int) -> tuple[list[Review], Decimal]:
    """Reviews ``account_id`` received, newest first, with their mean rating."""

    get_account_or_404(db, account_id)
    stmt = (
        select(Review)
        .where(Review.reviewee_id == account_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    reviews = list(db.scalars(stmt).unique().all())
    return reviews, mean_rating(review.rating for review in reviews)


__all__ = ["recompute_rating", "create_review", "update_review", "summary_for"]
