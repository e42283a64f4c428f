"""Review model."""
from sqlalchemy import CheckConstraint, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Review(Base):
    """Post-completion rating one project participant gives the other."""

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        UniqueConstraint(
            "project_id", "reviewer_id", "reviewee_id", name="uq_reviews_project_reviewer_reviewee"
        ),
    )

    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reviewer_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False, index=True)
    reviewee_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False, index=True)
    rating: Mapped[int] = mapped_column(nullable=False)
    comment: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    project = relationship("Project", back_populates="reviews")
    reviewer = relationship("Account", foreign_keys=[reviewer_id], lazy="joined")
    reviewee = relationship("Account", foreign_keys=[reviewee_id])
