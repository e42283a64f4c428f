"""Bid model."""
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, Enum as SqlEnum, ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class BidStatus(str, PyEnum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class Bid(Base):
    """A freelancer's proposed price and timeline for a posted project."""

    __tablename__ = "bids"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_bids_positive_amount"),
        UniqueConstraint("project_id", "bidder_id", name="uq_bids_project_bidder"),
        Index("ix_bids_project_status", "project_id", "status"),
    )

    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    bidder_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    estimated_time: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[BidStatus] = mapped_column(
        SqlEnum(BidStatus, name="bidstatus"), default=BidStatus.PENDING, nullable=False
    )

    project = relationship("Project", back_populates="bids")
    bidder = relationship("Account", lazy="joined")
