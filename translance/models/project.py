"""Translation project model."""
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, DateTime, Enum as SqlEnum, ForeignKey, Index, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class ProjectStatus(str, PyEnum):
    """Lifecycle of a translation project."""

    POSTED = "POSTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


# Status changes an owner may request directly. IN_PROGRESS is entered only by
# accepting a bid and PAID only by releasing escrow.
OWNER_TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.POSTED: frozenset({ProjectStatus.CANCELLED}),
    ProjectStatus.IN_PROGRESS: frozenset({ProjectStatus.COMPLETED, ProjectStatus.CANCELLED}),
    ProjectStatus.COMPLETED: frozenset({ProjectStatus.CANCELLED}),
    ProjectStatus.PAID: frozenset(),
    ProjectStatus.CANCELLED: frozenset(),
}

REVIEWABLE_STATUSES = frozenset({ProjectStatus.COMPLETED, ProjectStatus.PAID})


class Project(Base):
    """A document translation job posted by a client."""

    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("budget > 0", name="ck_projects_positive_budget"),
        Index("ix_projects_status", "status"),
        Index("ix_projects_languages", "source_language", "target_language"),
        Index("ix_projects_created_at", "created_at"),
    )

    owner_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    source_language: Mapped[str] = mapped_column(String(64), nullable=False)
    target_language: Mapped[str] = mapped_column(String(64), nullable=False)
    budget: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[ProjectStatus] = mapped_column(
        SqlEnum(ProjectStatus, name="projectstatus"), default=ProjectStatus.POSTED, nullable=False
    )
    attached_files: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    owner = relationship("Account", lazy="joined")
    bids = relationship(
        "Bid",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Bid.created_at.desc()",
    )
    escrow = relationship(
        "EscrowTransaction",
        back_populates="project",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reviews = relationship(
        "Review", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def bid_count(self) -> int:
        return len(self.bids)
