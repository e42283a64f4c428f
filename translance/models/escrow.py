"""Escrow related models."""
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, DateTime, Enum as SqlEnum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class EscrowStatus(str, PyEnum):
    """Status of the funds held for a project."""

    PENDING = "PENDING"
    RELEASED = "RELEASED"
    REFUNDED = "REFUNDED"


class EscrowTransaction(Base):
    """Funds held by the platform for one project until released or refunded."""

    __tablename__ = "escrow_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_escrow_transactions_positive_amount"),
        Index("ix_escrow_transactions_status", "status"),
    )

    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    payer_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False, index=True)
    payee_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="usd", nullable=False)
    status: Mapped[EscrowStatus] = mapped_column(
        SqlEnum(EscrowStatus, name="escrowstatus"), default=EscrowStatus.PENDING, nullable=False
    )
    payment_intent_id: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)
    funded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    settled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    refund_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    project = relationship("Project", back_populates="escrow")
    payer = relationship("Account", foreign_keys=[payer_id])
    payee = relationship("Account", foreign_keys=[payee_id])

    @property
    def is_funded(self) -> bool:
        return self.payment_intent_id is not None
