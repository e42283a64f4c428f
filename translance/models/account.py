"""Account model."""
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, Enum as SqlEnum, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class AccountRole(str, PyEnum):
    """Marketplace side an account acts on."""

    CLIENT = "CLIENT"
    FREELANCER = "FREELANCER"


class Account(Base):
    """A client posting translation work or a freelance translator."""

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_accounts_rating_range"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[AccountRole] = mapped_column(SqlEnum(AccountRole, name="accountrole"), nullable=False)
    rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), default=Decimal("0.0"), nullable=False)
    profile_picture: Mapped[str | None] = mapped_column(String(512), nullable=True)

    language_links = relationship(
        "AccountLanguage",
        back_populates="account",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="AccountLanguage.language",
    )
    sessions = relationship("SessionToken", back_populates="account", cascade="all, delete-orphan")

    @property
    def languages(self) -> list[str]:
        return [link.language for link in self.language_links]

    @languages.setter
    def languages(self, values: list[str]) -> None:
        wanted = []
        for value in values:
            cleaned = value.strip()
            if cleaned and cleaned not in wanted:
                wanted.append(cleaned)
        kept = [link for link in self.language_links if link.language in wanted]
        known = {link.language for link in kept}
        self.language_links = kept + [AccountLanguage(language=lang) for lang in wanted if lang not in known]

    @property
    def is_freelancer(self) -> bool:
        return self.role == AccountRole.FREELANCER


class AccountLanguage(Base):
    """One language a freelancer translates from or into."""

    __tablename__ = "account_languages"
    __table_args__ = (
        UniqueConstraint("account_id", "language", name="uq_account_languages_account_language"),
    )

    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    language: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    account = relationship("Account", back_populates="language_links")
