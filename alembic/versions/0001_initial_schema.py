"""initial marketplace schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

ACCOUNT_ROLE = sa.Enum("CLIENT", "FREELANCER", name="accountrole")
PROJECT_STATUS = sa.Enum(
    "POSTED", "IN_PROGRESS", "COMPLETED", "PAID", "CANCELLED", name="projectstatus"
)
BID_STATUS = sa.Enum("PENDING", "ACCEPTED", "REJECTED", name="bidstatus")
ESCROW_STATUS = sa.Enum("PENDING", "RELEASED", "REFUNDED", name="escrowstatus")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", ACCOUNT_ROLE, nullable=False),
        sa.Column("rating", sa.Numeric(2, 1), nullable=False, server_default="0.0"),
        sa.Column("profile_picture", sa.String(length=512), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="ck_accounts_rating_range"),
    )

    op.create_table(
        "account_languages",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.Integer,
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("language", sa.String(length=64), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("account_id", "language", name="uq_account_languages_account_language"),
    )
    op.create_index("ix_account_languages_account_id", "account_languages", ["account_id"])
    op.create_index("ix_account_languages_language", "account_languages", ["language"])

    op.create_table(
        "session_tokens",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.Integer,
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("prefix", sa.String(length=32), nullable=False),
        sa.Column("key_hash", sa.String(length=128), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_session_tokens_account_id", "session_tokens", ["account_id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("source_language", sa.String(length=64), nullable=False),
        sa.Column("target_language", sa.String(length=64), nullable=False),
        sa.Column("budget", sa.Numeric(18, 2), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", PROJECT_STATUS, nullable=False, server_default="POSTED"),
        sa.Column("attached_files", sa.JSON, nullable=False),
        *_timestamps(),
        sa.CheckConstraint("budget > 0", name="ck_projects_positive_budget"),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])
    op.create_index("ix_projects_status", "projects", ["status"])
    op.create_index("ix_projects_languages", "projects", ["source_language", "target_language"])
    op.create_index("ix_projects_created_at", "projects", ["created_at"])

    op.create_table(
        "bids",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "project_id",
            sa.Integer,
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("bidder_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("estimated_time", sa.String(length=100), nullable=False),
        sa.Column("status", BID_STATUS, nullable=False, server_default="PENDING"),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_bids_positive_amount"),
        sa.UniqueConstraint("project_id", "bidder_id", name="uq_bids_project_bidder"),
    )
    op.create_index("ix_bids_project_id", "bids", ["project_id"])
    op.create_index("ix_bids_bidder_id", "bids", ["bidder_id"])
    op.create_index("ix_bids_project_status", "bids", ["project_id", "status"])

    op.create_table(
        "escrow_transactions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "project_id",
            sa.Integer,
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("payer_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("payee_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="usd"),
        sa.Column("status", ESCROW_STATUS, nullable=False, server_default="PENDING"),
        sa.Column("payment_intent_id", sa.String(length=128), nullable=True, unique=True),
        sa.Column("funded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("settled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refund_reason", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_escrow_transactions_positive_amount"),
    )
    op.create_index("ix_escrow_transactions_payer_id", "escrow_transactions", ["payer_id"])
    op.create_index("ix_escrow_transactions_payee_id", "escrow_transactions", ["payee_id"])
    op.create_index("ix_escrow_transactions_status", "escrow_transactions", ["status"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "project_id",
            sa.Integer,
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("reviewer_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("reviewee_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.String(length=1000), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        sa.UniqueConstraint(
            "project_id", "reviewer_id", "reviewee_id", name="uq_reviews_project_reviewer_reviewee"
        ),
    )
    op.create_index("ix_reviews_project_id", "reviews", ["project_id"])
    op.create_index("ix_reviews_reviewer_id", "reviews", ["reviewer_id"])
    op.create_index("ix_reviews_reviewee_id", "reviews", ["reviewee_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer, nullable=False),
        sa.Column("data_json", sa.JSON, nullable=False),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity", "entity_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_logs_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("reviews")
    op.drop_table("escrow_transactions")
    op.drop_table("bids")
    op.drop_table("projects")
    op.drop_table("session_tokens")
    op.drop_table("account_languages")
    op.drop_table("accounts")
    bind = op.get_bind()
    for enum_type in (ESCROW_STATUS, BID_STATUS, PROJECT_STATUS, ACCOUNT_ROLE):
        enum_type.drop(bind, checkfirst=True)
