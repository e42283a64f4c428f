"""ORM models package."""
from .account import Account, AccountLanguage, AccountRole
from .audit import AuditLog
from .base import Base
from .bid import Bid, BidStatus
from .escrow import EscrowStatus, EscrowTransaction
from .project import OWNER_TRANSITIONS, REVIEWABLE_STATUSES, Project, ProjectStatus
from .review import Review
from .session_token import SessionToken

__all__ = [
    "Account",
    "AccountLanguage",
    "AccountRole",
    "AuditLog",
    "Base",
    "Bid",
    "BidStatus",
    "EscrowStatus",
    "EscrowTransaction",
    "OWNER_TRANSITIONS",
    "REVIEWABLE_STATUSES",
    "Project",
    "ProjectStatus",
    "Review",
    "SessionToken",
]
