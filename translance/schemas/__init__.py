"""Schema package exports."""
from .account import (
    AccountPublic,
    AccountRead,
    AccountSummary,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
)
from .bid import BidAcceptance, BidCreate, BidRead
from .escrow import (
    EscrowTransactionRead,
    PaymentConfirm,
    PaymentIntentCreate,
    PaymentIntentRead,
    RefundRequest,
)
from .project import Pagination, ProjectDetail, ProjectPage, ProjectRead, ProjectUpdate
from .review import ReviewCreate, ReviewRead, ReviewSummary, ReviewUpdate

__all__ = [
    "AccountPublic",
    "AccountRead",
    "AccountSummary",
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "BidAcceptance",
    "BidCreate",
    "BidRead",
    "EscrowTransactionRead",
    "PaymentConfirm",
    "PaymentIntentCreate",
    "PaymentIntentRead",
    "RefundRequest",
    "Pagination",
    "ProjectDetail",
    "ProjectPage",
    "ProjectRead",
    "ProjectUpdate",
    "ReviewCreate",
    "ReviewRead",
    "ReviewSummary",
    "ReviewUpdate",
]
