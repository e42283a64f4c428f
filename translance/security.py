"""Security dependencies for session token validation and role enforcement."""
from __future__ import annotations

from typing import Callable, Set

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from translance.db import get_db
from translance.models.account import Account, AccountRole
from translance.utils.errors import auth_error, forbidden
from translance.utils.time import utcnow
from translance.utils.tokens import find_valid_token


def _extract_token(authorization: str | None = Header(default=None)) -> str | None:
    """Read the session token from ``Authorization: Bearer ...``."""
    if authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1].strip()
        return token or None
    return None


def require_token(
    db: Session = Depends(get_db),
    token: str | None = Depends(_extract_token),
) -> str:
    """Return the raw bearer token once it has been checked against the store."""
    if not token:
        raise auth_error("NO_SESSION", "Access token required.")
    if find_valid_token(db, token) is None:
        raise auth_error("INVALID_SESSION", "Invalid or expired token.")
    return token


def require_account(
    db: Session = Depends(get_db),
    token: str | None = Depends(_extract_token),
) -> Account:
    """Validate the bearer token and return the account it belongs to."""
    if not token:
        raise auth_error("NO_SESSION", "Access token required.")

    session_row = find_valid_token(db, token)
    if session_row is None:
        raise auth_error("INVALID_SESSION", "Invalid or expired token.")

    account = db.get(Account, session_row.account_id)
    if account is None:
        raise auth_error("INVALID_SESSION", "Account no longer exists.")

    session_row.last_used_at = utcnow()
    db.commit()
    return account


def require_role(allowed: Set[AccountRole]) -> Callable:
    """Enforce that the authenticated account has one of the allowed roles."""

    if not allowed:
        raise RuntimeError("require_role needs a non-empty set of AccountRole")

    def _dep(account: Account = Depends(require_account)) -> Account:
        if account.role in allowed:
            return account
        raise forbidden(
            "INSUFFICIENT_ROLE",
            f"Requires one of: {sorted(role.value for role in allowed)}",
        )

    return _dep


__all__ = ["require_account", "require_role", "require_token"]
