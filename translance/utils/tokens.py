"""Session token and password hashing helpers."""
from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import timedelta
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from translance.config import get_settings
from translance.models.session_token import SessionToken
from translance.utils.time import as_utc, utcnow

_password_hasher = PasswordHasher()


def hash_key(raw: str) -> str:
    """Return an HMAC-SHA256 hash for the provided session token."""

    secret = get_settings().SECRET_KEY
    return hmac.new(secret.encode(), raw.encode(), hashlib.sha256).hexdigest()


def gen_token(prefix_len: int = 6) -> tuple[str, str, str]:
    """Generate a user-facing session token, its prefix, and the stored hash."""

    prefix = "tls_" + secrets.token_hex(prefix_len)[:prefix_len]
    suffix = secrets.token_urlsafe(32)
    raw = f"{prefix}.{suffix}"
    return raw, prefix, hash_key(raw)


def issue_session_token(db: Session, account_id: int) -> str:
    """Persist a new session for ``account_id`` and return the raw token once."""

    raw, prefix, key_hash = gen_token()
    ttl = timedelta(days=get_settings().SESSION_TTL_DAYS)
    db.add(
        SessionToken(
            account_id=account_id,
            prefix=prefix,
            key_hash=key_hash,
            is_active=True,
            expires_at=utcnow() + ttl,
        )
    )
    return raw


def find_valid_token(db: Session, raw: str) -> Optional[SessionToken]:
    """Return the matching active, unexpired session row if any."""

    stmt = select(SessionToken).where(
        SessionToken.key_hash == hash_key(raw), SessionToken.is_active.is_(True)
    )
    token = db.scalars(stmt).first()
    if token and (token.expires_at is None or as_utc(token.expires_at) > utcnow()):
        return token
    return None


def hash_password(password: str) -> str:
    """Hash a password with Argon2id; the encoded string carries its own salt and parameters."""

    return _password_hasher.hash(password)


def verify_password(password: str, encoded: str) -> bool:
    try:
        return _password_hasher.verify(encoded, password)
    except (VerificationError, InvalidHashError):
        return False


def password_needs_rehash(encoded: str) -> bool:
    return _password_hasher.check_needs_rehash(encoded)


__all__ = [
    "hash_key",
    "gen_token",
    "issue_session_token",
    "find_valid_token",
    "hash_password",
    "verify_password",
    "password_needs_rehash",
]
