"""Account store: registration, sessions, profiles and freelancer search."""
from __future__ import annotations

import json
import logging
from decimal import Decimal

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from translance.config import get_settings
from translance.models.account import Account, AccountLanguage, AccountRole
from translance.models.session_token import SessionToken
from translance.schemas.account import LoginRequest, RegisterRequest
from translance.utils.audit import actor_for, log_audit
from translance.utils.errors import auth_error, conflict, not_found, validation_error
from translance.utils.tokens import (
    hash_key,
    hash_password,
    issue_session_token,
    password_needs_rehash,
    verify_password,
)
from translance.utils.uploads import IMAGE_EXTENSIONS, remove_files, save_upload

logger = logging.getLogger(__name__)


def register(db: Session, payload: RegisterRequest) -> tuple[Account, str]:
    """Create an account and open its first session."""

    existing = db.scalars(select(Account).where(Account.email == payload.email)).first()
    if existing:
        raise conflict("ACCOUNT_EXISTS", "User already exists with this email")

    account = Account(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role,
        rating=Decimal("0.0"),
    )
    if payload.role == AccountRole.FREELANCER:
        account.languages = payload.languages
    db.add(account)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise conflict("ACCOUNT_EXISTS", "User already exists with this email") from exc

    token = issue_session_token(db, account.id)
    log_audit(
        db,
        actor=actor_for(account),
        action="ACCOUNT_REGISTERED",
        entity="Account",
        entity_id=account.id,
        data={"email": account.email, "role": account.role.value},
    )
    db.commit()
    db.refresh(account)
    logger.info("Account registered", extra={"account_id": account.id, "role": account.role.value})
    return account, token


def login(db: Session, payload: LoginRequest) -> tuple[Account, str]:
    account = db.scalars(select(Account).where(Account.email == payload.email)).first()
    if account is None or not verify_password(payload.password, account.password_hash):
        logger.info("Login rejected", extra={"reason": "INVALID_CREDENTIALS"})
        raise auth_error("INVALID_CREDENTIALS", "Invalid credentials")

    if password_needs_rehash(account.password_hash):
        account.password_hash = hash_password(payload.password)
    token = issue_session_token(db, account.id)
    log_audit(
        db,
        actor=actor_for(account),
        action="ACCOUNT_LOGIN",
        entity="Account",
        entity_id=account.id,
    )
    db.commit()
    return account, token


def logout(db: Session, token: str) -> None:
    """Revoke the presented session token; revoking twice is a no-op."""

    row = db.scalars(select(SessionToken).where(SessionToken.key_hash == hash_key(token))).first()
    if row is None or not row.is_active:
        return
    row.is_active = False
    log_audit(
        db,
        actor=f"account:{row.account_id}",
        action="ACCOUNT_LOGOUT",
        entity="SessionToken",
        entity_id=row.id,
    )
    db.commit()


def get_account_or_404(db: Session, account_id: int) -> Account:
    account = db.get(Account, account_id)
    if account is None:
        raise not_found("ACCOUNT_NOT_FOUND", "User not found")
    return account


def _parse_languages(raw: str) -> list[str]:
    """Languages arrive as a JSON array inside a multipart form field."""

    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise validation_error("INVALID_LANGUAGES", "Languages must be an array") from exc
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise validation_error("INVALID_LANGUAGES", "Languages must be an array")
    return value


def update_profile(
    db: Session,
    account: Account,
    *,
    name: str | None = None,
    languages: str | None = None,
    picture: UploadFile | None = None,
) -> Account:
    """Update name, languages (freelancers only) and profile picture."""

    changed: dict[str, object] = {}
    stored: str | None = None
    previous: str | None = None
    if name is not None:
        cleaned = name.strip()
        if len(cleaned) < 2:
            raise validation_error("INVALID_NAME", "Name must be at least 2 characters")
        account.name = cleaned
        changed["name"] = cleaned

    if languages is not None and account.role == AccountRole.FREELANCER:
        account.languages = _parse_languages(languages)
        changed["languages"] = account.languages

    if picture is not None and picture.filename:
        settings = get_settings()
        stored = save_upload(
            picture,
            subdir="profiles",
            allowed_extensions=IMAGE_EXTENSIONS,
            max_bytes=settings.MAX_PROFILE_PICTURE_BYTES,
        )
        previous = account.profile_picture
        account.profile_picture = stored
        changed["profile_picture"] = stored

    if not changed:
        return account

    try:
        log_audit(
            db,
            actor=actor_for(account),
            action="ACCOUNT_PROFILE_UPDATED",
            entity="Account",
            entity_id=account.id,
            data=changed,
        )
        db.commit()
    except Exception:
        db.rollback()
        if stored:
            remove_files([stored])
        raise

    # The old picture goes only once the new one is committed.
    if previous:
        remove_files([previous])
    db.refresh(account)
    return account


def search_freelancers(
    db: Session, *, language: str | None = None, min_rating: Decimal | None = None
) -> list[Account]:
    stmt = select(Account).where(Account.role == AccountRole.FREELANCER)
    if language:
        stmt = stmt.where(
            Account.id.in_(
                select(AccountLanguage.account_id).where(AccountLanguage.language == language)
            )
        )
    if min_rating is not None:
        stmt = stmt.where(Account.rating >= min_rating)
    stmt = stmt.order_by(Account.rating.desc(), Account.id)
    return list(db.scalars(stmt).all())


__all__ = [
    "register",
    "login",
    "logout",
    "get_account_or_404",
    "update_profile",
    "search_freelancers",
]
