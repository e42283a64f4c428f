"""Audit logging helper utilities."""
from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy.orm import Session

from translance.models.audit import AuditLog
from translance.utils.time import utcnow


SENSITIVE_KEYS = {
    "email",
    "password",
    "token",
    "client_secret",
    "payment_intent_id",
    "profile_picture",
}


def _mask_value(key: str, value: Any) -> Any:
    if value is None:
        return None

    if key in {"password", "token", "client_secret"}:
        return "***"

    if key == "email":
        text = str(value)
        if "@" in text:
            _, domain = text.split("@", 1)
            return f"***@{domain}"
        return "***"

    if key == "payment_intent_id":
        text = str(value)
        if len(text) <= 6:
            return "***"
        return f"***{text[-4:]}"

    if key == "profile_picture":
        text = str(value)
        if "/" in text:
            prefix = text.rsplit("/", 1)[0]
            return f"{prefix}/***"
        return "***"

    return value


def sanitize_payload_for_audit(data: Any) -> Any:
    """Return a copy of ``data`` with obvious PII fields masked."""

    if isinstance(data, Mapping):
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            masked_value = _mask_value(key, value) if key in SENSITIVE_KEYS else value
            sanitized[key] = sanitize_payload_for_audit(masked_value)
        return sanitized

    if isinstance(data, list):
        return [sanitize_payload_for_audit(item) for item in data]

    return data


def log_audit(
    db: Session,
    *,
    actor: str,
    action: str,
    entity: str,
    entity_id: int | None,
    data: dict | None = None,
) -> None:
    """Persist an audit entry in the shared AuditLog table."""

    db.add(
        AuditLog(
            actor=actor,
            action=action,
            entity=entity,
            entity_id=entity_id if entity_id is not None else 0,
            data_json=sanitize_payload_for_audit(data or {}),
            at=utcnow(),
        )
    )


def actor_for(account: Any, fallback: str = "system") -> str:
    """Return the canonical actor string for an authenticated account."""

    account_id = getattr(account, "id", None)
    if account_id is not None:
        return f"account:{account_id}"
    return fallback


__all__ = ["sanitize_payload_for_audit", "log_audit", "actor_for"]
