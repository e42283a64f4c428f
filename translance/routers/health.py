"""Health check endpoint."""
from __future__ import annotations

import logging

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter
from sqlalchemy import text

from translance.config import get_settings
from translance.db import get_engine

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)


def _db_status() -> str:
    """Return 'ok' if the DB is reachable, 'error' otherwise."""

    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok"
    except Exception:  # noqa: BLE001
        logger.exception("DB health check failed")
        return "error"


def _expected_migration_head() -> str | None:
    try:
        script = ScriptDirectory.from_config(Config("alembic.ini"))
        return script.get_current_head()
    except Exception:  # noqa: BLE001
        logger.exception("Failed to load Alembic head revision")
        return None


def _migrations_status() -> tuple[bool, str]:
    expected_head = _expected_migration_head()
    try:
        with get_engine().connect() as conn:
            current = conn.execute(text("SELECT version_num FROM alembic_version")).scalar()
    except Exception:  # noqa: BLE001
        logger.exception("Migration check failed")
        return False, "unknown"
    if expected_head is None:
        return False, "unknown"
    if current == expected_head:
        return True, "up_to_date"
    return False, "out_of_date"


@router.get("", summary="Health check")
def healthcheck() -> dict[str, object]:
    """Report database reachability, migration state and payment configuration."""

    settings = get_settings()
    db_status = _db_status()
    db_ok = db_status == "ok"
    if db_ok:
        migrations_ok, migrations_status = _migrations_status()
    else:
        migrations_ok, migrations_status = False, "unknown"
    return {
        "status": "ok" if db_ok and migrations_ok else "degraded",
        "env": settings.app_env,
        "db_ok": db_ok,
        "db_status": db_status,
        "migrations_ok": migrations_ok,
        "migrations_status": migrations_status,
        "stripe": {
            "enabled": bool(settings.STRIPE_ENABLED),
            "api_key_configured": bool(settings.STRIPE_SECRET_KEY),
            "currency": settings.PAYMENT_CURRENCY,
        },
    }
