from sqlalchemy import create_engine

from translance.db import enable_sqlite_foreign_keys


def _foreign_keys(target) -> int:
    with target.connect() as connection:
        return connection.exec_driver_sql("PRAGMA foreign_keys").scalar()


def test_foreign_keys_only_on_configured_engine():
    configured = enable_sqlite_foreign_keys(create_engine("sqlite://"))
    plain = create_engine("sqlite://")
    try:
        assert _foreign_keys(configured) == 1
        assert _foreign_keys(plain) == 0
    finally:
        configured.dispose()
        plain.dispose()
