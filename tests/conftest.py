"""Test configuration."""
import os
import tempfile
from collections.abc import AsyncIterator, Callable, Iterator
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite:///./translance_test.db")
os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")
os.environ.setdefault("UPLOAD_DIR", str(Path(tempfile.gettempdir()) / f"translance-test-{uuid4().hex[:8]}"))

from translance.main import app  # noqa: E402
from translance.db import enable_sqlite_foreign_keys, get_db  # noqa: E402
from translance.models import Account, AccountRole  # noqa: E402
from translance.services.payments import (  # noqa: E402
    PaymentHold,
    get_optional_payment_processor,
    get_payment_processor,
)
from translance.utils.tokens import hash_password, issue_session_token  # noqa: E402

DB_PATH = Path("./translance_test.db")


def _run_migrations() -> None:
    cfg = Config(str(Path(__file__).resolve().parents[1] / "alembic.ini"))
    cfg.set_main_option("script_location", str(Path(__file__).resolve().parents[1] / "alembic"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


if DB_PATH.exists():
    DB_PATH.unlink()

engine = enable_sqlite_foreign_keys(
    create_engine(
        os.environ["DATABASE_URL"],
        connect_args={"check_same_thread": False},
        future=True,
    )
)


# pysqlite needs explicit BEGIN for SAVEPOINT-based test isolation.
@event.listens_for(engine, "connect")
def _disable_pysqlite_begin(dbapi_connection, connection_record) -> None:
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn) -> None:
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
    expire_on_commit=False,
    join_transaction_mode="create_savepoint",
)

_run_migrations()


class FakeProcessor:
    """In-memory payment processor recording every call."""

    def __init__(self) -> None:
        self.holds: dict[str, PaymentHold] = {}
        self.released: list[str] = []
        self.refunded: list[tuple[str, str | None]] = []
        self.confirm_status = "succeeded"

    def create_hold(self, *, amount, currency, metadata):
        hold = PaymentHold(
            id=f"pi_test_{uuid4().hex[:12]}",
            status="requires_payment_method",
            amount=Decimal(amount),
            currency=currency,
            client_secret=f"secret_{uuid4().hex[:8]}",
            metadata=dict(metadata),
        )
        self.holds[hold.id] = hold
        return hold

    def confirm_hold(self, hold_id):
        hold = self.holds[hold_id]
        hold.status = self.confirm_status
        return hold

    def release(self, hold_id, *, amount, metadata):
        self.released.append(hold_id)

    def refund(self, hold_id, *, reason=None):
        self.refunded.append((hold_id, reason))


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def db_session() -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def processor() -> Iterator[FakeProcessor]:
    fake = FakeProcessor()
    app.dependency_overrides[get_payment_processor] = lambda: fake
    app.dependency_overrides[get_optional_payment_processor] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_payment_processor, None)
    app.dependency_overrides.pop(get_optional_payment_processor, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def make_account(db_session: Session) -> Callable[..., tuple[Account, dict[str, str]]]:
    """Factory creating an account with an open session; returns it with auth headers."""

    def _factory(
        role: AccountRole = AccountRole.CLIENT,
        *,
        name: str | None = None,
        languages: list[str] | None = None,
        password: str = "password123",
    ) -> tuple[Account, dict[str, str]]:
        account = Account(
            name=name or f"{role.value.lower()}-{uuid4().hex[:6]}",
            email=f"{role.value.lower()}-{uuid4().hex[:8]}@example.com",
            password_hash=hash_password(password),
            role=role,
            rating=Decimal("0.0"),
        )
        if role == AccountRole.FREELANCER:
            account.languages = languages if languages is not None else ["English", "Spanish"]
        db_session.add(account)
        db_session.flush()
        token = issue_session_token(db_session, account.id)
        db_session.commit()
        return account, {"Authorization": f"Bearer {token}"}

    return _factory


@pytest.fixture
def client_account(make_account):
    return make_account(AccountRole.CLIENT, name="John Client")


@pytest.fixture
def freelancer_account(make_account):
    return make_account(AccountRole.FREELANCER, name="Maria Translator")


async def post_project(client: AsyncClient, headers: dict[str, str], **overrides) -> dict:
    """Create a project through the API and return its JSON body."""

    form = {
        "title": "Website Translation",
        "description": "Translate the marketing site from English to Spanish.",
        "sourceLanguage": "English",
        "targetLanguage": "Spanish",
        "budget": "500",
    }
    form.update(overrides)
    response = await client.post("/projects", data=form, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def post_bid(client: AsyncClient, headers: dict[str, str], project_id: int, amount: str) -> dict:
    response = await client.post(
        "/bids",
        json={"project_id": project_id, "amount": amount, "estimated_time": "5 days"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
