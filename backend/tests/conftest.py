"""Shared test fixtures for all test modules."""

import contextlib
import uuid
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import database as db_module
from app.core.database import Base, get_db
from app.main import app
from app.models.company import Company
from app.repositories.api_key_repository import ApiKeyRepository
from app.repositories.integration_repository import IntegrationRepository
from app.schemas.api_key import ApiKeyCreate
from app.schemas.integration import IntegrationCreate

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

# Well-known default company ID used across all tests
DEFAULT_COMPANY_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")

KEVEL_API = "https://api.kevel.co/v1"
SALESFORCE_INSTANCE = "https://acme.my.salesforce.com"


def _seed_default_company(session: Session) -> None:
    """Insert a default company used by all tests."""
    company = session.query(Company).filter(Company.id == DEFAULT_COMPANY_ID).first()
    if company is None:
        company = Company(
            id=DEFAULT_COMPANY_ID,
            name="Default Test Company",
        )
        session.add(company)
        session.commit()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Clears data after each test.
    """
    # Patch module-level engine and session factory
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    # Seed default company so all tests can reference it
    session = _TestSessionLocal()
    try:
        _seed_default_company(session)
    finally:
        session.close()

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    # Restore originals
    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def default_company_id():
    """Return the default company ID for tests."""
    return DEFAULT_COMPANY_ID


@pytest.fixture
def db_session():
    """Create a database session for direct service and repository testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def api_key(db_session):
    """Raw API key of the default company."""
    _, raw_key = ApiKeyRepository(db_session).create(
        DEFAULT_COMPANY_ID, ApiKeyCreate(name="Test Key")
    )
    return raw_key


@pytest.fixture
def client(api_key):
    """Test client authenticated as the default company."""
    test_client = TestClient(app)
    test_client.headers["Authorization"] = f"Bearer {api_key}"
    return test_client


def create_integration(
    db: Session,
    provider: str,
    credentials: dict[str, Any] | None = None,
    configuration: dict[str, Any] | None = None,
    company_id: uuid.UUID = DEFAULT_COMPANY_ID,
    name: str | None = None,
):
    integration_type = "ad_server" if provider == "kevel" else "crm"
    return IntegrationRepository(db).create(
        IntegrationCreate(
            name=name or f"{provider} integration",
            integration_type=integration_type,
            provider_type=provider,
            credentials=credentials or {},
            configuration=configuration or {},
        ),
        company_id,
    )


@pytest.fixture
def kevel_integration(db_session):
    return create_integration(
        db_session,
        "kevel",
        credentials={"api_key": "kv_test_key"},
        configuration={"network_id": 1234},
    )


@pytest.fixture
def salesforce_integration(db_session):
    return create_integration(
        db_session,
        "salesforce",
        credentials={
            "client_id": "sf_client",
            "client_secret": "sf_secret",
            "refresh_token": "sf_refresh",
        },
    )


Handler = Callable[[httpx.Request], httpx.Response]


class FakeProvider:
    """Scripted provider API served through ``httpx.MockTransport``.

    Routes are keyed on (method, path). A route is either a fixed
    (status, json body) pair or a handler callable. Unrouted requests get 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any] | Handler] = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def on(
        self,
        method: str,
        path: str,
        body: Any = None,
        status: int = 200,
        handler: Handler | None = None,
    ) -> "FakeProvider":
        self.routes[(method.upper(), path)] = handler or (status, body)
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"no route {request.url.path}"})
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, json=body)


@pytest.fixture
def fake_provider():
    return FakeProvider()
