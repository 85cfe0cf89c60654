import asyncio
import inspect
import os
import sys
import tempfile
from pathlib import Path

# Environment must be in place before payroll.core.config builds its Settings
_test_tmp_dir = tempfile.mkdtemp(prefix="payroll_test_")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATA_DIR", _test_tmp_dir)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-not-for-production")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-not-for-production")
# minimum bcrypt cost keeps the suite fast
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import payroll.models  # noqa: E402,F401
from payroll.core.tokens import TokenIssuer  # noqa: E402
from payroll.db.base import Base  # noqa: E402
from payroll.db.session import get_db, make_engine  # noqa: E402
from payroll.main import api  # noqa: E402


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def issuer():
    return TokenIssuer()


@pytest.fixture
def app(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    api.dependency_overrides[get_db] = _get_db
    yield api
    api.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def tenant_headers(client):
    """Factory: sign up, create a company, refresh, and return tenant-scoped auth headers."""

    def _make(email="owner@example.com", pan_vat="PAN-9001"):
        client.post("/api/auth/signup", json={"email": email, "password": "secret1"})
        session = client.post("/api/auth/login", json={"email": email, "password": "secret1"}).json()
        company = {
            "name": f"{email} Ltd",
            "entityType": "private_limited",
            "panVat": pan_vat,
            "address": "1 Main Road",
            "phone": "555-0100",
        }
        client.post("/api/company", json=company, headers={"Authorization": f"Bearer {session['access_token']}"})
        rotated = client.post(
            "/api/auth/refresh", headers={"Authorization": f"Bearer {session['refresh_token']}"}
        ).json()
        return {"Authorization": f"Bearer {rotated['access_token']}"}

    return _make


def pytest_pyfunc_call(pyfuncitem):
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        call_kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in pyfuncitem._fixtureinfo.argnames
            if name in pyfuncitem.funcargs
        }
        asyncio.run(pyfuncitem.obj(**call_kwargs))
        return True
    return None
