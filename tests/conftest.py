import os
import shutil
import tempfile
from uuid import uuid4

# settings are read at import time, so the environment goes first
_TMP = tempfile.mkdtemp(prefix="phm-tests-")
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["JWT_SECRET"] = "test-access-secret-0123456789abcdef"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-0123456789abcdef"
os.environ["AUTH_RATE_LIMIT"] = "1000/minute"
os.environ["PUBLIC_BASE_URL"] = "https://app.example.com"

import pytest
from fastapi.testclient import TestClient

from phm import models  # noqa: F401
from phm.db import Base, SessionLocal, engine
from phm.main import app

PASSWORD = "Correct-Horse-42"


# --- DB setup for tests: create tables once, drop afterwards ---
@pytest.fixture(scope="session", autouse=True)
def _create_test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    shutil.rmtree(_TMP, ignore_errors=True)


@pytest.fixture
def anyio_backend():
    # asyncio only, no Trio needed
    return "asyncio"


@pytest.fixture
def client():
    # fresh client per test so auth cookies never leak between tests
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid4().hex[:10]}@example.com"


def register(client: TestClient, account_name: str = "Acme Heating", email: str = None) -> dict:
    """Create an account + admin and return its bearer headers (cookies dropped)."""
    email = email or unique_email("admin")
    r = client.post(
        "/api/auth/register",
        json={"accountName": account_name, "email": email, "name": "Test Admin", "password": PASSWORD},
    )
    assert r.status_code == 201, r.text
    client.cookies.clear()
    body = r.json()["data"]
    return {
        "Authorization": f"Bearer {body['accessToken']}",
        "_user": body["user"],
        "_email": email,
        "_refresh": body["refreshToken"],
    }


def headers(auth: dict) -> dict:
    return {k: v for k, v in auth.items() if not k.startswith("_")}


@pytest.fixture
def account(client):
    return register(client, "Acme Heating")


@pytest.fixture
def other_account(client):
    return register(client, "Rival Boilers")


@pytest.fixture
def auth(account):
    return headers(account)


@pytest.fixture
def other_auth(other_account):
    return headers(other_account)


@pytest.fixture
def customer(client, auth):
    r = client.post(
        "/api/customers",
        json={
            "firstName": "Jane",
            "lastName": "Doe",
            "email": "jane.doe@example.com",
            "phone": "07700 900123",
            "addressLine1": "1 High Street",
            "city": "Leeds",
            "postcode": "LS1 1AA",
            "propertyType": "semi",
            "constructionYear": 1965,
            "tags": ["boiler", "vip"],
        },
        headers=auth,
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.fixture
def visit(client, auth, customer):
    r = client.post(
        "/api/visits",
        json={"customerId": customer["id"], "surveyType": "boiler", "notes": "Loft access via hatch"},
        headers=auth,
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]
