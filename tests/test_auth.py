from datetime import datetime, timedelta, timezone

import jwt

from conftest import PASSWORD, register, unique_email
from phm.core.settings import settings


def test_register_creates_account_admin_and_tokens(client):
    email = unique_email("owner")
    r = client.post(
        "/api/auth/register",
        json={"accountName": "Northern Heat", "email": email, "name": "Owner", "password": PASSWORD},
    )
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["user"]["email"] == email
    assert data["user"]["role"] == "admin"
    assert "passwordHash" not in data["user"]
    assert data["accessToken"] and data["refreshToken"]
    assert "access_token" in client.cookies
    assert "refresh_token" in client.cookies


def test_register_duplicate_email_conflicts(client, account):
    r = client.post(
        "/api/auth/register",
        json={"accountName": "Copycat", "email": account["_email"], "name": "Copy", "password": PASSWORD},
    )
    assert r.status_code == 409
    assert r.json()["error"] == "ConflictError"


def test_register_rejects_weak_password(client):
    r = client.post(
        "/api/auth/register",
        json={"accountName": "Weak Ltd", "email": unique_email(), "name": "Weak", "password": "alllowercase1"},
    )
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "password"


def test_login_and_me(client, account):
    r = client.post("/api/auth/login", json={"email": account["_email"].upper(), "password": PASSWORD})
    assert r.status_code == 200, r.text
    token = r.json()["data"]["accessToken"]
    assert r.json()["data"]["user"]["lastLoginAt"]

    client.cookies.clear()
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["data"]["email"] == account["_email"]


def test_login_wrong_password(client, account):
    r = client.post("/api/auth/login", json={"email": account["_email"], "password": "Nope-Nope-123"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"


def test_login_unknown_email_looks_the_same(client):
    r = client.post("/api/auth/login", json={"email": unique_email(), "password": PASSWORD})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"


def test_cookie_session_works_without_header(client, account):
    client.post("/api/auth/login", json={"email": account["_email"], "password": PASSWORD})
    r = client.get("/api/auth/me")
    assert r.status_code == 200


def test_me_requires_authentication(client):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["error"] == "UnauthorizedError"


def test_garbage_token_is_unauthorized(client):
    r = client.get("/api/customers", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid token"


def test_expired_token_is_unauthorized(client, account):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = jwt.encode(
        {
            "sub": str(account["_user"]["id"]),
            "type": "access",
            "iat": int((past - timedelta(minutes=15)).timestamp()),
            "exp": int(past.timestamp()),
        },
        settings.JWT_SECRET,
        algorithm="HS256",
    )
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["message"] == "Token expired"


def test_refresh_issues_new_tokens(client, account):
    r = client.post("/api/auth/refresh", headers={"X-Refresh-Token": account["_refresh"]})
    assert r.status_code == 200, r.text
    new_access = r.json()["data"]["accessToken"]

    client.cookies.clear()
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {new_access}"})
    assert r.status_code == 200


def test_refresh_rejects_access_tokens(client, account):
    access = account["Authorization"].split(" ", 1)[1]
    r = client.post("/api/auth/refresh", headers={"X-Refresh-Token": access})
    assert r.status_code == 401


def test_refresh_token_cannot_call_the_api(client, account):
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {account['_refresh']}"})
    assert r.status_code == 401


def test_refresh_without_token(client):
    r = client.post("/api/auth/refresh")
    assert r.status_code == 401
    assert r.json()["message"] == "Refresh token not provided"


def test_logout_clears_session_cookies(client, account):
    client.post("/api/auth/login", json={"email": account["_email"], "password": PASSWORD})
    assert client.get("/api/auth/me").status_code == 200

    r = client.post("/api/auth/logout")
    assert r.status_code == 200
    assert client.get("/api/auth/me").status_code == 401


def test_second_register_gets_its_own_account(client):
    a = register(client, "First Co")
    b = register(client, "Second Co")
    assert a["_user"]["accountId"] != b["_user"]["accountId"]
