# phm/auth/jwt.py
from datetime import datetime, timedelta, timezone

import jwt

from phm.core.errors import UnauthorizedError
from phm.core.settings import settings

ALGORITHM = "HS256"


def _encode(claims: dict, secret: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def create_access_token(*, user_id: int, account_id: int, email: str, role: str) -> str:
    return _encode(
        {
            "sub": str(user_id),
            "account_id": account_id,
            "email": email,
            "role": role,
            "type": "access",
        },
        settings.JWT_SECRET,
        timedelta(minutes=settings.JWT_ACCESS_EXPIRES_MINUTES),
    )


def create_refresh_token(*, user_id: int, account_id: int) -> str:
    return _encode(
        {"sub": str(user_id), "account_id": account_id, "type": "refresh"},
        settings.JWT_REFRESH_SECRET,
        timedelta(days=settings.JWT_REFRESH_EXPIRES_DAYS),
    )


def _decode(token: str, secret: str, expected_type: str) -> dict:
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token")

    if payload.get("type") != expected_type or not payload.get("sub"):
        raise UnauthorizedError("Invalid token payload")
    return payload


def decode_access_token(token: str) -> dict:
    return _decode(token, settings.JWT_SECRET, "access")


def decode_refresh_token(token: str) -> dict:
    return _decode(token, settings.JWT_REFRESH_SECRET, "refresh")
