# phm/auth/deps.py
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from phm.auth.jwt import decode_access_token
from phm.core.errors import ForbiddenError, UnauthorizedError
from phm.db import get_db
from phm.models.user import User

security = HTTPBearer(auto_error=False)  # we raise our own 401


def _extract_token(
    request: Request, creds: HTTPAuthorizationCredentials | None
) -> str | None:
    # 1) Authorization header
    if creds and creds.credentials:
        return creds.credentials

    # 2) cookie
    return request.cookies.get("access_token") or None


def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    token = _extract_token(request, creds)
    if not token:
        raise UnauthorizedError("Not authenticated")

    payload = decode_access_token(token)

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid token payload")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    request.state.account_id = user.account_id
    request.state.user_id = user.id
    return user


def require_role(*roles: str):
    """Dependency factory: the current user must hold one of ``roles``."""

    def _checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise ForbiddenError("Insufficient permissions")
        return user

    return _checker


require_admin = require_role("admin")
