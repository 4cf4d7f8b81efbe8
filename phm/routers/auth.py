# phm/routers/auth.py
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user
from phm.auth.jwt import create_access_token, create_refresh_token, decode_refresh_token
from phm.auth.passwords import hash_password, verify_password
from phm.core.clock import utcnow
from phm.core.errors import ConflictError, UnauthorizedError
from phm.core.logging_config import logger
from phm.core.rate_limit import auth_rate_limit, limiter
from phm.core.settings import settings
from phm.db import get_db
from phm.models.account import Account
from phm.models.user import User
from phm.schemas.user import LoginIn, RegisterIn, UserOut
from phm.services.audit import record_audit

router = APIRouter(prefix="/api/auth", tags=["auth"])

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"


def _issue_tokens(response: Response, user: User) -> dict:
    access = create_access_token(
        user_id=user.id, account_id=user.account_id, email=user.email, role=user.role
    )
    refresh = create_refresh_token(user_id=user.id, account_id=user.account_id)

    response.set_cookie(
        key=ACCESS_COOKIE,
        value=access,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        max_age=settings.JWT_ACCESS_EXPIRES_MINUTES * 60,
        path="/",
    )
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=refresh,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        max_age=settings.JWT_REFRESH_EXPIRES_DAYS * 24 * 60 * 60,
        path="/",
    )
    return {"accessToken": access, "refreshToken": refresh}


@router.post("/register", status_code=201)
@limiter.limit(auth_rate_limit)
def register(
    request: Request,
    response: Response,
    payload: RegisterIn,
    db: Session = Depends(get_db),
):
    email_norm = payload.email.lower().strip()
    if db.query(User).filter(User.email == email_norm).first():
        raise ConflictError("User with this email already exists")

    # account + first user go in together or not at all
    account = Account(name=payload.account_name.strip(), plan="free", is_active=True)
    user = User(
        account=account,
        email=email_norm,
        name=payload.name.strip(),
        password_hash=hash_password(payload.password),
        role="admin",
        is_active=True,
    )
    db.add(account)
    db.add(user)
    db.flush()
    record_audit(
        db,
        action="user.register",
        account_id=account.id,
        user_id=user.id,
        entity_type="user",
        entity_id=user.id,
        request=request,
    )
    db.commit()
    db.refresh(user)

    logger.info("user_registered", user_id=user.id, account_id=account.id)
    tokens = _issue_tokens(response, user)
    return {
        "data": {"user": UserOut.model_validate(user), **tokens},
        "message": "Registration successful",
    }


@router.post("/login")
@limiter.limit(auth_rate_limit)
def login(
    request: Request,
    response: Response,
    payload: LoginIn,
    db: Session = Depends(get_db),
):
    email_norm = payload.email.lower().strip()
    user = db.query(User).filter(User.email == email_norm).first()
    if not user or not user.password_hash:
        raise UnauthorizedError("Invalid email or password")
    if not user.is_active:
        raise UnauthorizedError("Account is disabled")
    if not verify_password(payload.password, user.password_hash):
        raise UnauthorizedError("Invalid email or password")

    user.last_login_at = utcnow()
    record_audit(
        db,
        action="user.login",
        account_id=user.account_id,
        user_id=user.id,
        entity_type="user",
        entity_id=user.id,
        request=request,
    )
    db.commit()
    db.refresh(user)

    logger.info("user_logged_in", user_id=user.id, account_id=user.account_id)
    tokens = _issue_tokens(response, user)
    return {
        "data": {"user": UserOut.model_validate(user), **tokens},
        "message": "Login successful",
    }


@router.post("/refresh")
def refresh(request: Request, response: Response, db: Session = Depends(get_db)):
    token = request.headers.get("X-Refresh-Token") or request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise UnauthorizedError("Refresh token not provided")

    payload = decode_refresh_token(token)
    user = db.query(User).filter(User.id == int(payload["sub"])).first()
    if not user or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    return {"data": _issue_tokens(response, user)}


@router.post("/logout")
def logout(response: Response, user: User = Depends(get_current_user)):
    logger.info("user_logged_out", user_id=user.id)
    response.delete_cookie(ACCESS_COOKIE, path="/")
    response.delete_cookie(REFRESH_COOKIE, path="/")
    return {"message": "Logout successful"}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"data": UserOut.model_validate(user)}
