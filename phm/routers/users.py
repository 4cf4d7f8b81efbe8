# phm/routers/users.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user, require_admin
from phm.auth.passwords import hash_password, verify_password
from phm.core.errors import ConflictError, UnauthorizedError, ValidationError
from phm.core.logging_config import logger
from phm.db import get_db
from phm.models.user import User
from phm.schemas.common import PageParams
from phm.schemas.user import ChangePasswordIn, ProfileUpdate, UserCreate, UserOut, UserUpdate
from phm.services.audit import record_audit
from phm.services.pagination import paginate
from phm.services.tenancy import apply_update, get_owned_or_404

router = APIRouter(prefix="/api/users", tags=["users"])

REQUIRED = ("name", "role", "is_active")


def _not_self(target: User, admin: User, message: str) -> None:
    if target.id == admin.id:
        raise ValidationError(message)


@router.get("")
def list_users(
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = db.query(User).filter(User.account_id == user.account_id).order_by(User.name.asc(), User.id.asc())
    return paginate(q, paging, UserOut.model_validate)


@router.post("", status_code=201)
def create_user(
    payload: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    email_norm = payload.email.lower().strip()
    # e-mail is the login name, so it is unique across all accounts
    if db.query(User.id).filter(User.email == email_norm).first():
        raise ConflictError("User with this email already exists")

    new_user = User(
        account_id=admin.account_id,
        email=email_norm,
        name=payload.name.strip(),
        password_hash=hash_password(payload.password),
        role=payload.role,
        phone=payload.phone,
        auth_provider="local",
        is_active=True,
    )
    db.add(new_user)
    db.flush()
    record_audit(
        db,
        action="user.create",
        account_id=admin.account_id,
        user_id=admin.id,
        entity_type="user",
        entity_id=new_user.id,
        changes={"email": new_user.email, "role": new_user.role},
        request=request,
    )
    db.commit()
    db.refresh(new_user)

    logger.info("user_created", account_id=admin.account_id, user_id=new_user.id, role=new_user.role)
    return {"data": UserOut.model_validate(new_user), "message": "User created successfully"}


# ----------------------------------------------------
# Own profile
# ----------------------------------------------------
@router.get("/profile")
def get_profile(user: User = Depends(get_current_user)):
    return {"data": UserOut.model_validate(user)}


@router.put("/profile")
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    apply_update(user, payload, required=("name",))
    db.commit()
    db.refresh(user)
    return {"data": UserOut.model_validate(user), "message": "Profile updated successfully"}


@router.post("/change-password")
def change_password(
    payload: ChangePasswordIn,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not user.password_hash:
        raise ValidationError("Cannot change password for SSO users")
    if not verify_password(payload.current_password, user.password_hash):
        raise UnauthorizedError("Current password is incorrect")

    user.password_hash = hash_password(payload.new_password)
    record_audit(
        db,
        action="user.change_password",
        account_id=user.account_id,
        user_id=user.id,
        entity_type="user",
        entity_id=user.id,
        request=request,
    )
    db.commit()
    logger.info("password_changed", user_id=user.id)
    return {"message": "Password changed successfully"}


# ----------------------------------------------------
# Team members
# ----------------------------------------------------
@router.get("/{user_id}")
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    member = get_owned_or_404(db, User, user_id, user.account_id, "User")
    return {"data": UserOut.model_validate(member)}


@router.put("/{user_id}")
def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    member = get_owned_or_404(db, User, user_id, admin.account_id, "User")
    if payload.is_active is False:
        _not_self(member, admin, "You cannot deactivate your own account")

    changes = apply_update(member, payload, required=REQUIRED)
    record_audit(
        db,
        action="user.update",
        account_id=admin.account_id,
        user_id=admin.id,
        entity_type="user",
        entity_id=member.id,
        changes=changes,
        request=request,
    )
    db.commit()
    db.refresh(member)
    return {"data": UserOut.model_validate(member), "message": "User updated successfully"}


@router.delete("/{user_id}")
def deactivate_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    member = get_owned_or_404(db, User, user_id, admin.account_id, "User")
    _not_self(member, admin, "You cannot deactivate your own account")

    member.is_active = False
    record_audit(
        db,
        action="user.deactivate",
        account_id=admin.account_id,
        user_id=admin.id,
        entity_type="user",
        entity_id=member.id,
        request=request,
    )
    db.commit()
    logger.info("user_deactivated", account_id=admin.account_id, user_id=member.id)
    return {"message": "User deactivated successfully"}
