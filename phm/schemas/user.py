# phm/schemas/user.py
import re
from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, EmailStr, Field

from phm.schemas.common import CamelModel

Role = Literal["admin", "surveyor", "office", "readonly"]

MIN_PASSWORD_LENGTH = 12


def check_password_strength(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain a lowercase letter")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain an uppercase letter")
    if not re.search(r"\d", value):
        raise ValueError("Password must contain a number")
    return value


StrongPassword = Annotated[str, AfterValidator(check_password_strength)]


class RegisterIn(CamelModel):
    account_name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    name: str = Field(min_length=2, max_length=255)
    password: StrongPassword


class LoginIn(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserOut(CamelModel):
    id: int
    account_id: int
    email: str
    name: str
    role: str
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UserCreate(CamelModel):
    email: EmailStr
    name: str = Field(min_length=2, max_length=255)
    password: StrongPassword
    role: Role = "surveyor"
    phone: Optional[str] = None


class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    role: Optional[Role] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: Optional[bool] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    phone: Optional[str] = None
    avatar_url: Optional[str] = None


class ChangePasswordIn(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: StrongPassword

