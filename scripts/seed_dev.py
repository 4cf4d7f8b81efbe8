# scripts/seed_dev.py
"""
Create (or reset) the demo account and its admin login.

    INITIAL_ADMIN_PASSWORD='Change-me-1234' python -m scripts.seed_dev
"""
import os
import sys

from phm import models  # noqa: F401
from phm.auth.passwords import hash_password
from phm.db import Base, SessionLocal, engine
from phm.models.account import Account
from phm.models.user import User
from phm.schemas.user import check_password_strength

ACCOUNT_NAME = "Demo Heating Ltd"
ACCOUNT_PLAN = "pro"

EMAIL = os.getenv("INITIAL_ADMIN_EMAIL", "admin@demoheating.co.uk").lower().strip()
PASSWORD = os.getenv("INITIAL_ADMIN_PASSWORD", "")


def main() -> int:
    if not PASSWORD:
        print("INITIAL_ADMIN_PASSWORD is not set", file=sys.stderr)
        return 1
    try:
        check_password_strength(PASSWORD)
    except ValueError as e:
        print(f"INITIAL_ADMIN_PASSWORD rejected: {e}", file=sys.stderr)
        return 1

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        account = db.query(Account).filter(Account.name == ACCOUNT_NAME).first()
        if not account:
            account = Account(name=ACCOUNT_NAME, plan=ACCOUNT_PLAN, is_active=True)
            db.add(account)
            db.flush()
            print("account created:", ACCOUNT_NAME)

        user = db.query(User).filter(User.email == EMAIL).first()
        if not user:
            user = User(
                account_id=account.id,
                email=EMAIL,
                name="Demo Admin",
                password_hash=hash_password(PASSWORD),
                role="admin",
                is_active=True,
            )
            db.add(user)
            print("admin created:", EMAIL)
        else:
            # reset password (handy after db resets)
            user.password_hash = hash_password(PASSWORD)
            user.is_active = True
            print("admin password reset:", EMAIL)

        db.commit()
        print("\nLOGIN WITH:")
        print("email:", EMAIL)
        print("account:", ACCOUNT_NAME)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
