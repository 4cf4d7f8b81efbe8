# phm/auth/passwords.py
from passlib.context import CryptContext

# Salted PBKDF2-SHA256; passlib handles the per-hash salt and round count
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)
