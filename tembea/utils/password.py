"""
Password hashing for admin and vendor accounts (passlib, bcrypt).
"""

from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
)

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False for a wrong password or an unreadable stored hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def password_needs_rehash(hashed_password: str) -> bool:
    """True when the stored hash uses outdated bcrypt settings."""
    return pwd_context.needs_update(hashed_password)


def is_weak_password(password: str) -> bool:
    return len(password) < MIN_PASSWORD_LENGTH or password.isdigit()
