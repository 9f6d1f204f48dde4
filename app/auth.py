import re

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.infrastructure.db.models import User

# pbkdf2_sha256 - primary (no native deps)
# bcrypt - accepted for hashes imported from older deployments
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated=["bcrypt"])

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128

COMMON_PASSWORDS = frozenset({
    "password", "123456", "password123", "admin", "qwerty",
    "letmein", "welcome", "monkey", "1234567890", "abc123",
})

_LETTER_RE = re.compile(r"[a-zA-Z]")
_REPEATED_RE = re.compile(r"(.)\1{3,}")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def needs_rehash(password_hash: str) -> bool:
    return pwd_context.needs_update(password_hash)


def validate_password_strength(password) -> list[str]:
    """All reasons ``password`` is rejected; empty when acceptable."""
    if not password:
        return ["Password is required"]
    if not isinstance(password, str):
        return ["Password must be a string"]

    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password) > MAX_PASSWORD_LENGTH:
        errors.append(f"Password must not exceed {MAX_PASSWORD_LENGTH} characters")
    if not _LETTER_RE.search(password):
        errors.append("Password must contain at least one letter")
    if password.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common, please choose a stronger password")
    if _REPEATED_RE.search(password):
        errors.append("Password cannot contain more than 3 consecutive identical characters")
    return errors


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.id == user_id).first()
