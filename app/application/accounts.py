"""
Account use cases: registration, login, token refresh, profile.
"""
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.application.errors import AuthError, ConflictError, DatabaseError, NotFoundError, ValidationError
from app.auth import (
    hash_password, verify_password, needs_rehash, validate_password_strength,
    get_user_by_email, get_user_by_id,
)
from app.infrastructure.db.models import User
from app.infrastructure.db.subscription_repository import SubscriptionRepository
from app.tokens import TOKEN_TYPE_REFRESH, create_token_pair, verify_token
from app.utils.validation import is_valid_email

logger = logging.getLogger(__name__)

EMAIL_MAX_LENGTH = 254
NAME_MAX_LENGTH = 100


@dataclass(frozen=True)
class AuthenticatedUser:
    """Requester identity handed to use cases by value."""
    user_id: int
    email: str
    name: str | None


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "updatedAt": user.updated_at.isoformat() if user.updated_at else None,
    }


def validate_account_input(data: Mapping[str, Any], required: tuple[str, ...]) -> tuple[list[str], dict]:
    """
    Validate email/name fields of an auth payload.

    Returns:
        (errors, sanitized); email trimmed and lower-cased, name trimmed
    """
    errors: list[str] = []
    sanitized: dict[str, Any] = {}

    for name in required:
        value = data.get(name)
        if not value or (isinstance(value, str) and value.strip() == ""):
            errors.append(f"{name} is required")

    email = data.get("email")
    if email:
        if not isinstance(email, str):
            errors.append("Email must be a string")
        else:
            email = email.strip().lower()
            if not is_valid_email(email):
                errors.append("Please provide a valid email address")
            if len(email) > EMAIL_MAX_LENGTH:
                errors.append("Email address is too long")
            sanitized["email"] = email

    name = data.get("name")
    if name is not None:
        if not isinstance(name, str):
            errors.append("Name must be a string")
        else:
            name = name.strip()
            if len(name) < 1:
                errors.append("Name cannot be empty")
            elif len(name) > NAME_MAX_LENGTH:
                errors.append("Name must not exceed 100 characters")
            else:
                sanitized["name"] = name

    return errors, sanitized


class RegisterUserUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, data: Mapping[str, Any]) -> tuple[User, dict]:
        """
        Raises:
            ValidationError: bad email/name, or weak password
            ConflictError: email already registered
        """
        errors, sanitized = validate_account_input(data, required=("email", "password"))
        if errors:
            raise ValidationError(details=errors)

        password = data.get("password")
        password_errors = validate_password_strength(password)
        if password_errors:
            raise ValidationError(
                "Password does not meet security requirements",
                details=password_errors,
                error="Password validation failed",
            )

        if get_user_by_email(self.db, sanitized["email"]):
            raise ConflictError(
                "An account with this email address already exists",
                error="User already exists",
            )

        user = User(
            email=sanitized["email"],
            password_hash=hash_password(password),
            name=sanitized.get("name"),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same email
            self.db.rollback()
            raise ConflictError(
                "An account with this email address already exists",
                error="User already exists",
            ) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Registration failed for %s", sanitized["email"])
            raise DatabaseError("Unable to create user account at this time") from exc
        self.db.refresh(user)

        logger.info("User %s registered", user.id)
        return user, create_token_pair(user.id)


class LoginUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, data: Mapping[str, Any]) -> tuple[User, dict]:
        """
        Raises:
            ValidationError: missing/invalid email or password
            AuthError: unknown email or wrong password (same message for both)
        """
        errors, sanitized = validate_account_input(data, required=("email", "password"))
        if errors:
            raise ValidationError("Please provide valid email and password", details=errors)

        password = data["password"]
        user = get_user_by_email(self.db, sanitized["email"])
        if not user or not isinstance(password, str) or not verify_password(password, user.password_hash):
            raise AuthError("Email or password is incorrect", error="Invalid credentials")

        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)
            self.db.commit()

        logger.info("User %s logged in", user.id)
        return user, create_token_pair(user.id)


class RefreshTokensUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, refresh_token) -> tuple[User, dict]:
        """
        Raises:
            ValidationError: token missing from the body
            AuthError: token invalid, expired, not a refresh token, or the
                user no longer exists
        """
        if not refresh_token or not isinstance(refresh_token, str):
            raise ValidationError("Refresh token is required")

        claims = verify_token(refresh_token, expected_type=TOKEN_TYPE_REFRESH)
        user = get_user_by_id(self.db, claims.user_id)
        if not user:
            raise AuthError("User account no longer exists", error="User not found")
        return user, create_token_pair(user.id)


class GetProfileUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, requester: AuthenticatedUser) -> dict:
        """Profile with the number of subscriptions the user tracks."""
        user = get_user_by_id(self.db, requester.user_id)
        if not user:
            raise NotFoundError("User account no longer exists", error="User not found")

        profile = user_to_dict(user)
        profile["subscriptionCount"] = SubscriptionRepository(self.db).count_for_user(user.id)
        return profile
