"""
FastAPI dependencies (DB session, repository, authentication)
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.application.accounts import AuthenticatedUser
from app.application.errors import AuthError
from app.auth import get_user_by_id
from app.infrastructure.db.session import get_db as _get_db
from app.infrastructure.db.subscription_repository import SubscriptionRepository
from app.tokens import verify_token


# Re-export get_db so tests override a single dependency
get_db = _get_db


def get_subscription_repository(db: Session = Depends(get_db)) -> SubscriptionRepository:
    return SubscriptionRepository(db)


def extract_bearer_token(request: Request) -> str:
    """
    Token from ``Authorization: Bearer <token>``

    Raises:
        AuthError: header missing, wrong scheme, or empty token
    """
    header = request.headers.get("Authorization")
    if not header:
        raise AuthError("No authorization header provided")
    if not header.startswith("Bearer "):
        raise AuthError("Invalid authorization header format. Use: Bearer <token>")
    token = header[len("Bearer "):].strip()
    if not token:
        raise AuthError("No token provided")
    return token


def get_current_user(request: Request, db: Session = Depends(get_db)) -> AuthenticatedUser:
    """
    Authenticated requester for protected endpoints

    Raises:
        AuthError(401): missing/invalid/expired token, or the user was deleted

    Usage:
        @router.get("/me")
        def me(user: AuthenticatedUser = Depends(get_current_user)):
            ...
    """
    claims = verify_token(extract_bearer_token(request))

    user = get_user_by_id(db, claims.user_id)
    if not user:
        raise AuthError("User not found")

    return AuthenticatedUser(user_id=user.id, email=user.email, name=user.name)
