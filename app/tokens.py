"""
JWT access/refresh tokens (PyJWT, HS256 by default).

Claims: sub (user id as string), iat, exp, iss, aud; refresh tokens also
carry type=refresh.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from app.application.errors import AuthError
from app.config import get_settings

logger = logging.getLogger(__name__)

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    token_type: str
    issued_at: int
    expires_at: int


def _encode(user_id: int, token_type: str, lifetime: timedelta, now: datetime | None = None) -> str:
    settings = get_settings()
    if now is None:
        now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: int, now: datetime | None = None) -> str:
    days = get_settings().JWT_ACCESS_EXPIRES_DAYS
    return _encode(user_id, TOKEN_TYPE_ACCESS, timedelta(days=days), now)


def create_refresh_token(user_id: int, now: datetime | None = None) -> str:
    days = get_settings().JWT_REFRESH_EXPIRES_DAYS
    return _encode(user_id, TOKEN_TYPE_REFRESH, timedelta(days=days), now)


def create_token_pair(user_id: int) -> dict:
    """Response fragment returned by register/login/refresh."""
    return {
        "accessToken": create_access_token(user_id),
        "refreshToken": create_refresh_token(user_id),
        "expiresIn": get_settings().access_expires_in,
    }


def verify_token(token: str, expected_type: str = TOKEN_TYPE_ACCESS) -> TokenClaims:
    """
    Verify signature, expiry, issuer, audience and token type.

    Raises:
        AuthError: with a message naming what is wrong with the token
    """
    if not token:
        raise AuthError("No token provided")

    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        logger.debug("Rejected expired token")
        raise AuthError("Token expired") from exc
    except jwt.ImmatureSignatureError as exc:
        raise AuthError("Token not active yet") from exc
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected invalid token: %s", exc)
        raise AuthError("Invalid token") from exc

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise AuthError("Invalid token payload") from exc

    token_type = payload.get("type", TOKEN_TYPE_ACCESS)
    if token_type != expected_type:
        raise AuthError("Invalid token")

    return TokenClaims(
        user_id=user_id,
        token_type=token_type,
        issued_at=payload["iat"],
        expires_at=payload["exp"],
    )


def decode_token_unverified(token: str) -> dict:
    """Header and payload without any verification (debugging aid only)."""
    try:
        return {
            "header": jwt.get_unverified_header(token),
            "payload": jwt.decode(token, options={"verify_signature": False}),
        }
    except jwt.DecodeError as exc:
        raise ValueError(f"Failed to decode token: {exc}") from exc
