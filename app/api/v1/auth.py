"""
Authentication endpoints (register, login, profile, refresh, logout)
"""
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.application.accounts import (
    AuthenticatedUser, RegisterUserUseCase, LoginUseCase, RefreshTokensUseCase,
    GetProfileUseCase, user_to_dict,
)


router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=201)
def register(payload: dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Create an account and issue a token pair"""
    user, tokens = RegisterUserUseCase(db).execute(payload)
    return JSONResponse(
        status_code=201,
        content={
            "message": "User registered successfully",
            "user": user_to_dict(user),
            **tokens,
        },
    )


@router.post("/login")
def login(payload: dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Log in with email and password"""
    user, tokens = LoginUseCase(db).execute(payload)
    return {
        "message": "Login successful",
        "user": user_to_dict(user),
        **tokens,
    }


@router.get("/me")
def me(
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current user profile"""
    profile = GetProfileUseCase(db).execute(user)
    return {
        "message": "User profile retrieved successfully",
        "user": profile,
    }


@router.post("/refresh")
def refresh(payload: dict[str, Any] | None = Body(default=None), db: Session = Depends(get_db)):
    """Exchange a refresh token for a new pair"""
    user, tokens = RefreshTokensUseCase(db).execute((payload or {}).get("refreshToken"))
    return {
        "message": "Tokens refreshed successfully",
        "user": user_to_dict(user),
        **tokens,
    }


@router.post("/logout")
def logout(user: AuthenticatedUser = Depends(get_current_user)):
    """Tokens are stateless; the client discards them"""
    return {
        "message": "Logout successful",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
