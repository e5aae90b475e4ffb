"""
Authentication routes.

- Login: email + password, verified against the stored bcrypt hash.
- Register: email, name, password (+ optional phone/role); role defaults to resident.
- Verify: exchanges a stored token for the current user (client session restore).
All three return the user together with a 7-day bearer token.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from ..auth.auth_service import AuthService
from ..core.exceptions import DuplicateEmailError
from ..models.database_models import User
from ..models.user import LoginRequest, RegisterRequest, VerifyRequest
from ..services.providers import get_auth_service

logger = logging.getLogger("kig_issues.routers.auth")
router = APIRouter(prefix="/api/auth", tags=["authentication"])


class AuthResponse(BaseModel):
    user: User
    token: str


class VerifyResponse(BaseModel):
    user: User


def _redact_sensitive(d: Dict[str, Any]) -> Dict[str, Any]:
    redacted = dict(d or {})
    if redacted.get("password") is not None:
        redacted["password"] = "***"
    return redacted


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        result = await auth_service.login(body.email, body.password)
    except Exception:
        logger.exception("Login failed for %s", body.email)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")

    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result


@router.post("/register", response_model=AuthResponse)
async def register(body: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    logger.info("Registration request: %s", _redact_sensitive(body.model_dump(exclude_none=True)))
    try:
        return await auth_service.register(body.model_dump(exclude_none=True))
    except DuplicateEmailError:
        logger.warning("Registration failed - email already registered: %s", body.email)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")
    except Exception:
        logger.exception("Registration failed for %s", body.email)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Registration failed")


@router.post("/verify", response_model=VerifyResponse)
async def verify(body: VerifyRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        user = await auth_service.get_user_from_token(body.token)
    except Exception:
        logger.exception("Token verification failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"user": user}
