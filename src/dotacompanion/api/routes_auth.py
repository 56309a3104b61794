"""
Authentication route handlers.

Endpoints:
- POST /auth/register - register a new user, returns token and user
- POST /auth/login - login with email/password, returns token and user
- GET  /auth/me - return current user from token
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, status

from dotacompanion.api.shared import LoginRequest, RegisterRequest
from dotacompanion.auth.middleware import get_auth_service, get_current_user
from dotacompanion.auth.service import AuthService
from dotacompanion.infra.database import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> dict[str, Any]:
    """Register a new email/password account."""
    user, token = auth.register(body.email, body.password)
    return {"token": token, "user": user.to_dict()}


@router.post("/login")
async def login(
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> dict[str, Any]:
    """Login with email and password."""
    user, token = auth.login(body.email, body.password)
    return {"token": token, "user": user.to_dict()}


@router.get("/me")
async def get_me(user: User = Depends(get_current_user)) -> dict[str, Any]:
    """Return the user named by the bearer token."""
    return {"user": user.to_dict()}
