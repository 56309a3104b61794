"""FastAPI authentication dependencies - extract and verify the bearer token."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from dotacompanion.api.context import AppContext, get_context, get_db
from dotacompanion.auth.service import AuthService
from dotacompanion.core.errors import Forbidden, Unauthorized
from dotacompanion.infra.database import User


def bearer_token(request: Request) -> str | None:
    """Token from ``Authorization: Bearer <token>``, or None."""
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_auth_service(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
) -> AuthService:
    return AuthService(db, context.config.auth)


async def get_current_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Authenticated user. Raises Unauthorized if the token is missing or invalid."""
    token = bearer_token(request)
    if token is None:
        raise Unauthorized("Missing authorization token")
    return auth.resolve_token(token)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Authenticated admin. Raises Forbidden for regular users."""
    if not user.is_admin:
        raise Forbidden("Admin access required")
    return user
