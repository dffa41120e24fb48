"""
Authentication dependencies for FastAPI route protection.
"""

import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.models import User
from app.services.auth_service import AuthService

# Missing headers are reported through AuthError so the body stays {"error": ...}
security = HTTPBearer(auto_error=False)


def get_auth_service() -> AuthService:
    return AuthService()


async def get_current_user_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> uuid.UUID:
    """
    Dependency resolving the owner id carried by the bearer token.

    The id is also stored on ``request.state.user_id`` for downstream use.
    """
    token = credentials.credentials if credentials else None
    user_id = auth_service.authenticate(token)
    request.state.user_id = user_id
    return user_id


async def get_current_user(
    user_id: uuid.UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Dependency to load the authenticated user record."""
    return await auth_service.me(user_id)
