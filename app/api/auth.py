# Authentication API routes for user registration, login, and profile lookup

from fastapi import APIRouter, Depends

from app.config import settings
from app.dependencies.auth import get_auth_service, get_current_user
from app.models import User
from app.schemas import AuthResponse, UserInfo, UserLogin, UserRegister, UserResponse
from app.services.auth_service import AuthService

router = APIRouter(prefix=f"{settings.api_prefix}/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse)
async def register_user(
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user and return a bearer token with the public profile."""
    return await auth_service.register(
        user_data.name, user_data.email, user_data.password
    )


@router.post("/login", response_model=AuthResponse)
async def login_user(
    user_data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Authenticate user and return JWT token for API access."""
    return await auth_service.login(user_data.email, user_data.password)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
):
    """Retrieve current authenticated user's profile information."""
    return UserResponse(user=UserInfo.model_validate(current_user))
