"""
Auth Service - registration, login, token verification and profile lookup.

Login failures use one message for unknown emails and wrong passwords so the
response never reveals which accounts exist.
"""

import uuid

from sqlalchemy.exc import IntegrityError

from app.db_handlers.user import UserDBHandler
from app.errors import AuthError, ConflictError, NotFoundError, ValidationError
from app.models.user import User
from app.utils.auth import (
    BCRYPT_MAX_PASSWORD_BYTES,
    create_access_token,
    extract_user_id_from_token,
    get_password_hash,
    verify_password,
)
from app.utils.logger import setup_logger

logger = setup_logger("auth_service")

INVALID_CREDENTIALS = "Invalid credentials"
PLEASE_AUTHENTICATE = "Please authenticate"


def public_user(user: User) -> dict:
    return {"id": str(user.id), "name": user.name, "email": user.email}


class AuthService:
    def __init__(self, user_db_handler: UserDBHandler | None = None):
        self.users = user_db_handler or UserDBHandler()

    async def register(self, name: str, email: str, password: str) -> dict:
        """Create an account and return ``{token, user}``."""
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name:
            raise ValidationError("Name is required")
        if not email or "@" not in email:
            raise ValidationError("A valid email is required")
        if not password:
            raise ValidationError("Password is required")
        if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            )

        if await self.users.get_user_by_email(email):
            raise ConflictError("Email already registered")

        try:
            user = await self.users.create(
                {
                    "name": name,
                    "email": email,
                    "hashed_password": get_password_hash(password),
                }
            )
        except IntegrityError as e:
            # Lost a race against a concurrent registration
            raise ConflictError("Email already registered") from e

        logger.info(f"Registered user {user.id}")
        return {"token": self.issue_token(user), "user": public_user(user)}

    async def login(self, email: str, password: str) -> dict:
        user = await self.users.get_user_by_email((email or "").strip())
        if not user or not verify_password(password or "", user.hashed_password):
            raise AuthError(INVALID_CREDENTIALS)
        logger.info(f"User {user.id} logged in")
        return {"token": self.issue_token(user), "user": public_user(user)}

    def authenticate(self, token: str | None) -> uuid.UUID:
        """Verify a bearer token and return the owner id it carries."""
        if not token:
            raise AuthError(PLEASE_AUTHENTICATE)
        user_id = extract_user_id_from_token(token)
        if user_id is None:
            raise AuthError(PLEASE_AUTHENTICATE)
        return user_id

    async def me(self, owner_id: uuid.UUID) -> User:
        user = await self.users.get(owner_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(data={"sub": str(user.id)})
