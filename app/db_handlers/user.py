from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models.user import User
from app.utils.logger import setup_logger

logger = setup_logger("db_handlers.user")


class UserDBHandler(BaseDBHandler[User]):
    def __init__(self):
        super().__init__(User)

    @check_local_db
    async def get_user_by_email(
        self, email: str, *, db: AsyncSession = None
    ) -> User | None:
        """Get a user by email, ignoring case."""
        try:
            stmt = select(User).filter(func.lower(User.email) == email.lower())
            result = await db.execute(stmt)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user by email '{email}': {e}")
            raise
