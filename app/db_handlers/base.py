from __future__ import annotations

import asyncio
from functools import wraps
from typing import Any, Generic, TypeVar

from asyncpg.exceptions import ConnectionDoesNotExistError
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import AppAsyncSessionLocal
from app.models.base import Base
from app.utils.logger import setup_logger

logger = setup_logger("db_handlers")


ModelType = TypeVar("ModelType", bound=Base)


def check_local_db(func):
    """Database session decorator with transaction management and retry logic."""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        # If 'db' is already provided, we're in a nested call.
        # The outermost caller who created the session is responsible for the transaction.
        if kwargs.get("db"):
            return await func(*args, **kwargs)

        last_exception = None
        # Retry logic for transient connection errors
        for attempt in range(3):
            async with AppAsyncSessionLocal() as db:
                kwargs["db"] = db
                try:
                    result = await func(*args, **kwargs)
                    await db.commit()
                    return result
                except DBAPIError as e:
                    await db.rollback()
                    if isinstance(e.orig, ConnectionDoesNotExistError):
                        last_exception = e
                        logger.warning(
                            f"Connection error in {func.__name__} (attempt {attempt + 1}/3): {e}. Retrying..."
                        )
                        await asyncio.sleep(1 + attempt)
                        continue
                    logger.error(
                        f"DBAPIError in {func.__name__} (attempt {attempt + 1}/3): {e}",
                        exc_info=True,
                    )
                    raise
                except Exception:
                    await db.rollback()
                    raise

        logger.error(
            f"All retries failed for {func.__name__}. Last error: {last_exception}"
        )
        raise last_exception

    return wrapper


class BaseDBHandler(Generic[ModelType]):
    """Generic handler for database operations with basic CRUD methods."""

    def __init__(self, model: type[ModelType]):
        self.model = model

    @check_local_db
    async def create(
        self, obj_dict: dict[str, Any], *, db: AsyncSession = None
    ) -> ModelType:
        """Create a new record in the database."""

        db_obj = self.model(**obj_dict)
        try:
            db.add(db_obj)
            await db.commit()
            await db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"IntegrityError creating {self.model.__name__}: {e}")
            # Re-raise IntegrityError so calling code can handle it specifically
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error creating {self.model.__name__}: {e}", exc_info=True)
            raise

    @check_local_db
    async def get(self, id: Any, *, db: AsyncSession = None) -> ModelType | None:
        """Get a single record by its primary key."""
        stmt = select(self.model).where(self.model.id == id)
        result = await db.execute(stmt)
        return result.scalars().first()

    @check_local_db
    async def get_multi_by_attributes(
        self, *, db: AsyncSession = None, **kwargs
    ) -> list[ModelType]:
        """Get every record matching a set of attributes."""
        order_by_clauses = kwargs.pop("order_by", None)

        stmt = select(self.model).filter_by(**kwargs)

        if order_by_clauses is not None:
            if isinstance(order_by_clauses, list):
                stmt = stmt.order_by(*order_by_clauses)
            else:
                stmt = stmt.order_by(order_by_clauses)

        result = await db.execute(stmt)
        return list(result.scalars().all())
