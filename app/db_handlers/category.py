from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models.category import Category


class CategoryDBHandler(BaseDBHandler[Category]):
    def __init__(self):
        super().__init__(Category)

    @check_local_db
    async def list_owned_categories(
        self, owner_id: uuid.UUID, *, db: AsyncSession = None
    ) -> list[Category]:
        return await self.get_multi_by_attributes(
            db=db, owner_id=owner_id, order_by=Category.created_at
        )
