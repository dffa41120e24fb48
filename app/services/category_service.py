"""
Category Service - owner-scoped listing and creation.

Categories are not synchronized live: no change events are published.
"""

import uuid

from app.db_handlers.category import CategoryDBHandler
from app.errors import ValidationError
from app.models.category import Category
from app.schemas import CategoryCreate
from app.utils.logger import setup_logger

logger = setup_logger("category_service")


class CategoryService:
    def __init__(self, category_db_handler: CategoryDBHandler | None = None):
        self.categories = category_db_handler or CategoryDBHandler()

    async def list(self, owner_id: uuid.UUID) -> list[Category]:
        return await self.categories.list_owned_categories(owner_id)

    async def create(self, owner_id: uuid.UUID, fields: CategoryCreate) -> Category:
        name = (fields.name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        category = await self.categories.create(
            {
                "owner_id": owner_id,
                "name": name,
                "color": fields.color,
                "icon": fields.icon,
            }
        )
        logger.info(f"Created category {category.id} for owner {owner_id}")
        return category
