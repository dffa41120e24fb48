import uuid

from fastapi import APIRouter, Depends

from app.config import settings
from app.dependencies.auth import get_current_user_id
from app.dependencies.services import get_category_service
from app.schemas import (
    CategoryCreate,
    CategoryListResponse,
    CategoryResponse,
    serialize_category,
)
from app.services.category_service import CategoryService

router = APIRouter(prefix=settings.api_prefix, tags=["Categories"])


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(
    owner_id: uuid.UUID = Depends(get_current_user_id),
    category_service: CategoryService = Depends(get_category_service),
):
    categories = await category_service.list(owner_id)
    return CategoryListResponse(
        categories=[serialize_category(category) for category in categories]
    )


@router.post("/categories", response_model=CategoryResponse)
async def create_category(
    category_data: CategoryCreate,
    owner_id: uuid.UUID = Depends(get_current_user_id),
    category_service: CategoryService = Depends(get_category_service),
):
    category = await category_service.create(owner_id, category_data)
    return CategoryResponse(category=serialize_category(category))
