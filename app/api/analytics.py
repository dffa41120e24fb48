import uuid

from fastapi import APIRouter, Depends

from app.config import settings
from app.dependencies.auth import get_current_user_id
from app.dependencies.services import get_analytics_service
from app.schemas import AnalyticsResponse
from app.services.analytics import AnalyticsService

router = APIRouter(prefix=settings.api_prefix, tags=["Analytics"])


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    owner_id: uuid.UUID = Depends(get_current_user_id),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    """Counts over the caller's current tasks, recomputed on every request."""
    analytics = await analytics_service.summarize(owner_id)
    return AnalyticsResponse(analytics=analytics.model_dump(by_alias=True))
