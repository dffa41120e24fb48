from fastapi import Depends, Request

from app.services.analytics import AnalyticsService
from app.services.broadcast import BroadcastChannel
from app.services.category_service import CategoryService
from app.services.task_service import TaskService


def get_broadcast_channel(request: Request) -> BroadcastChannel:
    """The channel created by ``create_app`` and stored on ``app.state``."""
    return request.app.state.broadcast_channel


def get_task_service(
    channel: BroadcastChannel = Depends(get_broadcast_channel),
) -> TaskService:
    return TaskService(channel=channel)


def get_category_service() -> CategoryService:
    return CategoryService()


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService()
