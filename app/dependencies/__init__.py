from app.dependencies.auth import (
    get_auth_service,
    get_current_user,
    get_current_user_id,
)
from app.dependencies.services import (
    get_analytics_service,
    get_broadcast_channel,
    get_category_service,
    get_task_service,
)

__all__ = [
    "get_auth_service",
    "get_current_user",
    "get_current_user_id",
    "get_analytics_service",
    "get_broadcast_channel",
    "get_category_service",
    "get_task_service",
]
