"""
Services package for TaskFlow business logic.

Architecture: API routes → services → db_handlers → models.
The task service publishes change events through the broadcast channel.
"""

from app.services.analytics import AnalyticsService, summarize_tasks
from app.services.auth_service import AuthService
from app.services.broadcast import BroadcastChannel, ChangeEvent, ConnectionRegistry
from app.services.category_service import CategoryService
from app.services.task_service import TaskService

__all__ = [
    "AnalyticsService",
    "AuthService",
    "BroadcastChannel",
    "CategoryService",
    "ChangeEvent",
    "ConnectionRegistry",
    "TaskService",
    "summarize_tasks",
]
