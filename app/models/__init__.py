"""
Database models for TaskFlow.

Architecture: User → Task, User → Category.
"""

from app.models.category import Category
from app.models.task import Task
from app.models.user import User

__all__ = [
    "User",
    "Task",
    "Category",
]
