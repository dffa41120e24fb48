"""
Task API Routes - owner-scoped task CRUD with live change events.

Every route requires a bearer token. The owner id is taken from the token,
never from the request body.
"""

import uuid

from fastapi import APIRouter, Depends, Query

from app.config import settings
from app.dependencies.auth import get_current_user_id
from app.dependencies.services import get_task_service
from app.schemas import (
    MessageResponse,
    TaskCreate,
    TaskFilters,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
    serialize_task,
)
from app.services.task_service import TaskService
from app.utils.logger import setup_logger

logger = setup_logger("api.tasks")

router = APIRouter(prefix=settings.api_prefix, tags=["Tasks"])


@router.get("/tasks", response_model=TaskListResponse)
async def list_tasks(
    status: str | None = Query(None, description="Exact status match"),
    priority: str | None = Query(None, description="Exact priority match"),
    category: str | None = Query(None, description="Exact category match"),
    search: str | None = Query(None, description="Case-insensitive title substring"),
    owner_id: uuid.UUID = Depends(get_current_user_id),
    task_service: TaskService = Depends(get_task_service),
):
    """List the caller's tasks, newest first, narrowed by any given filters."""
    filters = TaskFilters(
        status=status, priority=priority, category=category, search=search
    )
    tasks = await task_service.list(owner_id, filters)
    return TaskListResponse(tasks=[serialize_task(task) for task in tasks])


@router.post("/tasks", response_model=TaskResponse)
async def create_task(
    task_data: TaskCreate,
    owner_id: uuid.UUID = Depends(get_current_user_id),
    task_service: TaskService = Depends(get_task_service),
):
    task = await task_service.create(owner_id, task_data)
    return TaskResponse(task=serialize_task(task))


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    owner_id: uuid.UUID = Depends(get_current_user_id),
    task_service: TaskService = Depends(get_task_service),
):
    """Replace only the provided fields. 404 when the caller owns no such task."""
    task = await task_service.update(owner_id, task_id, task_data)
    return TaskResponse(task=serialize_task(task))


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    owner_id: uuid.UUID = Depends(get_current_user_id),
    task_service: TaskService = Depends(get_task_service),
):
    """Delete a task. Repeating the call, or naming an unknown id, also succeeds."""
    await task_service.delete(owner_id, task_id)
    return MessageResponse(message="Task deleted")
