"""
Task Service - owner-scoped CRUD and filtered listing for tasks.

Every mutation publishes a change event on the broadcast channel after the
row write commits. Publishing is fire-and-forget; a broadcast problem is
logged by the channel and never changes the outcome reported to the caller.
"""

import uuid
from typing import Any

from app.db_handlers.task import TaskDBHandler
from app.errors import NotFoundError, ValidationError
from app.models.task import Task
from app.schemas import TaskCreate, TaskFilters, TaskUpdate, serialize_task
from app.services.broadcast import (
    EVENT_TASK_CREATED,
    EVENT_TASK_DELETED,
    EVENT_TASK_UPDATED,
    BroadcastChannel,
    ChangeEvent,
)
from app.utils.logger import setup_logger

logger = setup_logger("task_service")


def parse_task_id(task_id: str | uuid.UUID) -> uuid.UUID | None:
    if isinstance(task_id, uuid.UUID):
        return task_id
    try:
        return uuid.UUID(str(task_id))
    except ValueError:
        return None


def _require_title(title: str | None) -> str:
    if title is None or not title.strip():
        raise ValidationError("Title is required")
    return title.strip()


class TaskService:
    def __init__(
        self,
        channel: BroadcastChannel | None = None,
        task_db_handler: TaskDBHandler | None = None,
    ):
        self.channel = channel
        self.tasks = task_db_handler or TaskDBHandler()

    async def list(
        self, owner_id: uuid.UUID, filters: TaskFilters | None = None
    ) -> list[Task]:
        filters = filters or TaskFilters()
        tasks = await self.tasks.list_owned_tasks(
            owner_id,
            status=filters.status,
            priority=filters.priority,
            category=filters.category,
            search=filters.search,
        )
        logger.debug(f"Found {len(tasks)} tasks for owner {owner_id}")
        return tasks

    async def create(self, owner_id: uuid.UUID, fields: TaskCreate) -> Task:
        data = fields.model_dump(exclude_unset=True, exclude_none=True)
        data["title"] = _require_title(fields.title)
        data["subtasks"] = [s.model_dump() for s in fields.subtasks]
        data["tags"] = list(fields.tags)
        data["priority"] = fields.priority
        # Owner always comes from the authenticated context
        data["owner_id"] = owner_id

        task = await self.tasks.create_task(data)
        logger.info(f"Created task {task.id} for owner {owner_id}")
        self._publish(EVENT_TASK_CREATED, owner_id, serialize_task(task), task.version)
        return task

    async def update(
        self, owner_id: uuid.UUID, task_id: str | uuid.UUID, fields: TaskUpdate
    ) -> Task:
        data: dict[str, Any] = fields.model_dump(exclude_unset=True)
        if "title" in data:
            data["title"] = _require_title(data["title"])
        if data.get("subtasks") is not None:
            data["subtasks"] = [s.model_dump() for s in fields.subtasks]
        for key in ("tags", "subtasks", "status", "priority", "completed"):
            # These columns are non-nullable; an explicit null means "leave as is"
            if key in data and data[key] is None:
                data.pop(key)

        task_uuid = parse_task_id(task_id)
        task = None
        if task_uuid is not None:
            task = await self.tasks.update_owned_task(task_uuid, owner_id, data)
        if task is None:
            raise NotFoundError("Task not found")

        logger.info(f"Updated task {task.id} to version {task.version}")
        self._publish(EVENT_TASK_UPDATED, owner_id, serialize_task(task), task.version)
        return task

    async def delete(self, owner_id: uuid.UUID, task_id: str | uuid.UUID) -> bool:
        """
        Delete an owned task.

        Succeeds whether or not a row matched so retrying clients get the same
        answer; the return value reports whether something was removed. A
        ``task-deleted`` event is published only when a row was removed.
        """
        task_uuid = parse_task_id(task_id)
        if task_uuid is None:
            logger.debug(f"Ignoring delete of malformed task id {task_id!r}")
            return False

        removed = await self.tasks.delete_owned_task(task_uuid, owner_id)
        if not removed:
            logger.debug(f"Delete of task {task_uuid} matched nothing for owner {owner_id}")
            return False

        logger.info(f"Deleted task {task_uuid} for owner {owner_id}")
        self._publish(EVENT_TASK_DELETED, owner_id, str(task_uuid), None)
        return True

    def _publish(
        self, event_type: str, owner_id: uuid.UUID, data: Any, version: int | None
    ) -> None:
        if self.channel is None:
            return
        try:
            event = ChangeEvent(
                type=event_type, owner_id=str(owner_id), data=data, version=version
            )
            self.channel.publish(event)
        except Exception as e:
            logger.error(f"Failed to publish {event_type} event: {e}", exc_info=True)
