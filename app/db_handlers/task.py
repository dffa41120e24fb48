from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models.task import STATUS_COMPLETED, STATUS_TODO, Task
from app.utils.logger import setup_logger

logger = setup_logger("task_db_handler")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class TaskDBHandler(BaseDBHandler[Task]):
    """Task persistence. Every query carries the owner id in its WHERE clause."""

    def __init__(self):
        super().__init__(Task)

    @check_local_db
    async def create_task(
        self, obj_dict: dict[str, Any], *, db: AsyncSession = None
    ) -> Task:
        """Create a task, deriving completion fields from its status."""
        data = dict(obj_dict)
        status = data.pop("status", None)
        completed = data.pop("completed", None)
        if status is None:
            status = STATUS_COMPLETED if completed else STATUS_TODO

        task = Task(**data)
        task.apply_status(status)
        try:
            db.add(task)
            await db.commit()
            await db.refresh(task)
            return task
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error creating task: {e}", exc_info=True)
            raise

    @check_local_db
    async def list_owned_tasks(
        self,
        owner_id: uuid.UUID,
        *,
        status: str | None = None,
        priority: str | None = None,
        category: str | None = None,
        search: str | None = None,
        db: AsyncSession = None,
    ) -> list[Task]:
        """Owner's tasks matching every given filter, newest first."""
        stmt = select(Task).where(Task.owner_id == owner_id)
        if status:
            stmt = stmt.where(Task.status == status)
        if priority:
            stmt = stmt.where(Task.priority == priority)
        if category:
            stmt = stmt.where(Task.category == category)
        if search:
            stmt = stmt.where(Task.title.ilike(f"%{_escape_like(search)}%", escape="\\"))
        stmt = stmt.order_by(Task.created_at.desc(), Task.id.desc())

        try:
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing tasks for owner {owner_id}: {e}")
            raise

    @check_local_db
    async def get_owned_task(
        self, task_id: uuid.UUID, owner_id: uuid.UUID, *, db: AsyncSession = None
    ) -> Task | None:
        stmt = select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @check_local_db
    async def update_owned_task(
        self,
        task_id: uuid.UUID,
        owner_id: uuid.UUID,
        update_data: dict[str, Any],
        *,
        db: AsyncSession = None,
    ) -> Task | None:
        """
        Replace the given fields on an owned task and bump its version.

        Returns None when no task matches both id and owner. A ``completed``
        flag without a ``status`` is translated into a status change so the
        two fields can never disagree.
        """
        task = await self.get_owned_task(task_id, owner_id, db=db)
        if not task:
            logger.warning(f"Task {task_id} not found for owner {owner_id}")
            return None

        data = dict(update_data)
        status = data.pop("status", None)
        completed = data.pop("completed", None)
        if status is None and completed is not None:
            if completed:
                status = STATUS_COMPLETED
            elif task.status == STATUS_COMPLETED:
                status = STATUS_TODO

        for field, value in data.items():
            if hasattr(task, field):
                setattr(task, field, value)
        if status is not None:
            task.apply_status(status)
        task.version = (task.version or 0) + 1

        try:
            db.add(task)
            await db.commit()
            await db.refresh(task)
            return task
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error updating task {task_id}: {e}", exc_info=True)
            raise

    @check_local_db
    async def delete_owned_task(
        self, task_id: uuid.UUID, owner_id: uuid.UUID, *, db: AsyncSession = None
    ) -> bool:
        """Delete an owned task. Returns whether a row was removed."""
        stmt = delete(Task).where(Task.id == task_id, Task.owner_id == owner_id)
        try:
            result = await db.execute(stmt)
            await db.commit()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error deleting task {task_id}: {e}", exc_info=True)
            raise
