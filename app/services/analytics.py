"""
Analytics Aggregator - counts derived from a user's current task set.

Recomputed on every call from the owner's full task list. There is no cache,
so cost grows linearly with the number of tasks a user holds.
"""

import uuid
from collections.abc import Iterable
from datetime import UTC, date, datetime

from app.db_handlers.task import TaskDBHandler
from app.models.task import PRIORITY_LEVELS, Task
from app.schemas import PriorityBreakdown, TaskAnalytics


def _is_overdue(task: Task, today: date) -> bool:
    if task.completed or task.due_date is None:
        return False
    due = task.due_date
    if due.tzinfo is None:
        due = due.replace(tzinfo=UTC)
    return due.astimezone(UTC).date() < today


def summarize_tasks(tasks: Iterable[Task], today: date | None = None) -> TaskAnalytics:
    """
    Pure aggregation over a task collection.

    Pending counts follow the ``completed`` flag, not ``status``. A priority
    outside urgent/high/medium/low counts toward ``total`` but in no bucket.
    """
    today = today or datetime.now(UTC).date()
    buckets = dict.fromkeys(PRIORITY_LEVELS, 0)
    total = completed = overdue = 0

    for task in tasks:
        total += 1
        if task.completed:
            completed += 1
        if task.priority in buckets:
            buckets[task.priority] += 1
        if _is_overdue(task, today):
            overdue += 1

    return TaskAnalytics(
        total=total,
        completed=completed,
        pending=total - completed,
        by_priority=PriorityBreakdown(**buckets),
        completion_rate=round(completed / total * 100) if total else 0,
        overdue=overdue,
    )


class AnalyticsService:
    def __init__(self, task_db_handler: TaskDBHandler | None = None):
        self.tasks = task_db_handler or TaskDBHandler()

    async def summarize(self, owner_id: uuid.UUID) -> TaskAnalytics:
        tasks = await self.tasks.list_owned_tasks(owner_id)
        return summarize_tasks(tasks)
