"""
Task model for a user's to-do items.

Lifecycle:
    status: todo → in-progress → completed (open string, other values allowed)

``status`` is the single source of truth for progress. ``completed`` and
``completed_at`` are derived from it by ``Task.apply_status`` and written in
the same row update.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin, utcnow

STATUS_TODO = "todo"
STATUS_IN_PROGRESS = "in-progress"
STATUS_COMPLETED = "completed"

PRIORITY_LEVELS = ("urgent", "high", "medium", "low")

JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class Task(Base, UUIDMixin, TimestampMixin):
    """A to-do item owned by exactly one user."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_owner_id", "owner_id"),
        Index("ix_tasks_owner_status", "owner_id", "status"),
        Index("ix_tasks_owner_priority", "owner_id", "priority"),
    )

    owner_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Reference to the user who owns this task",
    )

    title = Column(String(500), nullable=False)

    description = Column(Text, nullable=True)

    status = Column(
        String(30),
        nullable=False,
        default=STATUS_TODO,
        comment="Progress state; 'completed' is terminal",
    )

    priority = Column(
        String(30),
        nullable=False,
        default="medium",
        comment="urgent/high/medium/low; other values are stored as given",
    )

    category = Column(
        String(100),
        nullable=True,
        comment="Name of a category; not enforced as a foreign key",
    )

    due_date = Column(DateTime(timezone=True), nullable=True)

    completed = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Derived from status",
    )

    completed_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="Set when status enters 'completed', cleared when it leaves",
    )

    tags = Column(JSONDocument, nullable=False, default=list)

    subtasks = Column(
        JSONDocument,
        nullable=False,
        default=list,
        comment="Ordered list of {title, completed}",
    )

    version = Column(
        Integer,
        nullable=False,
        default=1,
        comment="Incremented on every update; lets clients drop stale events",
    )

    owner = relationship(
        "User",
        back_populates="tasks",
        doc="User who owns this task",
    )

    @property
    def is_complete(self) -> bool:
        return self.status == STATUS_COMPLETED

    def apply_status(self, status: str) -> None:
        """Set status and keep the derived completion fields in step."""
        was_complete = self.status == STATUS_COMPLETED and bool(self.completed_at)
        self.status = status
        self.completed = status == STATUS_COMPLETED
        if self.completed and not was_complete:
            self.completed_at = utcnow()
        elif not self.completed:
            self.completed_at = None

    def __repr__(self):
        return (
            f"<Task(id={self.id}, status='{self.status}', "
            f"priority='{self.priority}', title='{(self.title or '')[:50]}')>"
        )
