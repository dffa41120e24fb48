"""
Base configurations and mixins for database models.

Provides the declarative base plus the UUID primary key and timestamp mixins
shared by every table.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import declarative_base


def utcnow() -> datetime:
    return datetime.now(UTC)


Base = declarative_base()


class TimestampMixin:
    """
    Adds created_at / updated_at columns.

    Timestamps are assigned application-side in UTC so ordering keeps
    sub-second precision on every backend.
    """

    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
        comment="Timestamp when the record was created",
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        comment="Timestamp when the record was last updated",
    )


class UUIDMixin:
    """UUID4 primary key, stored natively on PostgreSQL."""

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True,
        comment="Primary key using UUID4 format",
    )


__all__ = ["Base", "TimestampMixin", "UUIDMixin", "utcnow"]
