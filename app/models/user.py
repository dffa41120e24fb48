"""
User model for authentication and task ownership.

Architecture:
    User → Task
    User → Category

The email index is unique, so duplicate registrations are rejected by the
store itself even when two requests race past the application-level check.
"""

from sqlalchemy import Column, Index, String
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """Registered account that owns tasks and categories."""

    __tablename__ = "users"
    __table_args__ = (Index("ix_users_email", "email", unique=True),)

    name = Column(
        String(100),
        nullable=False,
        comment="Display name",
    )

    email = Column(
        String(255),
        nullable=False,
        comment="Unique email used for login",
    )

    hashed_password = Column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password for secure authentication",
    )

    tasks = relationship(
        "Task",
        back_populates="owner",
        cascade="all, delete-orphan",
        doc="Tasks created by this user",
    )

    categories = relationship(
        "Category",
        back_populates="owner",
        cascade="all, delete-orphan",
        doc="Categories created by this user",
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
