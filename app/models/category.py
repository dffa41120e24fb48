from sqlalchemy import Column, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin


class Category(Base, UUIDMixin, TimestampMixin):
    """Per-user label that tasks reference by name."""

    __tablename__ = "categories"
    __table_args__ = (Index("ix_categories_owner_id", "owner_id"),)

    owner_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    name = Column(String(100), nullable=False)

    color = Column(String(32), nullable=False, default="#3B82F6")

    icon = Column(String(32), nullable=True)

    owner = relationship("User", back_populates="categories")

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"
