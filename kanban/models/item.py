"""Item SQLAlchemy model for tasks on a Kanban board."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..database import Base
from .tag import item_tags

if TYPE_CHECKING:
    from .section import Section
    from .tag import Tag
    from .user import User


class Item(Base):
    """
    Item model representing a task within a section.

    Attributes:
        id: Unique identifier (UUID)
        section_id: FK to the owning section
        title: Item title
        description: Optional description
        due_date: Optional due date
        position: Ordering key, unique within the section
        status: todo, in_progress, done, blocked or archived
        priority: low, medium, high or urgent
        creator_user_id: FK to the user who created the item
        assigned_to: FK to the assigned user (nullable)
        created_at: Timestamp when item was created
        updated_at: Timestamp when item was last updated
    """

    __tablename__ = "Items"
    __allow_unmapped__ = True

    # Primary key - UUID
    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # Foreign keys
    section_id = Column(
        UUID(as_uuid=True),
        ForeignKey("Sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    creator_user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("Users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_to = Column(
        UUID(as_uuid=True),
        ForeignKey("Users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Item details
    title = Column(
        String(255),
        nullable=False,
    )
    description = Column(
        Text,
        nullable=True,
    )
    due_date = Column(
        Date,
        nullable=True,
        index=True,
    )
    position = Column(
        Integer,
        nullable=False,
    )
    status = Column(
        String(20),
        nullable=False,
        default="todo",
    )
    priority = Column(
        String(20),
        nullable=False,
        default="medium",
    )

    # Timestamps
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("section_id", "position", name="uq_items_section_position"),
    )

    # Relationships
    section = relationship(
        "Section",
        back_populates="items",
    )
    creator = relationship(
        "User",
        foreign_keys=[creator_user_id],
        lazy="joined",
    )
    assignee = relationship(
        "User",
        foreign_keys=[assigned_to],
        lazy="joined",
    )
    tags = relationship(
        "Tag",
        secondary=item_tags,
        order_by="Tag.name",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """String representation of Item."""
        return f"<Item(id={self.id}, title={self.title[:30]}, position={self.position})>"
