"""Section SQLAlchemy model - an ordered, optionally filtered Kanban column."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .item import Item
    from .project import Project


class Section(Base):
    """
    Section model representing a column of a project board.

    Attributes:
        id: Unique identifier (UUID)
        project_id: FK to the owning project
        name: Section display name
        position: 1-based ordering key, unique within the project
        filter_type: none, status, tag, date, priority or assigned_to
        filter_value: JSON scalar (status/priority/assignee/tag) or JSON object (date predicate)
        item_limit: Optional cap on the number of displayed items
        created_at: Timestamp when section was created
        updated_at: Timestamp when section was last updated
    """

    __tablename__ = "Sections"
    __allow_unmapped__ = True

    # Primary key - UUID
    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # Foreign keys
    project_id = Column(
        UUID(as_uuid=True),
        ForeignKey("Projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(
        String(255),
        nullable=False,
    )
    position = Column(
        Integer,
        nullable=False,
    )

    # Declarative filter
    filter_type = Column(
        String(20),
        nullable=False,
        default="none",
    )
    filter_value = Column(
        JSON,
        nullable=True,
    )
    item_limit = Column(
        Integer,
        nullable=True,
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
        UniqueConstraint("project_id", "position", name="uq_sections_project_position"),
    )

    # Relationships
    project = relationship(
        "Project",
        back_populates="sections",
    )
    items = relationship(
        "Item",
        back_populates="section",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Item.position",
    )

    def __repr__(self) -> str:
        """String representation of Section."""
        return f"<Section(id={self.id}, name={self.name}, position={self.position})>"
