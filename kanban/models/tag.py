"""Tag SQLAlchemy model and the item-tag association table.

Tags are scoped to a single project for their whole life. Items may only be
tagged with tags from their own section's project; deleting a tag removes
its item associations through the FK cascade.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .project import Project


item_tags = Table(
    "ItemTags",
    Base.metadata,
    Column(
        "item_id",
        UUID(as_uuid=True),
        ForeignKey("Items.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        UUID(as_uuid=True),
        ForeignKey("Tags.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
    Column(
        "created_at",
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    ),
)


class Tag(Base):
    """
    Tag definition scoped to a project.

    Attributes:
        id: Unique identifier (UUID)
        project_id: FK to the owning project (immutable)
        name: Tag display name (unique within the project, max 50 chars)
        color: Hex color code for UI (e.g. "#3b82f6")
        created_at: Timestamp when tag was created
        updated_at: Timestamp when tag was last updated
    """

    __tablename__ = "Tags"
    __allow_unmapped__ = True

    # Primary key
    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    project_id = Column(
        UUID(as_uuid=True),
        ForeignKey("Projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Tag details
    name = Column(
        String(50),
        nullable=False,
    )
    color = Column(
        String(7),
        nullable=False,
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
        UniqueConstraint("project_id", "name", name="uq_tags_project_name"),
    )

    # Relationships
    project = relationship(
        "Project",
        back_populates="tags",
    )

    def __repr__(self) -> str:
        """String representation of Tag."""
        return f"<Tag(id={self.id}, name={self.name})>"
