"""Project SQLAlchemy model - the top-level Kanban board."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .project_member import ProjectMember
    from .section import Section
    from .tag import Tag
    from .user import User


class Project(Base):
    """
    Project model representing a Kanban board.

    A project owns its ordered sections, its tags and its membership set.
    ``owner_user_id`` is a denormalized copy of the single ProjectMember row
    holding role ``owner``; only the ownership transfer transaction changes
    both together.

    Attributes:
        id: Unique identifier (UUID)
        name: Project name (unique per owning user)
        description: Optional description
        status: active, archived, on_hold or completed
        start_date: Optional start date
        end_date: Optional end date
        color: Optional hex color (#RGB or #RRGGBB)
        owner_user_id: FK to the owning user
        created_at: Timestamp when project was created
        updated_at: Timestamp when project was last updated
    """

    __tablename__ = "Projects"
    __allow_unmapped__ = True

    # Primary key - UUID
    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # Foreign keys
    owner_user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("Users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Project details
    name = Column(
        String(255),
        nullable=False,
    )
    description = Column(
        Text,
        nullable=True,
    )
    status = Column(
        String(20),
        nullable=False,
        default="active",
    )
    start_date = Column(
        Date,
        nullable=True,
    )
    end_date = Column(
        Date,
        nullable=True,
    )
    color = Column(
        String(7),
        nullable=True,
    )

    # Timestamps
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("owner_user_id", "name", name="uq_projects_owner_name"),
    )

    # Relationships
    owner = relationship(
        "User",
        foreign_keys=[owner_user_id],
        lazy="joined",
    )
    members = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProjectMember.created_at",
        lazy="selectin",
    )
    sections = relationship(
        "Section",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Section.position",
        lazy="selectin",
    )
    tags = relationship(
        "Tag",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Tag.name",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """String representation of Project."""
        return f"<Project(id={self.id}, name={self.name})>"
