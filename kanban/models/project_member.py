"""ProjectMember SQLAlchemy model for project collaborators and their roles."""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .project import Project
    from .user import User


class ProjectMemberRole(str, Enum):
    """Roles a user can hold within a project.

    - OWNER: The single project owner (set at creation or by ownership transfer)
    - ADMIN: Can edit the project and manage members
    - EDITOR: Read access plus item edits on items they created
    - MEMBER: Read access plus item edits on items they created
    """

    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    MEMBER = "member"


class ProjectMember(Base):
    """
    ProjectMember model - the Project x User join carrying a role.

    Exactly one row exists per (project, user). At most one row per project
    holds role ``owner`` and it always belongs to ``Project.owner_user_id``.

    Attributes:
        id: Unique identifier (UUID)
        project_id: FK to the project
        user_id: FK to the member user
        role: owner, admin, editor or member
        created_at: Timestamp when membership was created
        updated_at: Timestamp when membership was last updated
    """

    __tablename__ = "ProjectMembers"
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
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("Users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role = Column(
        String(20),
        nullable=False,
        default=ProjectMemberRole.MEMBER.value,
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
        UniqueConstraint("project_id", "user_id", name="uq_project_members_project_user"),
        # Partial unique index: a project never has two owner rows
        Index(
            "uq_project_members_single_owner",
            "project_id",
            unique=True,
            postgresql_where=text("role = 'owner'"),
            sqlite_where=text("role = 'owner'"),
        ),
    )

    # Relationships
    project = relationship(
        "Project",
        back_populates="members",
    )
    user = relationship(
        "User",
        lazy="joined",
    )

    def __repr__(self) -> str:
        """String representation of ProjectMember."""
        return f"<ProjectMember(project_id={self.project_id}, user_id={self.user_id}, role={self.role})>"
