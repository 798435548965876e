"""SQLAlchemy ORM models package."""

from .item import Item
from .project import Project
from .project_member import ProjectMember, ProjectMemberRole
from .section import Section
from .tag import Tag, item_tags
from .user import User

__all__ = [
    "Item",
    "Project",
    "ProjectMember",
    "ProjectMemberRole",
    "Section",
    "Tag",
    "User",
    "item_tags",
]
