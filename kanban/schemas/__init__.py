"""Pydantic schemas package for request/response validation."""

from .item import (
    ItemCreate,
    ItemPriority,
    ItemReorder,
    ItemResponse,
    ItemStatus,
    ItemUpdate,
)
from .project import (
    ProjectCreate,
    ProjectDetail,
    ProjectResponse,
    ProjectWithCounts,
    ProjectStatus,
    ProjectUpdate,
)
from .project_member import (
    AssignableRole,
    ProjectMemberCreate,
    ProjectMemberResponse,
    ProjectMemberUpdate,
    TransferOwnershipRequest,
)
from .section import (
    SectionCreate,
    SectionFilterType,
    SectionReorder,
    SectionResponse,
    SectionUpdate,
    SectionWithCount,
)
from .tag import TagCreate, TagResponse, TagUpdate
from .user import Token, UserCreate, UserResponse, UserSummary

__all__ = [
    # Item schemas
    "ItemCreate",
    "ItemPriority",
    "ItemReorder",
    "ItemResponse",
    "ItemStatus",
    "ItemUpdate",
    # Project schemas
    "ProjectCreate",
    "ProjectDetail",
    "ProjectResponse",
    "ProjectWithCounts",
    "ProjectStatus",
    "ProjectUpdate",
    # Project member schemas
    "AssignableRole",
    "ProjectMemberCreate",
    "ProjectMemberResponse",
    "ProjectMemberUpdate",
    "TransferOwnershipRequest",
    # Section schemas
    "SectionCreate",
    "SectionFilterType",
    "SectionReorder",
    "SectionResponse",
    "SectionUpdate",
    "SectionWithCount",
    # Tag schemas
    "TagCreate",
    "TagResponse",
    "TagUpdate",
    # User schemas
    "Token",
    "UserCreate",
    "UserResponse",
    "UserSummary",
]
