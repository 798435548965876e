"""Pydantic schemas for ProjectMember model validation."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.project_member import ProjectMemberRole
from .user import UserSummary


class AssignableRole(str, Enum):
    """Roles that can be granted through the membership endpoints.

    ``owner`` is deliberately absent: it is only set at project creation or
    by an ownership transfer.
    """

    ADMIN = "admin"
    EDITOR = "editor"
    MEMBER = "member"


class ProjectMemberCreate(BaseModel):
    """Schema for adding a user to a project."""

    user_id: UUID = Field(
        ...,
        description="ID of the user being added as a project member",
    )
    role: AssignableRole = Field(
        AssignableRole.MEMBER,
        description="Role of the member (admin, editor or member)",
    )


class ProjectMemberUpdate(BaseModel):
    """Schema for changing a member's role."""

    role: AssignableRole = Field(
        ...,
        description="New role for the member (admin, editor or member)",
    )


class ProjectMemberResponse(BaseModel):
    """Schema for project member response with nested user info."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(
        ...,
        description="Unique project member identifier",
    )
    project_id: UUID = Field(
        ...,
        description="ID of the project",
    )
    user_id: UUID = Field(
        ...,
        description="ID of the member user",
    )
    role: ProjectMemberRole = Field(
        ...,
        description="Role of the member",
    )
    user: Optional[UserSummary] = Field(
        None,
        description="User details of the member",
    )
    created_at: Optional[datetime] = Field(
        None,
        description="When the membership was created",
    )
    updated_at: Optional[datetime] = Field(
        None,
        description="When the membership was last updated",
    )


class TransferOwnershipRequest(BaseModel):
    """Schema for handing a project over to another member."""

    new_owner_id: UUID = Field(
        ...,
        description="ID of the existing member who becomes the owner",
    )
