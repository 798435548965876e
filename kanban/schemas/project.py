"""Pydantic schemas for Project model validation."""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .project_member import ProjectMemberResponse
from .section import SectionResponse
from .tag import TagResponse
from .user import UserSummary

PROJECT_COLOR_PATTERN = r"^#([a-fA-F0-9]{6}|[a-fA-F0-9]{3})$"


class ProjectStatus(str, Enum):
    """Project lifecycle status."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"


class ProjectBase(BaseModel):
    """Base schema with common project fields."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Project name (unique per owner)",
        examples=["Website Redesign"],
    )
    description: Optional[str] = Field(
        None,
        description="Project description",
        examples=["Q3 redesign of the marketing site"],
    )
    status: ProjectStatus = Field(
        ProjectStatus.ACTIVE,
        description="Project status",
    )
    start_date: Optional[date] = Field(
        None,
        description="Project start date",
        examples=["2024-06-01"],
    )
    end_date: Optional[date] = Field(
        None,
        description="Project end date (on or after start_date)",
        examples=["2024-09-30"],
    )
    color: Optional[str] = Field(
        None,
        pattern=PROJECT_COLOR_PATTERN,
        description="Hex color code (#RGB or #RRGGBB)",
        examples=["#ff8800"],
    )


class ProjectCreate(ProjectBase):
    """Schema for creating a new project."""

    @model_validator(mode="after")
    def check_date_range(self) -> "ProjectCreate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class ProjectUpdate(BaseModel):
    """Schema for updating a project. Only provided fields are changed."""

    name: Optional[str] = Field(
        None,
        min_length=1,
        max_length=255,
        description="Project name (unique per owner)",
    )
    description: Optional[str] = Field(
        None,
        description="Project description",
    )
    status: Optional[ProjectStatus] = Field(
        None,
        description="Project status",
    )
    start_date: Optional[date] = Field(
        None,
        description="Project start date",
    )
    end_date: Optional[date] = Field(
        None,
        description="Project end date",
    )
    color: Optional[str] = Field(
        None,
        pattern=PROJECT_COLOR_PATTERN,
        description="Hex color code (#RGB or #RRGGBB)",
    )


class ProjectResponse(ProjectBase):
    """Schema for project response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(
        ...,
        description="Unique project identifier",
    )
    owner_user_id: UUID = Field(
        ...,
        description="ID of the owning user",
    )
    owner: Optional[UserSummary] = Field(
        None,
        description="Owning user",
    )
    created_at: Optional[datetime] = Field(
        None,
        description="When the project was created",
    )
    updated_at: Optional[datetime] = Field(
        None,
        description="When the project was last updated",
    )


class ProjectWithCounts(ProjectResponse):
    """Project response with section and item counts, used by the list endpoint."""

    sections_count: int = Field(
        0,
        description="Number of sections in this project",
    )
    items_count: int = Field(
        0,
        description="Number of items across all sections",
    )


class ProjectDetail(ProjectResponse):
    """Project response with its members, sections and tags."""

    members: List[ProjectMemberResponse] = Field(
        default_factory=list,
        description="Project members including the owner",
    )
    sections: List[SectionResponse] = Field(
        default_factory=list,
        description="Sections ordered by position",
    )
    tags: List[TagResponse] = Field(
        default_factory=list,
        description="Project tags ordered by name",
    )
