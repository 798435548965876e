"""Pydantic schemas for project-scoped tags."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

TAG_COLOR_PATTERN = r"^#[a-fA-F0-9]{6}$"


class TagCreate(BaseModel):
    """Schema for creating a tag in a project."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Tag name (unique within the project)",
        examples=["backend"],
    )
    color: Optional[str] = Field(
        None,
        pattern=TAG_COLOR_PATTERN,
        description="Hex color code (#RRGGBB); defaults to the configured tag color",
        examples=["#3b82f6"],
    )


class TagUpdate(BaseModel):
    """Schema for renaming or recoloring a tag."""

    name: Optional[str] = Field(
        None,
        min_length=1,
        max_length=50,
        description="Tag name (unique within the project)",
    )
    color: Optional[str] = Field(
        None,
        pattern=TAG_COLOR_PATTERN,
        description="Hex color code (#RRGGBB)",
    )


class TagResponse(BaseModel):
    """Tag response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Tag ID")
    project_id: UUID = Field(..., description="Owning project ID")
    name: str = Field(..., description="Tag name")
    color: str = Field(..., description="Hex color code")
    created_at: Optional[datetime] = Field(None, description="When the tag was created")
    updated_at: Optional[datetime] = Field(None, description="When the tag was last updated")
