"""Pydantic schemas for Section model validation."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SectionFilterType(str, Enum):
    """Declarative filter kinds a section can carry."""

    NONE = "none"
    STATUS = "status"
    TAG = "tag"
    DATE = "date"
    PRIORITY = "priority"
    ASSIGNED_TO = "assigned_to"


FilterValue = Optional[Union[Dict[str, Any], str]]


class SectionCreate(BaseModel):
    """Schema for creating a section at the end of a project board."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Section name",
        examples=["Review"],
    )
    filter_type: SectionFilterType = Field(
        SectionFilterType.NONE,
        description="Filter kind applied when listing the section's items",
    )
    filter_value: FilterValue = Field(
        None,
        description=(
            "Scalar for status/priority/assigned_to/tag filters; object (or JSON "
            'string) for date filters, e.g. {"overdue": true}'
        ),
        examples=["in_progress", {"due_between": {"start": "2024-06-01", "end": "2024-06-30"}}],
    )
    item_limit: Optional[int] = Field(
        None,
        ge=1,
        description="Maximum number of items displayed (unset = unlimited)",
    )


class SectionUpdate(BaseModel):
    """Schema for updating a section. Only provided fields are changed."""

    name: Optional[str] = Field(
        None,
        min_length=1,
        max_length=255,
        description="Section name",
    )
    filter_type: Optional[SectionFilterType] = Field(
        None,
        description="Filter kind",
    )
    filter_value: FilterValue = Field(
        None,
        description="Filter value (null clears it)",
    )
    item_limit: Optional[int] = Field(
        None,
        ge=1,
        description="Maximum number of items displayed (null removes the cap)",
    )


class SectionReorder(BaseModel):
    """Complete list of a project's section ids in the desired order."""

    section_ids: List[UUID] = Field(
        ...,
        description="Every section id of the project, in the new order",
    )


class SectionResponse(BaseModel):
    """Section response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Section ID")
    project_id: UUID = Field(..., description="Owning project ID")
    name: str = Field(..., description="Section name")
    position: int = Field(..., description="1-based position within the project")
    filter_type: SectionFilterType = Field(..., description="Filter kind")
    filter_value: Optional[Any] = Field(None, description="Filter value")
    item_limit: Optional[int] = Field(None, description="Display cap")
    created_at: Optional[datetime] = Field(None, description="When the section was created")
    updated_at: Optional[datetime] = Field(None, description="When the section was last updated")


class SectionWithCount(SectionResponse):
    """Section response including the raw (unfiltered) item count."""

    items_count: int = Field(
        0,
        description="Total items in the section, ignoring filter and limit",
    )
