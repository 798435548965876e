"""Pydantic schemas for Item model validation."""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .tag import TagResponse
from .user import UserSummary


class ItemStatus(str, Enum):
    """Item status enumeration."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"
    ARCHIVED = "archived"


class ItemPriority(str, Enum):
    """Item priority enumeration."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ItemBase(BaseModel):
    """Base schema with common item fields."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Item title",
        examples=["Write release notes"],
    )
    description: Optional[str] = Field(
        None,
        description="Detailed item description",
    )
    due_date: Optional[date] = Field(
        None,
        description="Item due date",
        examples=["2024-06-30"],
    )
    status: ItemStatus = Field(
        ItemStatus.TODO,
        description="Item status",
    )
    priority: ItemPriority = Field(
        ItemPriority.MEDIUM,
        description="Item priority",
    )


class ItemCreate(ItemBase):
    """Schema for creating an item at the end of a section."""

    assigned_to: Optional[UUID] = Field(
        None,
        description="ID of the assigned user",
    )
    tag_ids: List[UUID] = Field(
        default_factory=list,
        description="Tags to attach (must belong to the item's project)",
    )


class ItemUpdate(BaseModel):
    """Schema for updating an item. Only provided fields are changed."""

    title: Optional[str] = Field(
        None,
        min_length=1,
        max_length=255,
        description="Item title",
    )
    description: Optional[str] = Field(
        None,
        description="Detailed item description",
    )
    due_date: Optional[date] = Field(
        None,
        description="Item due date (null clears it)",
    )
    status: Optional[ItemStatus] = Field(
        None,
        description="Item status",
    )
    priority: Optional[ItemPriority] = Field(
        None,
        description="Item priority",
    )
    assigned_to: Optional[UUID] = Field(
        None,
        description="ID of the assigned user (null unassigns)",
    )
    tag_ids: Optional[List[UUID]] = Field(
        None,
        description="Replacement tag set; an empty list clears all tags",
    )


class ItemReorder(BaseModel):
    """Complete list of a section's item ids in the desired order."""

    item_ids: List[UUID] = Field(
        ...,
        description="Every item id of the section, in the new order",
    )


class ItemResponse(ItemBase):
    """Schema for item response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Unique item identifier")
    section_id: UUID = Field(..., description="Owning section ID")
    position: int = Field(..., description="Position within the section")
    creator_user_id: UUID = Field(..., description="ID of the creating user")
    assigned_to: Optional[UUID] = Field(None, description="ID of the assigned user")
    creator: Optional[UserSummary] = Field(None, description="Creating user")
    assignee: Optional[UserSummary] = Field(None, description="Assigned user")
    tags: List[TagResponse] = Field(default_factory=list, description="Attached tags")
    created_at: Optional[datetime] = Field(None, description="When the item was created")
    updated_at: Optional[datetime] = Field(None, description="When the item was last updated")
