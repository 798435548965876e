"""Items API endpoints.

Section listings run through the section's own filter and item limit, plus
optional ad-hoc filters from the query string:

- ``status`` / ``priority``: exact match
- ``assigned_to``: a user id, or ``null`` / ``unassigned`` for items without an assignee
- ``tags``: repeatable; the item must carry every listed tag

Access Control:
- View / list: any project member
- Create / reorder: owner or admin
- Update / delete: the item's creator, or owner or admin
"""

from typing import Annotated, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..exceptions import ValidationFailed
from ..models.user import User
from ..schemas.item import (
    ItemCreate,
    ItemPriority,
    ItemReorder,
    ItemResponse,
    ItemStatus,
    ItemUpdate,
)
from ..services import item_service
from ..services.auth_service import get_current_user
from ..services.permission_service import PermissionService
from ..services.project_service import get_project
from ..services.section_filter import ItemQueryFilters
from ..services.section_service import get_section

router = APIRouter(tags=["Items"])

UNASSIGNED_VALUES = ("null", "none", "unassigned", "0")


def item_query_filters(
    status_filter: Optional[ItemStatus] = Query(None, alias="status", description="Item status"),
    priority: Optional[ItemPriority] = Query(None, description="Item priority"),
    assigned_to: Optional[str] = Query(
        None,
        description="Assignee user id, or 'null' / 'unassigned' for items without one",
    ),
    tags: List[UUID] = Query(default=[], description="Tag ids the item must all carry"),
) -> ItemQueryFilters:
    """Build ad-hoc listing filters from query parameters."""
    assignee_id = None
    unassigned = False
    if assigned_to is not None and assigned_to != "":
        if assigned_to.lower() in UNASSIGNED_VALUES:
            unassigned = True
        else:
            try:
                assignee_id = UUID(assigned_to)
            except ValueError:
                raise ValidationFailed(
                    "assigned_to must be a user id or 'null'",
                    field="assigned_to",
                )
    return ItemQueryFilters(
        status=status_filter.value if status_filter else None,
        priority=priority.value if priority else None,
        assigned_to=assignee_id,
        unassigned=unassigned,
        tag_ids=tuple(tags),
    )


@router.get(
    "/api/projects/{project_id}/sections/{section_id}/items",
    response_model=List[ItemResponse],
    summary="List a section's items",
    description="Items ordered by position after the section filter, the query filters and the item limit.",
    responses={
        200: {"description": "Items retrieved successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Project or section not found"},
    },
)
async def list_section_items(
    project_id: UUID,
    section_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    filters: ItemQueryFilters = Depends(item_query_filters),
    db: AsyncSession = Depends(get_db),
) -> List[ItemResponse]:
    project = await get_project(db, project_id)
    await PermissionService(db).require_view(current_user, project)
    section = await get_section(db, section_id, project.id)
    return await item_service.list_items(db, section, project, current_user, filters)


@router.post(
    "/api/projects/{project_id}/sections/{section_id}/items",
    response_model=ItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an item",
    description="Append an item at the end of a section.",
    responses={
        201: {"description": "Item created successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can create items"},
        404: {"description": "Project or section not found"},
        422: {"description": "Validation error, unknown assignee or tag outside the project"},
    },
)
async def create_item(
    project_id: UUID,
    section_id: UUID,
    item_data: ItemCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ItemResponse:
    project = await get_project(db, project_id)
    await PermissionService(db).require_view(current_user, project)
    section = await get_section(db, section_id, project.id)
    return await item_service.create_item(
        db,
        section,
        project,
        current_user,
        title=item_data.title,
        description=item_data.description,
        due_date=item_data.due_date,
        status=item_data.status,
        priority=item_data.priority,
        assigned_to=item_data.assigned_to,
        tag_ids=item_data.tag_ids,
    )


@router.post(
    "/api/projects/{project_id}/sections/{section_id}/items/reorder",
    response_model=List[ItemResponse],
    summary="Reorder a section's items",
    description="Supply every item id of the section in the new order.",
    responses={
        200: {"description": "Items reordered"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can reorder items"},
        404: {"description": "Project or section not found"},
        422: {"description": "Ids do not match the section's items"},
    },
)
async def reorder_items(
    project_id: UUID,
    section_id: UUID,
    reorder_data: ItemReorder,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> List[ItemResponse]:
    project = await get_project(db, project_id)
    await PermissionService(db).require_view(current_user, project)
    section = await get_section(db, section_id, project.id)
    return await item_service.reorder_items(
        db, section, project, current_user, reorder_data.item_ids
    )


@router.get(
    "/api/projects/{project_id}/items",
    response_model=List[ItemResponse],
    summary="List all items of a project",
    description="Items across every section, ordered by section then item position. Section filters do not apply.",
    responses={
        200: {"description": "Items retrieved successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Project not found"},
    },
)
async def list_project_items(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    filters: ItemQueryFilters = Depends(item_query_filters),
    db: AsyncSession = Depends(get_db),
) -> List[ItemResponse]:
    project = await get_project(db, project_id)
    return await item_service.list_project_items(db, project, current_user, filters)


@router.get(
    "/api/items/{item_id}",
    response_model=ItemResponse,
    summary="Get an item",
    responses={
        200: {"description": "Item retrieved successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Item not found"},
    },
)
async def get_item(
    item_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ItemResponse:
    item, _section, project = await item_service.get_item_context(db, item_id)
    await PermissionService(db).require_view(current_user, project)
    return item


@router.put(
    "/api/items/{item_id}",
    response_model=ItemResponse,
    summary="Update an item",
    description="Update item fields. ``tag_ids`` replaces the whole tag set; an empty list clears it.",
    responses={
        200: {"description": "Item updated successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the creator, the owner or an admin can update this item"},
        404: {"description": "Item not found"},
        422: {"description": "Validation error, unknown assignee or tag outside the project"},
    },
)
async def update_item(
    item_id: UUID,
    item_data: ItemUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ItemResponse:
    item, _section, project = await item_service.get_item_context(db, item_id)
    return await item_service.update_item(
        db, item, project, current_user, item_data.model_dump(exclude_unset=True)
    )


@router.delete(
    "/api/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an item",
    responses={
        204: {"description": "Item deleted successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the creator, the owner or an admin can delete this item"},
        404: {"description": "Item not found"},
    },
)
async def delete_item(
    item_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    item, _section, project = await item_service.get_item_context(db, item_id)
    await item_service.delete_item(db, item, project, current_user)
