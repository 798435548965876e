"""Tags API endpoints.

Tags are scoped to one project. Any member can list them; the owner or an
admin can create, rename, recolor and delete them.
"""

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.tag import TagCreate, TagResponse, TagUpdate
from ..services import tag_service
from ..services.auth_service import get_current_user
from ..services.permission_service import PermissionService
from ..services.project_service import get_project

router = APIRouter(tags=["Tags"])


@router.get(
    "/api/projects/{project_id}/tags",
    response_model=List[TagResponse],
    summary="List tags",
    description="Tags of a project ordered by name.",
    responses={
        200: {"description": "Tags retrieved successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Project not found"},
    },
)
async def list_tags(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> List[TagResponse]:
    project = await get_project(db, project_id)
    return await tag_service.list_tags(db, project, current_user)


@router.post(
    "/api/projects/{project_id}/tags",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tag",
    responses={
        201: {"description": "Tag created successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can create tags"},
        404: {"description": "Project not found"},
        409: {"description": "Tag name already used in this project"},
        422: {"description": "Validation error"},
    },
)
async def create_tag(
    project_id: UUID,
    tag_data: TagCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    project = await get_project(db, project_id)
    return await tag_service.create_tag(
        db, project, current_user, name=tag_data.name, color=tag_data.color
    )


@router.get(
    "/api/tags/{tag_id}",
    response_model=TagResponse,
    summary="Get a tag",
    responses={
        200: {"description": "Tag retrieved successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Tag not found"},
    },
)
async def get_tag(
    tag_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    tag, project = await tag_service.get_tag_context(db, tag_id)
    await PermissionService(db).require_view(current_user, project)
    return tag


@router.put(
    "/api/tags/{tag_id}",
    response_model=TagResponse,
    summary="Update a tag",
    responses={
        200: {"description": "Tag updated successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can update tags"},
        404: {"description": "Tag not found"},
        409: {"description": "Tag name already used in this project"},
        422: {"description": "Validation error"},
    },
)
async def update_tag(
    tag_id: UUID,
    tag_data: TagUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    tag, project = await tag_service.get_tag_context(db, tag_id)
    return await tag_service.update_tag(
        db, tag, project, current_user, tag_data.model_dump(exclude_unset=True)
    )


@router.delete(
    "/api/tags/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a tag",
    description="Delete a tag; it is detached from every item.",
    responses={
        204: {"description": "Tag deleted successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can delete tags"},
        404: {"description": "Tag not found"},
    },
)
async def delete_tag(
    tag_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    tag, project = await tag_service.get_tag_context(db, tag_id)
    await tag_service.delete_tag(db, tag, project, current_user)
