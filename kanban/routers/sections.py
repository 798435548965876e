"""Sections API endpoints.

Sections are the ordered columns of a project board. Viewing requires
project membership; creating, editing, deleting and reordering sections
requires the owner or an admin.
"""

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.section import Section
from ..models.user import User
from ..schemas.section import (
    SectionCreate,
    SectionReorder,
    SectionUpdate,
    SectionWithCount,
)
from ..services import section_service
from ..services.auth_service import get_current_user
from ..services.permission_service import PermissionService
from ..services.project_service import get_project
from ..services.section_filter import count_items_by_section

router = APIRouter(prefix="/api/projects/{project_id}/sections", tags=["Sections"])


async def _with_counts(db: AsyncSession, sections: List[Section]) -> List[SectionWithCount]:
    counts = await count_items_by_section(db, [section.id for section in sections])
    responses = []
    for section in sections:
        response = SectionWithCount.model_validate(section)
        response.items_count = counts.get(section.id, 0)
        responses.append(response)
    return responses


@router.get(
    "",
    response_model=List[SectionWithCount],
    summary="List sections",
    description="Sections of a project ordered by position, with raw item counts.",
    responses={
        200: {"description": "Sections retrieved successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Project not found"},
    },
)
async def list_sections(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> List[SectionWithCount]:
    project = await get_project(db, project_id)
    sections = await section_service.list_sections(db, project, current_user)
    return await _with_counts(db, sections)


@router.post(
    "",
    response_model=SectionWithCount,
    status_code=status.HTTP_201_CREATED,
    summary="Create a section",
    description="Append a section at the end of the project board.",
    responses={
        201: {"description": "Section created successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can create sections"},
        404: {"description": "Project not found"},
        422: {"description": "Invalid filter value"},
    },
)
async def create_section(
    project_id: UUID,
    section_data: SectionCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> SectionWithCount:
    project = await get_project(db, project_id)
    section = await section_service.create_section(
        db,
        project,
        current_user,
        name=section_data.name,
        filter_type=section_data.filter_type,
        filter_value=section_data.filter_value,
        item_limit=section_data.item_limit,
    )
    return SectionWithCount.model_validate(section)


@router.post(
    "/reorder",
    response_model=List[SectionWithCount],
    summary="Reorder sections",
    description="Supply every section id of the project in the new order.",
    responses={
        200: {"description": "Sections reordered"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can reorder sections"},
        404: {"description": "Project not found"},
        422: {"description": "Ids do not match the project's sections"},
    },
)
async def reorder_sections(
    project_id: UUID,
    reorder_data: SectionReorder,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> List[SectionWithCount]:
    project = await get_project(db, project_id)
    sections = await section_service.reorder_sections(
        db, project, current_user, reorder_data.section_ids
    )
    return await _with_counts(db, sections)


@router.get(
    "/{section_id}",
    response_model=SectionWithCount,
    summary="Get a section",
    responses={
        200: {"description": "Section retrieved successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Project or section not found"},
    },
)
async def get_section(
    project_id: UUID,
    section_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> SectionWithCount:
    project = await get_project(db, project_id)
    await PermissionService(db).require_view(current_user, project)
    section = await section_service.get_section(db, section_id, project.id)
    return (await _with_counts(db, [section]))[0]


@router.put(
    "/{section_id}",
    response_model=SectionWithCount,
    summary="Update a section",
    description="Rename a section or change its filter and item limit.",
    responses={
        200: {"description": "Section updated successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can update sections"},
        404: {"description": "Project or section not found"},
        422: {"description": "Invalid filter value"},
    },
)
async def update_section(
    project_id: UUID,
    section_id: UUID,
    section_data: SectionUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> SectionWithCount:
    project = await get_project(db, project_id)
    await PermissionService(db).require_view(current_user, project)
    section = await section_service.get_section(db, section_id, project.id)
    section = await section_service.update_section(
        db, section, project, current_user, section_data.model_dump(exclude_unset=True)
    )
    return (await _with_counts(db, [section]))[0]


@router.delete(
    "/{section_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a section",
    description="Delete a section and all of its items.",
    responses={
        204: {"description": "Section deleted successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can delete sections"},
        404: {"description": "Project or section not found"},
    },
)
async def delete_section(
    project_id: UUID,
    section_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    project = await get_project(db, project_id)
    await PermissionService(db).require_view(current_user, project)
    section = await section_service.get_section(db, section_id, project.id)
    await section_service.delete_section(db, section, project, current_user)
