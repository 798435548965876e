"""Projects API endpoints.

Access Control:
- List: projects the user owns or is a member of
- View: any project member
- Update: owner or admin
- Delete: owner only
"""

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.project import ProjectCreate, ProjectDetail, ProjectUpdate, ProjectWithCounts
from ..services import project_service
from ..services.auth_service import get_current_user

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.get(
    "",
    response_model=List[ProjectWithCounts],
    summary="List projects",
    description="Projects the current user owns or is a member of, newest first, with section and item counts.",
    responses={
        200: {"description": "Projects retrieved successfully"},
        401: {"description": "Not authenticated"},
    },
)
async def list_projects(
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=500, description="Maximum number of records to return"),
) -> List[ProjectWithCounts]:
    """
    List the current user's projects.

    - **skip**: Number of records to skip for pagination
    - **limit**: Maximum number of records to return (1-500)
    """
    projects = await project_service.list_projects(db, current_user, skip=skip, limit=limit)
    counts = await project_service.count_project_contents(db, [p.id for p in projects])

    responses = []
    for project in projects:
        response = ProjectWithCounts.model_validate(project)
        response.sections_count, response.items_count = counts.get(project.id, (0, 0))
        responses.append(response)
    return responses


@router.post(
    "",
    response_model=ProjectDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
    description=(
        "Create a project owned by the current user. The owner membership and the "
        "default To Do / In Progress / Done sections are created with it."
    ),
    responses={
        201: {"description": "Project created successfully"},
        401: {"description": "Not authenticated"},
        409: {"description": "The user already has a project with this name"},
        422: {"description": "Validation error"},
    },
)
async def create_project(
    project_data: ProjectCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectDetail:
    return await project_service.create_project(
        db,
        current_user,
        name=project_data.name,
        description=project_data.description,
        status=project_data.status,
        start_date=project_data.start_date,
        end_date=project_data.end_date,
        color=project_data.color,
    )


@router.get(
    "/{project_id}",
    response_model=ProjectDetail,
    summary="Get a project",
    description="Get a project with its members, sections and tags.",
    responses={
        200: {"description": "Project retrieved successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Project not found"},
    },
)
async def get_project(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectDetail:
    return await project_service.get_project_for_user(db, project_id, current_user)


@router.put(
    "/{project_id}",
    response_model=ProjectDetail,
    summary="Update a project",
    description="Update project fields. Only provided fields are changed.",
    responses={
        200: {"description": "Project updated successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can update the project"},
        404: {"description": "Project not found"},
        409: {"description": "The owner already has a project with this name"},
        422: {"description": "Validation error"},
    },
)
async def update_project(
    project_id: UUID,
    project_data: ProjectUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectDetail:
    project = await project_service.get_project(db, project_id)
    return await project_service.update_project(
        db, project, current_user, project_data.model_dump(exclude_unset=True)
    )


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project",
    description="Delete a project together with its sections, items, tags and memberships.",
    responses={
        204: {"description": "Project deleted successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner can delete the project"},
        404: {"description": "Project not found"},
    },
)
async def delete_project(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    project = await project_service.get_project(db, project_id)
    await project_service.delete_project(db, project, current_user)
