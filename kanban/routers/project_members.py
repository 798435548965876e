"""Project Members API endpoints.

Access Control:
- List / get members: any project member
- Add members, change roles, remove members: owner or admin
  (never on the owner; an admin never on themself)
- Leave: any member except the owner
- Transfer ownership: owner only
"""

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..exceptions import NotMember
from ..models.user import User
from ..schemas.project import ProjectDetail
from ..schemas.project_member import (
    ProjectMemberCreate,
    ProjectMemberResponse,
    ProjectMemberUpdate,
    TransferOwnershipRequest,
)
from ..services import membership_service, ownership_service
from ..services.auth_service import get_current_user
from ..services.permission_service import PermissionService
from ..services.project_service import get_project

router = APIRouter(prefix="/api/projects/{project_id}", tags=["Project Members"])


@router.get(
    "/members",
    response_model=List[ProjectMemberResponse],
    summary="List project members",
    description="Get all members of a project, including the owner.",
    responses={
        200: {"description": "List of project members retrieved successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Project not found"},
    },
)
async def list_project_members(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> List[ProjectMemberResponse]:
    project = await get_project(db, project_id)
    return await membership_service.list_members(db, project, current_user)


@router.get(
    "/members/{user_id}",
    response_model=ProjectMemberResponse,
    summary="Get a project member by user ID",
    responses={
        200: {"description": "Project member retrieved successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Project or member not found"},
    },
)
async def get_project_member(
    project_id: UUID,
    user_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectMemberResponse:
    project = await get_project(db, project_id)
    await PermissionService(db).require_view(current_user, project)
    member = await membership_service.get_member(db, project.id, user_id)
    if member is None:
        raise NotMember("User is not a member of this project")
    return member


@router.post(
    "/members",
    response_model=ProjectMemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a project member",
    description="Add a user to the project as admin, editor or member.",
    responses={
        201: {"description": "Project member added successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner or an admin can add members"},
        404: {"description": "Project or user not found"},
        409: {"description": "User is already a member"},
        422: {"description": "Invalid role"},
    },
)
async def add_project_member(
    project_id: UUID,
    member_data: ProjectMemberCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectMemberResponse:
    project = await get_project(db, project_id)
    return await membership_service.add_member(
        db, project, current_user, member_data.user_id, member_data.role
    )


@router.put(
    "/members/{user_id}",
    response_model=ProjectMemberResponse,
    summary="Change a member's role",
    responses={
        200: {"description": "Role updated successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not allowed, target is the owner, or an admin targeting themself"},
        404: {"description": "Project not found or user is not a member"},
        422: {"description": "Invalid role"},
    },
)
async def update_project_member_role(
    project_id: UUID,
    user_id: UUID,
    member_data: ProjectMemberUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectMemberResponse:
    project = await get_project(db, project_id)
    return await membership_service.update_member_role(
        db, project, current_user, user_id, member_data.role
    )


@router.delete(
    "/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a project member",
    responses={
        204: {"description": "Member removed successfully"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not allowed, target is the owner, or an admin targeting themself"},
        404: {"description": "Project not found or user is not a member"},
    },
)
async def remove_project_member(
    project_id: UUID,
    user_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    project = await get_project(db, project_id)
    await membership_service.remove_member(db, project, current_user, user_id)


@router.post(
    "/leave",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave a project",
    description="Remove your own membership. The owner must transfer ownership first.",
    responses={
        204: {"description": "Left the project"},
        401: {"description": "Not authenticated"},
        403: {"description": "The owner cannot leave"},
        404: {"description": "Project not found or not a member"},
    },
)
async def leave_project(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    project = await get_project(db, project_id)
    await membership_service.leave_project(db, project, current_user)


@router.post(
    "/transfer-ownership",
    response_model=ProjectDetail,
    summary="Transfer project ownership",
    description=(
        "Make an existing member the owner. The previous owner stays on the "
        "project as an admin."
    ),
    responses={
        200: {"description": "Ownership transferred"},
        401: {"description": "Not authenticated"},
        403: {"description": "Only the owner can transfer ownership"},
        404: {"description": "Project not found"},
        422: {"description": "New owner is the current owner or not a member"},
        500: {"description": "Transfer failed and was rolled back"},
    },
)
async def transfer_project_ownership(
    project_id: UUID,
    transfer_data: TransferOwnershipRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectDetail:
    project = await get_project(db, project_id)
    return await ownership_service.transfer_ownership(
        db, project, current_user, transfer_data.new_owner_id
    )
