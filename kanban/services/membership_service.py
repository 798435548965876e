"""Project membership management.

Adds, re-roles and removes project members. Every operation takes the
acting user explicitly and checks the Role Model before writing. The owner
row is never touched here: the project owner can only change through an
ownership transfer.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import AuthorizationDenied, Conflict, Forbidden, NotFound, NotMember, ValidationFailed
from ..models.project import Project
from ..models.project_member import ProjectMember, ProjectMemberRole
from ..models.user import User
from .permission_service import (
    PermissionService,
    can_add_member,
    can_leave,
    can_update_member_role,
)

logger = logging.getLogger(__name__)

ASSIGNABLE_ROLES = (
    ProjectMemberRole.ADMIN,
    ProjectMemberRole.EDITOR,
    ProjectMemberRole.MEMBER,
)


def _assignable_role(role) -> ProjectMemberRole:
    try:
        parsed = ProjectMemberRole(role)
    except ValueError:
        parsed = None
    if parsed not in ASSIGNABLE_ROLES:
        raise ValidationFailed(
            "Role must be one of: admin, editor, member",
            field="role",
        )
    return parsed


async def get_member(
    db: AsyncSession,
    project_id: UUID,
    user_id: UUID,
) -> Optional[ProjectMember]:
    """Fetch the membership row for (project, user), or None."""
    result = await db.execute(
        select(ProjectMember)
        .where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_members(db: AsyncSession, project: Project, actor: User) -> List[ProjectMember]:
    """List a project's members (owner included) ordered by join time."""
    await PermissionService(db).require_view(actor, project)
    result = await db.execute(
        select(ProjectMember)
        .where(ProjectMember.project_id == project.id)
        .order_by(ProjectMember.created_at)
    )
    return list(result.scalars().all())


async def add_member(
    db: AsyncSession,
    project: Project,
    actor: User,
    target_user_id: UUID,
    role,
) -> ProjectMember:
    """
    Add a user to a project.

    Raises:
        AuthorizationDenied: Actor is not owner or admin
        ValidationFailed: Role is not admin, editor or member
        NotFound: Target user does not exist
        Conflict: Target user is already a member
    """
    await PermissionService(db).require_add_member(actor, project)
    role = _assignable_role(role)

    result = await db.execute(select(User.id).where(User.id == target_user_id))
    if result.scalar_one_or_none() is None:
        raise NotFound("User not found")

    if await get_member(db, project.id, target_user_id) is not None:
        raise Conflict("User is already a member of this project")

    member = ProjectMember(
        project_id=project.id,
        user_id=target_user_id,
        role=role.value,
    )
    db.add(member)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise Conflict("User is already a member of this project") from e

    logger.info(f"User {target_user_id} added to project {project.id} as {role.value} by {actor.id}")
    return await get_member(db, project.id, target_user_id)


async def update_member_role(
    db: AsyncSession,
    project: Project,
    actor: User,
    target_user_id: UUID,
    role,
) -> ProjectMember:
    """
    Change a member's role.

    Raises:
        AuthorizationDenied: Actor is not owner or admin
        ValidationFailed: Role is not admin, editor or member
        NotMember: Target has no membership row
        Forbidden: Target is the project owner, or an admin targets themself
    """
    permissions = PermissionService(db)
    actor_role = await permissions.get_role(actor, project)
    if not can_add_member(actor_role):
        raise AuthorizationDenied("You do not have permission to manage members of this project")
    role = _assignable_role(role)

    member = await get_member(db, project.id, target_user_id)
    if member is None:
        raise NotMember("User is not a member of this project")

    if not can_update_member_role(actor_role, actor.id, target_user_id, project):
        if target_user_id == project.owner_user_id:
            logger.warning(f"User {actor.id} tried to change the owner's role on project {project.id}")
            raise Forbidden("The project owner's role can only change through an ownership transfer")
        raise Forbidden("Admins cannot change their own role")

    member.role = role.value
    await db.commit()

    logger.info(f"User {target_user_id} role on project {project.id} set to {role.value} by {actor.id}")
    return await get_member(db, project.id, target_user_id)


async def remove_member(
    db: AsyncSession,
    project: Project,
    actor: User,
    target_user_id: UUID,
) -> None:
    """
    Remove a member from a project.

    Raises:
        AuthorizationDenied: Actor is not owner or admin
        NotMember: Target has no membership row
        Forbidden: Target is the project owner, or an admin targets themself
    """
    permissions = PermissionService(db)
    actor_role = await permissions.get_role(actor, project)
    if not can_add_member(actor_role):
        raise AuthorizationDenied("You do not have permission to manage members of this project")

    if target_user_id == project.owner_user_id:
        logger.warning(f"User {actor.id} tried to remove the owner of project {project.id}")
        raise Forbidden("The project owner cannot be removed")

    member = await get_member(db, project.id, target_user_id)
    if member is None:
        raise NotMember("User is not a member of this project")

    if not can_update_member_role(actor_role, actor.id, target_user_id, project):
        raise Forbidden("Admins cannot remove themselves; leave the project instead")

    await db.delete(member)
    await db.commit()
    logger.info(f"User {target_user_id} removed from project {project.id} by {actor.id}")


async def leave_project(db: AsyncSession, project: Project, actor: User) -> None:
    """
    Remove the acting user's own membership.

    Raises:
        NotMember: Actor is not a member
        Forbidden: Actor is the owner (transfer ownership or delete the project first)
    """
    role = await PermissionService(db).get_role(actor, project)
    if role is None:
        raise NotMember("You are not a member of this project")
    if not can_leave(role):
        logger.warning(f"Owner {actor.id} tried to leave project {project.id}")
        raise Forbidden(
            "The project owner cannot leave; transfer ownership or delete the project first"
        )

    member = await get_member(db, project.id, actor.id)
    if member is not None:
        await db.delete(member)
        await db.commit()
    logger.info(f"User {actor.id} left project {project.id}")
