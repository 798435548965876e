"""Permission service for project roles and capability checks.

Role Model:
- Owner: ``Project.owner_user_id``. Authoritative; overrides any membership row.
- Admin: Edits the project, its sections and tags; manages members.
- Editor / Member: Read access; may edit or delete items they created.

Capability checks are pure functions of the role (plus the ids involved for
member management). ``PermissionService`` resolves the acting user's role
from the database and raises ``AuthorizationDenied`` when a check fails, so
callers reject the request before any write.
"""

import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import AuthorizationDenied
from ..models.project import Project
from ..models.project_member import ProjectMember, ProjectMemberRole
from ..models.user import User

logger = logging.getLogger(__name__)

ProjectRole = ProjectMemberRole

MANAGER_ROLES = (ProjectRole.OWNER, ProjectRole.ADMIN)


def _as_role(role: Any) -> Optional[ProjectRole]:
    if role is None:
        return None
    return ProjectRole(role)


def role_of(user_id: UUID, project: Project, membership_role: Optional[str]) -> Optional[ProjectRole]:
    """
    Compute a user's effective role in a project.

    Args:
        user_id: The user's ID
        project: The project
        membership_role: Role stored on the user's membership row, if any

    Returns:
        OWNER when the user is ``project.owner_user_id`` regardless of the
        membership row, otherwise the row's role, or None for non-members.
    """
    if project.owner_user_id == user_id:
        return ProjectRole.OWNER
    return _as_role(membership_role)


def can_view(role: Optional[ProjectRole]) -> bool:
    return role is not None


def can_update(role: Optional[ProjectRole]) -> bool:
    return role in MANAGER_ROLES


def can_delete(role: Optional[ProjectRole]) -> bool:
    return role == ProjectRole.OWNER


def can_add_member(role: Optional[ProjectRole]) -> bool:
    return role in MANAGER_ROLES


def can_update_member_role(
    role: Optional[ProjectRole],
    actor_id: UUID,
    target_user_id: UUID,
    project: Project,
) -> bool:
    """Owner or admin; never on the project owner; an admin never on themself."""
    if role not in MANAGER_ROLES:
        return False
    if target_user_id == project.owner_user_id:
        return False
    if role == ProjectRole.ADMIN and actor_id == target_user_id:
        return False
    return True


def can_remove_member(
    role: Optional[ProjectRole],
    actor_id: UUID,
    target_user_id: UUID,
    project: Project,
) -> bool:
    """Same constraints as changing a member's role."""
    return can_update_member_role(role, actor_id, target_user_id, project)


def can_leave(role: Optional[ProjectRole]) -> bool:
    return role is not None and role != ProjectRole.OWNER


def can_transfer_ownership(role: Optional[ProjectRole]) -> bool:
    return role == ProjectRole.OWNER


def can_modify_item(role: Optional[ProjectRole], user_id: UUID, item: Any) -> bool:
    """Item creator, or anyone who can update the project."""
    return item.creator_user_id == user_id or can_update(role)


async def get_project_role(db: AsyncSession, user_id: UUID, project: Project) -> Optional[ProjectRole]:
    """Look up the user's membership row and compute the effective role."""
    if project.owner_user_id == user_id:
        return ProjectRole.OWNER

    result = await db.execute(
        select(ProjectMember.role).where(
            ProjectMember.project_id == project.id,
            ProjectMember.user_id == user_id,
        )
    )
    return role_of(user_id, project, result.scalar_one_or_none())


class PermissionService:
    """
    Service class for project permission checks.

    Each ``require_*`` method resolves the acting user's role and raises
    ``AuthorizationDenied`` if the capability is not granted; on success it
    returns the resolved role.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the PermissionService.

        Args:
            db: SQLAlchemy async database session
        """
        self.db = db

    async def get_role(self, user: User, project: Project) -> Optional[ProjectRole]:
        return await get_project_role(self.db, user.id, project)

    def _deny(self, user: User, project: Project, action: str) -> None:
        logger.warning(f"User {user.id} denied '{action}' on project {project.id}")
        raise AuthorizationDenied(f"You do not have permission to {action} this project")

    async def require_view(self, user: User, project: Project) -> ProjectRole:
        role = await self.get_role(user, project)
        if not can_view(role):
            self._deny(user, project, "view")
        return role

    async def require_update(self, user: User, project: Project) -> ProjectRole:
        role = await self.get_role(user, project)
        if not can_update(role):
            self._deny(user, project, "update")
        return role

    async def require_delete(self, user: User, project: Project) -> ProjectRole:
        role = await self.get_role(user, project)
        if not can_delete(role):
            self._deny(user, project, "delete")
        return role

    async def require_add_member(self, user: User, project: Project) -> ProjectRole:
        role = await self.get_role(user, project)
        if not can_add_member(role):
            self._deny(user, project, "add members to")
        return role

    async def require_transfer_ownership(self, user: User, project: Project) -> ProjectRole:
        role = await self.get_role(user, project)
        if not can_transfer_ownership(role):
            self._deny(user, project, "transfer ownership of")
        return role

    async def require_modify_item(self, user: User, project: Project, item: Any) -> ProjectRole:
        """
        Check item-level update/delete rights.

        The item's creator keeps this right without a membership; anyone else
        must be able to update the project.
        """
        role = await self.get_role(user, project)
        if not can_modify_item(role, user.id, item):
            logger.warning(f"User {user.id} denied modifying item {item.id}")
            raise AuthorizationDenied("You do not have permission to modify this item")
        return role


def get_permission_service(db: AsyncSession) -> PermissionService:
    """
    Factory function to create a PermissionService instance.

    Args:
        db: SQLAlchemy async database session

    Returns:
        PermissionService instance
    """
    return PermissionService(db)
