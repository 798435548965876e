"""Ownership transfer.

Reassigns ``Project.owner_user_id`` and the matching membership roles in one
transaction: the old owner is demoted to admin (and stays a member), the new
owner's row becomes ``owner``. Either everything commits or nothing does.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import InvalidNewOwner, TransferFailed
from ..models.project import Project
from ..models.project_member import ProjectMember, ProjectMemberRole
from ..models.user import User
from .membership_service import get_member
from .permission_service import PermissionService
from .project_service import get_project

logger = logging.getLogger(__name__)


async def transfer_ownership(
    db: AsyncSession,
    project: Project,
    actor: User,
    new_owner_id: UUID,
) -> Project:
    """
    Make an existing member the owner of the project.

    Args:
        db: Database session
        project: Project being handed over
        actor: Acting user (must be the current owner)
        new_owner_id: Member who becomes the owner

    Returns:
        The project reloaded with members, sections and tags

    Raises:
        AuthorizationDenied: Actor is not the owner
        InvalidNewOwner: Target is the current owner or not a member
        TransferFailed: The transaction was rolled back
    """
    await PermissionService(db).require_transfer_ownership(actor, project)

    project_id = project.id
    old_owner_id = project.owner_user_id
    if new_owner_id == old_owner_id:
        raise InvalidNewOwner("You cannot transfer ownership to yourself.", field="new_owner_id")
    if await get_member(db, project_id, new_owner_id) is None:
        raise InvalidNewOwner(
            "The selected user is not a member of this project and cannot become its owner.",
            field="new_owner_id",
        )

    try:
        # Demote first: the single-owner index rejects two owner rows,
        # even for a moment inside the transaction.
        old_row = await get_member(db, project_id, old_owner_id)
        if old_row is not None:
            old_row.role = ProjectMemberRole.ADMIN.value
            await db.flush()

        project.owner_user_id = new_owner_id

        new_row = await get_member(db, project_id, new_owner_id)
        if new_row is None:
            db.add(
                ProjectMember(
                    project_id=project_id,
                    user_id=new_owner_id,
                    role=ProjectMemberRole.OWNER.value,
                )
            )
        else:
            new_row.role = ProjectMemberRole.OWNER.value

        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Ownership transfer of project {project_id} rolled back: {e}")
        raise TransferFailed(
            "Ownership transfer failed; no changes were applied",
            details={"cause": e.__class__.__name__},
        ) from e

    logger.info(f"Project {project_id} ownership transferred from {old_owner_id} to {new_owner_id}")
    return await get_project(db, project_id)
