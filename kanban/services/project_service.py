"""Project aggregate operations.

Creating a project attaches the owner membership and the three default
status-filtered sections in a single transaction.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import Conflict, Internal, NotFound, ValidationFailed
from ..models.item import Item
from ..models.project import Project
from ..models.project_member import ProjectMember, ProjectMemberRole
from ..models.section import Section
from ..models.user import User
from ..utils.helpers import enum_value
from .permission_service import PermissionService

logger = logging.getLogger(__name__)

# (name, status filter) for the sections every new project starts with
DEFAULT_SECTIONS = (
    ("To Do", "todo"),
    ("In Progress", "in_progress"),
    ("Done", "done"),
)

DUPLICATE_NAME_MESSAGE = "You already have a project with this name"


async def get_project(db: AsyncSession, project_id: UUID) -> Project:
    """
    Load a project with its owner, members, sections and tags.

    Raises:
        NotFound: If the project does not exist
    """
    result = await db.execute(
        select(Project)
        .where(Project.id == project_id)
        .execution_options(populate_existing=True)
    )
    project = result.unique().scalar_one_or_none()
    if project is None:
        raise NotFound("Project not found")
    return project


async def get_project_for_user(db: AsyncSession, project_id: UUID, user: User) -> Project:
    """Load a project the user may view."""
    project = await get_project(db, project_id)
    await PermissionService(db).require_view(user, project)
    return project


async def _name_taken(
    db: AsyncSession,
    owner_id: UUID,
    name: str,
    exclude_id: Optional[UUID] = None,
) -> bool:
    query = select(Project.id).where(Project.owner_user_id == owner_id, Project.name == name)
    if exclude_id is not None:
        query = query.where(Project.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def list_projects(
    db: AsyncSession,
    user: User,
    skip: int = 0,
    limit: int = 100,
) -> List[Project]:
    """Projects the user owns or is a member of, newest first, one page at a time."""
    member_of = select(ProjectMember.project_id).where(ProjectMember.user_id == user.id)
    result = await db.execute(
        select(Project)
        .where(or_(Project.owner_user_id == user.id, Project.id.in_(member_of)))
        .order_by(Project.created_at.desc(), Project.id)
        .offset(skip)
        .limit(limit)
    )
    return list(result.unique().scalars().all())


async def count_project_contents(
    db: AsyncSession, project_ids: Sequence[UUID]
) -> Dict[UUID, Tuple[int, int]]:
    """(sections_count, items_count) for several projects, two grouped queries in total."""
    if not project_ids:
        return {}

    sections_result = await db.execute(
        select(Section.project_id, func.count(Section.id))
        .where(Section.project_id.in_(project_ids))
        .group_by(Section.project_id)
    )
    section_counts = {project_id: count for project_id, count in sections_result.all()}

    items_result = await db.execute(
        select(Section.project_id, func.count(Item.id))
        .join(Item, Item.section_id == Section.id)
        .where(Section.project_id.in_(project_ids))
        .group_by(Section.project_id)
    )
    item_counts = {project_id: count for project_id, count in items_result.all()}

    return {
        project_id: (section_counts.get(project_id, 0), item_counts.get(project_id, 0))
        for project_id in project_ids
    }


async def create_project(
    db: AsyncSession,
    owner: User,
    name: str,
    description: Optional[str] = None,
    status: Any = "active",
    start_date=None,
    end_date=None,
    color: Optional[str] = None,
) -> Project:
    """
    Create a project owned by ``owner``.

    The owner membership row and the default sections (To Do, In Progress,
    Done) are created in the same transaction.

    Raises:
        ValidationFailed: end_date before start_date
        Conflict: The owner already has a project with this name
    """
    if start_date and end_date and end_date < start_date:
        raise ValidationFailed("The end date must be on or after the start date", field="end_date")
    if await _name_taken(db, owner.id, name):
        raise Conflict(DUPLICATE_NAME_MESSAGE, details={"name": DUPLICATE_NAME_MESSAGE})

    project = Project(
        name=name,
        description=description,
        status=enum_value(status) or "active",
        start_date=start_date,
        end_date=end_date,
        color=color,
        owner_user_id=owner.id,
    )
    try:
        db.add(project)
        await db.flush()

        db.add(
            ProjectMember(
                project_id=project.id,
                user_id=owner.id,
                role=ProjectMemberRole.OWNER.value,
            )
        )
        for position, (section_name, status_code) in enumerate(DEFAULT_SECTIONS, start=1):
            db.add(
                Section(
                    project_id=project.id,
                    name=section_name,
                    position=position,
                    filter_type="status",
                    filter_value=status_code,
                )
            )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise Conflict(DUPLICATE_NAME_MESSAGE, details={"name": DUPLICATE_NAME_MESSAGE}) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Project creation for user {owner.id} rolled back: {e}")
        raise Internal("Failed to create project") from e

    logger.info(f"Project {project.id} '{name}' created by user {owner.id}")
    return await get_project(db, project.id)


async def update_project(
    db: AsyncSession,
    project: Project,
    actor: User,
    changes: Dict[str, Any],
) -> Project:
    """
    Apply a partial update to a project.

    Args:
        changes: Field values to set, as produced by ``model_dump(exclude_unset=True)``

    Raises:
        AuthorizationDenied: Actor is not owner or admin
        ValidationFailed: Resulting end_date before start_date, or null name/status
        Conflict: New name already used by the owner
    """
    await PermissionService(db).require_update(actor, project)

    for field_name in ("name", "status"):
        if field_name in changes and changes[field_name] is None:
            raise ValidationFailed(f"The {field_name} field cannot be null", field=field_name)

    start_date = changes.get("start_date", project.start_date)
    end_date = changes.get("end_date", project.end_date)
    if start_date and end_date and end_date < start_date:
        raise ValidationFailed("The end date must be on or after the start date", field="end_date")

    if "name" in changes and changes["name"] != project.name:
        if await _name_taken(db, project.owner_user_id, changes["name"], exclude_id=project.id):
            raise Conflict(DUPLICATE_NAME_MESSAGE, details={"name": DUPLICATE_NAME_MESSAGE})

    for field_name, value in changes.items():
        setattr(project, field_name, enum_value(value))

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise Conflict(DUPLICATE_NAME_MESSAGE, details={"name": DUPLICATE_NAME_MESSAGE}) from e

    logger.info(f"Project {project.id} updated by user {actor.id}: {sorted(changes)}")
    return await get_project(db, project.id)


async def delete_project(db: AsyncSession, project: Project, actor: User) -> None:
    """
    Delete a project; sections, items, tags and memberships cascade.

    Raises:
        AuthorizationDenied: Actor is not the owner
    """
    await PermissionService(db).require_delete(actor, project)
    project_id = project.id
    await db.delete(project)
    await db.commit()
    logger.info(f"Project {project_id} deleted by user {actor.id}")
