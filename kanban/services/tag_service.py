"""Tag operations. Tags belong to one project for their whole life."""

import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..exceptions import Conflict, NotFound, ValidationFailed
from ..models.project import Project
from ..models.tag import Tag
from ..models.user import User
from .permission_service import PermissionService
from .project_service import get_project

logger = logging.getLogger(__name__)

DUPLICATE_TAG_MESSAGE = "A tag with this name already exists in this project"


async def get_tag(db: AsyncSession, tag_id: UUID) -> Tag:
    """
    Fetch a tag by id.

    Raises:
        NotFound: If the tag does not exist
    """
    result = await db.execute(
        select(Tag).where(Tag.id == tag_id).execution_options(populate_existing=True)
    )
    tag = result.scalar_one_or_none()
    if tag is None:
        raise NotFound("Tag not found")
    return tag


async def get_tag_context(db: AsyncSession, tag_id: UUID) -> Tuple[Tag, Project]:
    tag = await get_tag(db, tag_id)
    return tag, await get_project(db, tag.project_id)


async def _name_taken(
    db: AsyncSession, project_id: UUID, name: str, exclude_id: Optional[UUID] = None
) -> bool:
    query = select(Tag.id).where(Tag.project_id == project_id, Tag.name == name)
    if exclude_id is not None:
        query = query.where(Tag.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def list_tags(db: AsyncSession, project: Project, actor: User) -> List[Tag]:
    await PermissionService(db).require_view(actor, project)
    result = await db.execute(
        select(Tag).where(Tag.project_id == project.id).order_by(Tag.name)
    )
    return list(result.scalars().all())


async def create_tag(
    db: AsyncSession,
    project: Project,
    actor: User,
    name: str,
    color: Optional[str] = None,
) -> Tag:
    """
    Create a tag in a project.

    Raises:
        AuthorizationDenied: Actor is not owner or admin
        Conflict: The project already has a tag with this name
    """
    await PermissionService(db).require_update(actor, project)
    if await _name_taken(db, project.id, name):
        raise Conflict(DUPLICATE_TAG_MESSAGE, details={"name": DUPLICATE_TAG_MESSAGE})

    tag = Tag(
        project_id=project.id,
        name=name,
        color=color or settings.default_tag_color,
    )
    db.add(tag)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise Conflict(DUPLICATE_TAG_MESSAGE, details={"name": DUPLICATE_TAG_MESSAGE}) from e

    logger.info(f"Tag {tag.id} '{name}' created in project {project.id}")
    return await get_tag(db, tag.id)


async def update_tag(
    db: AsyncSession,
    tag: Tag,
    project: Project,
    actor: User,
    changes: Dict[str, Any],
) -> Tag:
    """Rename or recolor a tag. The owning project never changes."""
    await PermissionService(db).require_update(actor, project)

    for field_name in ("name", "color"):
        if field_name in changes and changes[field_name] is None:
            raise ValidationFailed(f"The {field_name} field cannot be null", field=field_name)

    if "name" in changes and changes["name"] != tag.name:
        if await _name_taken(db, tag.project_id, changes["name"], exclude_id=tag.id):
            raise Conflict(DUPLICATE_TAG_MESSAGE, details={"name": DUPLICATE_TAG_MESSAGE})
        tag.name = changes["name"]
    if "color" in changes:
        tag.color = changes["color"]

    await db.commit()
    return await get_tag(db, tag.id)


async def delete_tag(db: AsyncSession, tag: Tag, project: Project, actor: User) -> None:
    """Delete a tag; its item associations cascade."""
    await PermissionService(db).require_update(actor, project)
    tag_id = tag.id
    await db.delete(tag)
    await db.commit()
    logger.info(f"Tag {tag_id} deleted from project {project.id}")
