"""Section operations: create, update, delete and reorder a project's columns."""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import NotFound, ValidationFailed
from ..models.project import Project
from ..models.section import Section
from ..models.tag import Tag
from ..models.user import User
from ..schemas.section import SectionFilterType
from ..utils.helpers import enum_value
from .permission_service import PermissionService
from .position_service import list_siblings, next_position, reorder_siblings
from .section_filter import validate_section_filter

logger = logging.getLogger(__name__)


async def get_section(db: AsyncSession, section_id: UUID, project_id: Optional[UUID] = None) -> Section:
    """
    Fetch a section, optionally scoped to a project.

    Raises:
        NotFound: If it does not exist or belongs to another project
    """
    query = select(Section).where(Section.id == section_id)
    if project_id is not None:
        query = query.where(Section.project_id == project_id)
    result = await db.execute(query.execution_options(populate_existing=True))
    section = result.scalar_one_or_none()
    if section is None:
        raise NotFound("Section not found")
    return section


async def list_sections(db: AsyncSession, project: Project, actor: User) -> List[Section]:
    """Sections of a project ordered by position."""
    await PermissionService(db).require_view(actor, project)
    return await list_siblings(db, Section, Section.project_id, project.id)


async def _check_filter_references(
    db: AsyncSession, project: Project, filter_type: str, filter_value: Any
) -> None:
    """Make sure an assignee or tag filter points at something real."""
    if filter_value is None:
        return
    if filter_type == SectionFilterType.ASSIGNED_TO.value:
        result = await db.execute(select(User.id).where(User.id == UUID(filter_value)))
        if result.scalar_one_or_none() is None:
            raise ValidationFailed("The selected user does not exist", field="filter_value")
    elif filter_type == SectionFilterType.TAG.value:
        result = await db.execute(
            select(Tag.id).where(Tag.id == UUID(filter_value), Tag.project_id == project.id)
        )
        if result.scalar_one_or_none() is None:
            raise ValidationFailed("The selected tag does not belong to this project", field="filter_value")


async def create_section(
    db: AsyncSession,
    project: Project,
    actor: User,
    name: str,
    filter_type: Any = SectionFilterType.NONE,
    filter_value: Any = None,
    item_limit: Optional[int] = None,
) -> Section:
    """
    Append a section to the project.

    Raises:
        AuthorizationDenied: Actor is not owner or admin
        ValidationFailed: Filter value does not fit the filter type
    """
    await PermissionService(db).require_update(actor, project)

    filter_type = enum_value(filter_type) or SectionFilterType.NONE.value
    normalized = validate_section_filter(filter_type, filter_value)
    await _check_filter_references(db, project, filter_type, normalized)

    section = Section(
        project_id=project.id,
        name=name,
        position=await next_position(db, Section, Section.project_id, project.id),
        filter_type=filter_type,
        filter_value=normalized,
        item_limit=item_limit,
    )
    db.add(section)
    await db.commit()

    logger.info(f"Section {section.id} created in project {project.id} at position {section.position}")
    return await get_section(db, section.id)


async def update_section(
    db: AsyncSession,
    section: Section,
    project: Project,
    actor: User,
    changes: Dict[str, Any],
) -> Section:
    """
    Apply a partial update to a section.

    Changing ``filter_type`` without a new ``filter_value`` clears the value.

    Raises:
        AuthorizationDenied: Actor is not owner or admin
        ValidationFailed: Null name, or filter value does not fit the filter type
    """
    await PermissionService(db).require_update(actor, project)

    if "name" in changes:
        if changes["name"] is None:
            raise ValidationFailed("The name field cannot be null", field="name")
        section.name = changes["name"]

    if "item_limit" in changes:
        section.item_limit = changes["item_limit"]

    if "filter_type" in changes or "filter_value" in changes:
        filter_type = enum_value(changes.get("filter_type")) or section.filter_type
        if "filter_value" in changes:
            filter_value = changes["filter_value"]
        elif filter_type == section.filter_type:
            filter_value = section.filter_value
        else:
            filter_value = None
        normalized = validate_section_filter(filter_type, filter_value)
        await _check_filter_references(db, project, filter_type, normalized)
        section.filter_type = filter_type
        section.filter_value = normalized

    await db.commit()
    logger.info(f"Section {section.id} updated by user {actor.id}: {sorted(changes)}")
    return await get_section(db, section.id)


async def delete_section(db: AsyncSession, section: Section, project: Project, actor: User) -> None:
    """
    Delete a section and, through the FK cascade, its items.

    Remaining positions keep their gaps until the next reorder.
    """
    await PermissionService(db).require_update(actor, project)
    section_id = section.id
    await db.delete(section)
    await db.commit()
    logger.info(f"Section {section_id} deleted from project {project.id} by user {actor.id}")


async def reorder_sections(
    db: AsyncSession,
    project: Project,
    actor: User,
    ordered_section_ids: List[UUID],
) -> List[Section]:
    """
    Renumber the project's sections to follow ``ordered_section_ids``.

    Raises:
        AuthorizationDenied: Actor is not owner or admin
        InvalidReorder: The ids are not exactly the project's sections
    """
    await PermissionService(db).require_update(actor, project)
    return await reorder_siblings(db, Section, Section.project_id, project.id, ordered_section_ids)
