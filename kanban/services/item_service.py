"""Item operations.

Items live in a section and take their permissions from the section's
project: managers (owner/admin) can create, reorder and edit any item;
the item's creator can edit or delete it, whether or not still a member.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import NotFound, ValidationFailed
from ..models.item import Item
from ..models.project import Project
from ..models.section import Section
from ..models.user import User
from ..utils.helpers import enum_value
from .permission_service import PermissionService
from .position_service import next_position, reorder_siblings
from .project_service import get_project
from .section_filter import ItemQueryFilters, list_section_items, sync_item_tags

logger = logging.getLogger(__name__)

NOT_NULL_FIELDS = ("title", "status", "priority")


async def get_item(db: AsyncSession, item_id: UUID) -> Item:
    """
    Fetch an item with its creator, assignee and tags.

    Raises:
        NotFound: If the item does not exist
    """
    result = await db.execute(
        select(Item)
        .where(Item.id == item_id)
        .execution_options(populate_existing=True)
    )
    item = result.unique().scalar_one_or_none()
    if item is None:
        raise NotFound("Item not found")
    return item


async def get_item_context(db: AsyncSession, item_id: UUID) -> Tuple[Item, Section, Project]:
    """Resolve an item together with its section and project."""
    item = await get_item(db, item_id)
    result = await db.execute(select(Section).where(Section.id == item.section_id))
    section = result.scalar_one()
    project = await get_project(db, section.project_id)
    return item, section, project


async def _check_assignee(db: AsyncSession, user_id: Optional[UUID]) -> None:
    if user_id is None:
        return
    result = await db.execute(select(User.id).where(User.id == user_id))
    if result.scalar_one_or_none() is None:
        raise ValidationFailed("The selected assignee does not exist", field="assigned_to")


async def list_items(
    db: AsyncSession,
    section: Section,
    project: Project,
    actor: User,
    filters: Optional[ItemQueryFilters] = None,
    today: Optional[date] = None,
) -> List[Item]:
    """Items displayed in a section: its own filter, the ad-hoc filters, then its limit."""
    await PermissionService(db).require_view(actor, project)
    return await list_section_items(db, section, extra=filters, today=today)


async def list_project_items(
    db: AsyncSession,
    project: Project,
    actor: User,
    filters: Optional[ItemQueryFilters] = None,
) -> List[Item]:
    """Every item of the project, ordered by section position then item position."""
    await PermissionService(db).require_view(actor, project)

    query = (
        select(Item)
        .join(Section, Item.section_id == Section.id)
        .where(Section.project_id == project.id)
    )
    if filters is not None:
        for clause in filters.clauses():
            query = query.where(clause)
    result = await db.execute(query.order_by(Section.position, Item.position))
    return list(result.unique().scalars().all())


async def create_item(
    db: AsyncSession,
    section: Section,
    project: Project,
    actor: User,
    title: str,
    description: Optional[str] = None,
    due_date: Optional[date] = None,
    status: Any = "todo",
    priority: Any = "medium",
    assigned_to: Optional[UUID] = None,
    tag_ids: Sequence[UUID] = (),
) -> Item:
    """
    Append an item to a section.

    Raises:
        AuthorizationDenied: Actor is not owner or admin
        ValidationFailed: Assignee does not exist
        InvalidTag: A tag id is not one of the project's tags
    """
    await PermissionService(db).require_update(actor, project)
    await _check_assignee(db, assigned_to)

    item = Item(
        section_id=section.id,
        title=title,
        description=description,
        due_date=due_date,
        status=enum_value(status) or "todo",
        priority=enum_value(priority) or "medium",
        creator_user_id=actor.id,
        assigned_to=assigned_to,
        position=await next_position(db, Item, Item.section_id, section.id),
    )
    await sync_item_tags(db, item, project.id, tag_ids)
    db.add(item)
    await db.commit()

    logger.info(f"Item {item.id} created in section {section.id} by user {actor.id}")
    return await get_item(db, item.id)


async def update_item(
    db: AsyncSession,
    item: Item,
    project: Project,
    actor: User,
    changes: Dict[str, Any],
) -> Item:
    """
    Apply a partial update to an item.

    ``tag_ids`` replaces the whole tag set (an empty list clears it);
    ``assigned_to`` set to None unassigns.

    Raises:
        AuthorizationDenied: Actor is neither the creator nor a project manager
        ValidationFailed: Null title/status/priority, or unknown assignee
        InvalidTag: A tag id is not one of the project's tags
    """
    await PermissionService(db).require_modify_item(actor, project, item)

    changes = dict(changes)
    for field_name in NOT_NULL_FIELDS:
        if field_name in changes and changes[field_name] is None:
            raise ValidationFailed(f"The {field_name} field cannot be null", field=field_name)

    if "assigned_to" in changes:
        await _check_assignee(db, changes["assigned_to"])

    tag_ids = changes.pop("tag_ids", None)
    if tag_ids is not None:
        await sync_item_tags(db, item, project.id, tag_ids)

    for field_name, value in changes.items():
        setattr(item, field_name, enum_value(value))

    await db.commit()
    logger.info(f"Item {item.id} updated by user {actor.id}")
    return await get_item(db, item.id)


async def delete_item(db: AsyncSession, item: Item, project: Project, actor: User) -> None:
    """Delete an item; its tag associations go with it."""
    await PermissionService(db).require_modify_item(actor, project, item)
    item_id = item.id
    await db.delete(item)
    await db.commit()
    logger.info(f"Item {item_id} deleted by user {actor.id}")


async def reorder_items(
    db: AsyncSession,
    section: Section,
    project: Project,
    actor: User,
    ordered_item_ids: List[UUID],
) -> List[Item]:
    """
    Renumber a section's items to follow ``ordered_item_ids``.

    Raises:
        AuthorizationDenied: Actor is not owner or admin
        InvalidReorder: The ids are not exactly the section's items
    """
    await PermissionService(db).require_update(actor, project)
    return await reorder_siblings(db, Item, Item.section_id, section.id, ordered_item_ids)
