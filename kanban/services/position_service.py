"""Position sequencing for ordered siblings.

Sections are ordered within a project and items within a section. New
siblings are appended at ``max(position) + 1``; gaps left by deletions are
only closed by an explicit reorder, which renumbers the whole sibling set to
1..N inside a single transaction.
"""

import logging
from collections import Counter
from typing import Any, Iterable, List, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import Internal, InvalidReorder

logger = logging.getLogger(__name__)


async def next_position(
    db: AsyncSession,
    model: Any,
    parent_column: Any,
    parent_id: UUID,
) -> int:
    """Return the append position for a new sibling under ``parent_id``."""
    result = await db.execute(
        select(func.max(model.position)).where(parent_column == parent_id)
    )
    current_max = result.scalar()
    return (current_max or 0) + 1


def validate_reorder(existing_ids: Iterable[UUID], ordered_ids: Sequence[UUID]) -> None:
    """
    Check that ``ordered_ids`` is a permutation of ``existing_ids``.

    Raises:
        InvalidReorder: On duplicates, omissions or ids from another parent.
    """
    existing = set(existing_ids)
    supplied = list(ordered_ids)

    duplicates = sorted(str(i) for i, seen in Counter(supplied).items() if seen > 1)
    if duplicates:
        raise InvalidReorder(
            "Duplicate ids in reorder request",
            details={"duplicate_ids": duplicates},
        )

    unknown = sorted(str(i) for i in set(supplied) - existing)
    missing = sorted(str(i) for i in existing - set(supplied))
    if unknown or missing:
        raise InvalidReorder(
            "Reorder ids must match exactly the existing siblings",
            details={"unknown_ids": unknown, "missing_ids": missing},
        )


async def list_siblings(
    db: AsyncSession,
    model: Any,
    parent_column: Any,
    parent_id: UUID,
) -> List[Any]:
    """Load all siblings under ``parent_id`` ordered by position."""
    result = await db.execute(
        select(model)
        .where(parent_column == parent_id)
        .order_by(model.position)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def reorder_siblings(
    db: AsyncSession,
    model: Any,
    parent_column: Any,
    parent_id: UUID,
    ordered_ids: Sequence[UUID],
) -> List[Any]:
    """
    Renumber siblings to 1..N following ``ordered_ids``.

    Validation happens before any write. The renumbering commits as one
    transaction; on failure it is rolled back and nothing is applied.

    Args:
        db: Database session
        model: Mapped class of the siblings (Section or Item)
        parent_column: Column referencing the parent (e.g. Section.project_id)
        parent_id: The parent whose children are reordered
        ordered_ids: Every sibling id, in the desired order

    Returns:
        Siblings reloaded in their new position order

    Raises:
        InvalidReorder: If the id set does not match the sibling set
        Internal: If the store rejects the update
    """
    result = await db.execute(select(model.id).where(parent_column == parent_id))
    validate_reorder(result.scalars().all(), ordered_ids)

    try:
        # Park every sibling on a negative slot first so the unique
        # (parent, position) constraint holds between statements.
        await db.execute(
            update(model)
            .where(parent_column == parent_id)
            .values(position=-model.position)
            .execution_options(synchronize_session=False)
        )
        for position, sibling_id in enumerate(ordered_ids, start=1):
            await db.execute(
                update(model)
                .where(model.id == sibling_id)
                .values(position=position)
                .execution_options(synchronize_session=False)
            )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            f"Reorder of {model.__tablename__} under {parent_id} rolled back: {e}"
        )
        raise Internal("Failed to apply the new order") from e

    logger.info(
        f"Reordered {len(ordered_ids)} {model.__tablename__} under {parent_id}"
    )
    return await list_siblings(db, model, parent_column, parent_id)
