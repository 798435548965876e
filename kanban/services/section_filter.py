"""Section filter engine.

A section carries a declarative filter (``filter_type`` + ``filter_value``)
and an optional ``item_limit``. Stored values are parsed into one of the
filter variants below, each of which can both test an in-memory item and
produce the equivalent SQL clause, so listing a section gives the same ids
in the same order whether filtering happens in Python or in the database.

Date filters are stored as a single-key JSON object::

    {"due_on": "2024-06-15"}
    {"due_between": {"start": "2024-06-01", "end": "2024-06-30"}}
    {"due_after": "2024-06-15"}      # strictly after
    {"due_before": "2024-06-15"}     # strictly before
    {"is_null": true}
    {"is_not_null": true}
    {"overdue": true}                # due < today, status not done/archived

Reads are lenient: a malformed stored filter is logged and ignored.
Writes are strict: ``validate_section_filter`` rejects it.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from ..exceptions import InvalidTag, ValidationFailed
from ..models.item import Item
from ..models.section import Section
from ..models.tag import Tag
from ..schemas.item import ItemPriority, ItemStatus
from ..schemas.section import SectionFilterType

logger = logging.getLogger(__name__)

# Statuses that never count as overdue
CLOSED_STATUSES = (ItemStatus.DONE.value, ItemStatus.ARCHIVED.value)


# ============================================================================
# Filter variants
# ============================================================================


@dataclass(frozen=True)
class NoFilter:
    """Pass every item through."""

    def matches(self, item: Any, today: date) -> bool:
        return True

    def clause(self, today: date):
        return None


@dataclass(frozen=True)
class StatusFilter:
    status: str

    def matches(self, item: Any, today: date) -> bool:
        return item.status == self.status

    def clause(self, today: date):
        return Item.status == self.status


@dataclass(frozen=True)
class PriorityFilter:
    priority: str

    def matches(self, item: Any, today: date) -> bool:
        return item.priority == self.priority

    def clause(self, today: date):
        return Item.priority == self.priority


@dataclass(frozen=True)
class AssigneeFilter:
    user_id: UUID

    def matches(self, item: Any, today: date) -> bool:
        return item.assigned_to == self.user_id

    def clause(self, today: date):
        return Item.assigned_to == self.user_id


@dataclass(frozen=True)
class TagFilter:
    tag_id: UUID

    def matches(self, item: Any, today: date) -> bool:
        return any(tag.id == self.tag_id for tag in item.tags)

    def clause(self, today: date):
        return Item.tags.any(Tag.id == self.tag_id)


class DatePredicateKind(str, Enum):
    """Supported due-date predicates."""

    DUE_ON = "due_on"
    DUE_BETWEEN = "due_between"
    DUE_AFTER = "due_after"
    DUE_BEFORE = "due_before"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class DatePredicate:
    """
    A single due-date predicate.

    ``value`` is used by due_on/due_after/due_before, ``start``/``end`` by
    due_between (both inclusive). The flag kinds carry no operand.
    """

    kind: DatePredicateKind
    value: Optional[date] = None
    start: Optional[date] = None
    end: Optional[date] = None

    def matches(self, item: Any, today: date) -> bool:
        due = item.due_date
        if self.kind == DatePredicateKind.IS_NULL:
            return due is None
        if due is None:
            return False
        if self.kind == DatePredicateKind.IS_NOT_NULL:
            return True
        if self.kind == DatePredicateKind.DUE_ON:
            return due == self.value
        if self.kind == DatePredicateKind.DUE_AFTER:
            return due > self.value
        if self.kind == DatePredicateKind.DUE_BEFORE:
            return due < self.value
        if self.kind == DatePredicateKind.DUE_BETWEEN:
            return self.start <= due <= self.end
        # overdue
        return due < today and item.status not in CLOSED_STATUSES

    def clause(self, today: date):
        due = Item.due_date
        if self.kind == DatePredicateKind.IS_NULL:
            return due.is_(None)
        if self.kind == DatePredicateKind.IS_NOT_NULL:
            return due.is_not(None)
        if self.kind == DatePredicateKind.DUE_ON:
            return due == self.value
        if self.kind == DatePredicateKind.DUE_AFTER:
            return due > self.value
        if self.kind == DatePredicateKind.DUE_BEFORE:
            return due < self.value
        if self.kind == DatePredicateKind.DUE_BETWEEN:
            return due.between(self.start, self.end)
        return and_(
            due.is_not(None),
            due < today,
            Item.status.not_in(CLOSED_STATUSES),
        )

    def to_value(self) -> Dict[str, Any]:
        """Serialize back to the stored JSON shape."""
        if self.kind == DatePredicateKind.DUE_BETWEEN:
            return {
                self.kind.value: {
                    "start": self.start.isoformat(),
                    "end": self.end.isoformat(),
                }
            }
        if self.value is not None:
            return {self.kind.value: self.value.isoformat()}
        return {self.kind.value: True}


@dataclass(frozen=True)
class DateFilter:
    predicate: DatePredicate

    def matches(self, item: Any, today: date) -> bool:
        return self.predicate.matches(item, today)

    def clause(self, today: date):
        return self.predicate.clause(today)


SectionFilter = Union[NoFilter, StatusFilter, PriorityFilter, AssigneeFilter, TagFilter, DateFilter]


# ============================================================================
# Parsing
# ============================================================================


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == {} or value == []


def _parse_date(raw: Any) -> date:
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        raise ValueError(f"expected an ISO date, got {raw!r}")
    return date.fromisoformat(raw)


def _parse_uuid(raw: Any) -> UUID:
    if isinstance(raw, UUID):
        return raw
    return UUID(str(raw))


def parse_date_predicate(raw: Any) -> Optional[DatePredicate]:
    """
    Parse a stored date filter value.

    Returns None when the predicate is switched off (a flag set to false).

    Raises:
        ValueError: If the value is not a well-formed predicate object.
    """
    if isinstance(raw, str):
        raw = json.loads(raw)
    if not isinstance(raw, dict) or len(raw) != 1:
        raise ValueError("date filter must be an object with exactly one predicate")

    key, operand = next(iter(raw.items()))
    kind = DatePredicateKind(key)

    if kind in (DatePredicateKind.IS_NULL, DatePredicateKind.IS_NOT_NULL, DatePredicateKind.OVERDUE):
        if not isinstance(operand, bool):
            raise ValueError(f"{kind.value} expects true or false")
        return DatePredicate(kind) if operand else None

    if kind == DatePredicateKind.DUE_BETWEEN:
        if not isinstance(operand, dict) or "start" not in operand or "end" not in operand:
            raise ValueError("due_between expects {start, end}")
        start = _parse_date(operand["start"])
        end = _parse_date(operand["end"])
        if start > end:
            raise ValueError("due_between start must not be after end")
        return DatePredicate(kind, start=start, end=end)

    return DatePredicate(kind, value=_parse_date(operand))


def _parse(filter_type: Optional[str], filter_value: Any) -> SectionFilter:
    if filter_type is None or filter_type == SectionFilterType.NONE.value:
        return NoFilter()
    if _is_empty(filter_value):
        return NoFilter()

    kind = SectionFilterType(filter_type)
    if kind == SectionFilterType.STATUS:
        return StatusFilter(ItemStatus(filter_value).value)
    if kind == SectionFilterType.PRIORITY:
        return PriorityFilter(ItemPriority(filter_value).value)
    if kind == SectionFilterType.ASSIGNED_TO:
        return AssigneeFilter(_parse_uuid(filter_value))
    if kind == SectionFilterType.TAG:
        return TagFilter(_parse_uuid(filter_value))

    predicate = parse_date_predicate(filter_value)
    return DateFilter(predicate) if predicate else NoFilter()


def parse_section_filter(filter_type: Optional[str], filter_value: Any) -> SectionFilter:
    """
    Build the filter variant for a stored section configuration.

    Malformed values never raise here: they are logged and the section
    behaves as unfiltered.
    """
    try:
        return _parse(filter_type, filter_value)
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(
            f"Ignoring malformed section filter type={filter_type!r} value={filter_value!r}: {e}"
        )
        return NoFilter()


def validate_section_filter(filter_type: Optional[str], filter_value: Any) -> Any:
    """
    Validate a filter configuration before it is stored.

    Returns:
        The normalized value to persist: None when filtering is off, a
        string for scalar filters, a predicate object for date filters.

    Raises:
        ValidationFailed: If the value does not fit the filter type.
    """
    try:
        parsed = _parse(filter_type, filter_value)
    except (ValueError, TypeError, AttributeError) as e:
        raise ValidationFailed(
            f"Invalid filter_value for filter_type '{filter_type}': {e}",
            field="filter_value",
        ) from e

    if isinstance(parsed, StatusFilter):
        return parsed.status
    if isinstance(parsed, PriorityFilter):
        return parsed.priority
    if isinstance(parsed, AssigneeFilter):
        return str(parsed.user_id)
    if isinstance(parsed, TagFilter):
        return str(parsed.tag_id)
    if isinstance(parsed, DateFilter):
        return parsed.predicate.to_value()
    if filter_type == SectionFilterType.DATE.value and not _is_empty(filter_value):
        # Switched-off flag such as {"overdue": false}; keep what the client sent.
        return json.loads(filter_value) if isinstance(filter_value, str) else filter_value
    return None


# ============================================================================
# Ad-hoc listing filters
# ============================================================================


@dataclass(frozen=True)
class ItemQueryFilters:
    """
    Request-time filters layered on top of a section's own filter.

    ``unassigned`` selects items without an assignee and takes precedence
    over ``assigned_to``. An item must carry every id in ``tag_ids``.
    """

    status: Optional[str] = None
    priority: Optional[str] = None
    assigned_to: Optional[UUID] = None
    unassigned: bool = False
    tag_ids: Tuple[UUID, ...] = field(default_factory=tuple)

    def matches(self, item: Any) -> bool:
        if self.status is not None and item.status != self.status:
            return False
        if self.priority is not None and item.priority != self.priority:
            return False
        if self.unassigned:
            if item.assigned_to is not None:
                return False
        elif self.assigned_to is not None and item.assigned_to != self.assigned_to:
            return False
        if self.tag_ids:
            item_tag_ids = {tag.id for tag in item.tags}
            if not set(self.tag_ids) <= item_tag_ids:
                return False
        return True

    def clauses(self) -> List[Any]:
        clauses = []
        if self.status is not None:
            clauses.append(Item.status == self.status)
        if self.priority is not None:
            clauses.append(Item.priority == self.priority)
        if self.unassigned:
            clauses.append(Item.assigned_to.is_(None))
        elif self.assigned_to is not None:
            clauses.append(Item.assigned_to == self.assigned_to)
        for tag_id in self.tag_ids:
            clauses.append(Item.tags.any(Tag.id == tag_id))
        return clauses


# ============================================================================
# Evaluation
# ============================================================================


def apply_filters(
    items: Iterable[Any],
    section_filter: SectionFilter,
    item_limit: Optional[int] = None,
    extra: Optional[ItemQueryFilters] = None,
    today: Optional[date] = None,
) -> List[Any]:
    """
    Filter, order and cap a section's candidate items in memory.

    Items are ordered by position ascending; the limit is applied last so
    the lowest-position matches are kept.
    """
    today = today or date.today()
    selected = [
        item
        for item in items
        if section_filter.matches(item, today) and (extra is None or extra.matches(item))
    ]
    selected.sort(key=lambda item: item.position)
    if item_limit and item_limit > 0:
        selected = selected[:item_limit]
    return selected


def build_section_items_query(
    section_id: UUID,
    section_filter: SectionFilter,
    item_limit: Optional[int] = None,
    extra: Optional[ItemQueryFilters] = None,
    today: Optional[date] = None,
) -> Select:
    """Build the pushed-down equivalent of ``apply_filters``."""
    today = today or date.today()
    query = select(Item).where(Item.section_id == section_id)

    clause = section_filter.clause(today)
    if clause is not None:
        query = query.where(clause)
    if extra is not None:
        for extra_clause in extra.clauses():
            query = query.where(extra_clause)

    query = query.order_by(Item.position)
    if item_limit and item_limit > 0:
        query = query.limit(item_limit)
    return query


async def list_section_items(
    db: AsyncSession,
    section: Section,
    extra: Optional[ItemQueryFilters] = None,
    today: Optional[date] = None,
    pushdown: bool = True,
) -> List[Item]:
    """
    List a section's items through its filter, the ad-hoc filters and its limit.

    Args:
        db: Database session
        section: The section being displayed
        extra: Request-time filters
        today: Reference date for ``overdue`` (defaults to today)
        pushdown: Evaluate in SQL (default) or load the section and filter in memory
    """
    section_filter = parse_section_filter(section.filter_type, section.filter_value)

    if pushdown:
        query = build_section_items_query(
            section.id, section_filter, section.item_limit, extra, today
        )
        result = await db.execute(query)
        return list(result.scalars().unique().all())

    result = await db.execute(
        select(Item).where(Item.section_id == section.id).order_by(Item.position)
    )
    candidates = result.scalars().unique().all()
    return apply_filters(candidates, section_filter, section.item_limit, extra, today)


async def count_section_items(db: AsyncSession, section_id: UUID) -> int:
    """Raw number of items in a section, ignoring filter and limit."""
    result = await db.execute(
        select(func.count()).select_from(Item).where(Item.section_id == section_id)
    )
    return result.scalar() or 0


async def count_items_by_section(
    db: AsyncSession, section_ids: Sequence[UUID]
) -> Dict[UUID, int]:
    """Raw item counts for several sections in one query."""
    if not section_ids:
        return {}
    result = await db.execute(
        select(Item.section_id, func.count())
        .where(Item.section_id.in_(section_ids))
        .group_by(Item.section_id)
    )
    counts = {section_id: count for section_id, count in result.all()}
    return {section_id: counts.get(section_id, 0) for section_id in section_ids}


# ============================================================================
# Tag synchronization
# ============================================================================


async def sync_item_tags(
    db: AsyncSession,
    item: Item,
    project_id: UUID,
    tag_ids: Sequence[UUID],
) -> None:
    """
    Replace an item's tag set.

    Every id must name a tag of ``project_id``; otherwise nothing changes.
    An empty sequence clears the tags. The caller commits.

    Raises:
        InvalidTag: If any id is unknown or belongs to another project.
    """
    wanted = list(dict.fromkeys(tag_ids))
    if not wanted:
        item.tags = []
        return

    result = await db.execute(
        select(Tag).where(Tag.id.in_(wanted), Tag.project_id == project_id)
    )
    tags = {tag.id: tag for tag in result.scalars().all()}
    invalid = [tag_id for tag_id in wanted if tag_id not in tags]
    if invalid:
        raise InvalidTag(
            "One or more tags do not belong to this project",
            tag_ids=invalid,
        )
    item.tags = [tags[tag_id] for tag_id in wanted]
