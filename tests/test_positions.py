"""Tests for position sequencing of sections and items."""

from uuid import uuid4

import pytest

from kanban.exceptions import InvalidReorder
from kanban.models import Item, Section
from kanban.services import item_service, section_service
from kanban.services.position_service import list_siblings, next_position, validate_reorder


class TestValidateReorder:
    """Tests for reorder id-set validation."""

    def test_permutation_accepted(self):
        a, b, c = uuid4(), uuid4(), uuid4()
        validate_reorder([a, b, c], [c, a, b])

    def test_duplicate_rejected(self):
        a, b = uuid4(), uuid4()
        with pytest.raises(InvalidReorder) as exc_info:
            validate_reorder([a, b], [a, a, b])
        assert exc_info.value.details["duplicate_ids"] == [str(a)]

    def test_missing_rejected(self):
        a, b = uuid4(), uuid4()
        with pytest.raises(InvalidReorder) as exc_info:
            validate_reorder([a, b], [a])
        assert exc_info.value.details["missing_ids"] == [str(b)]

    def test_foreign_id_rejected(self):
        a, b, stranger = uuid4(), uuid4(), uuid4()
        with pytest.raises(InvalidReorder) as exc_info:
            validate_reorder([a, b], [a, b, stranger])
        assert exc_info.value.details["unknown_ids"] == [str(stranger)]

    def test_empty_sibling_set(self):
        validate_reorder([], [])

    def test_large_request_reports_each_duplicate_once(self):
        ids = [uuid4() for _ in range(5000)]
        doubled = [ids[10], ids[20]]
        with pytest.raises(InvalidReorder) as exc_info:
            validate_reorder(ids, ids + doubled + doubled)
        assert exc_info.value.details["duplicate_ids"] == sorted(str(i) for i in doubled)

    def test_large_permutation_accepted(self):
        ids = [uuid4() for _ in range(5000)]
        validate_reorder(ids, list(reversed(ids)))


async def positions(db, project_id):
    sections = await list_siblings(db, Section, Section.project_id, project_id)
    return [(s.name, s.position) for s in sections]


@pytest.mark.asyncio
class TestSectionPositions:
    """Tests for section append and reorder."""

    async def test_default_sections_are_dense(self, db_session, project):
        assert await positions(db_session, project.id) == [
            ("To Do", 1),
            ("In Progress", 2),
            ("Done", 3),
        ]

    async def test_new_section_appended(self, db_session, project, owner):
        section = await section_service.create_section(db_session, project, owner, name="Review")
        assert section.position == 4
        assert await next_position(db_session, Section, Section.project_id, project.id) == 5

    async def test_delete_leaves_gap_until_reorder(self, db_session, project, owner):
        sections = await list_siblings(db_session, Section, Section.project_id, project.id)
        await section_service.delete_section(db_session, sections[1], project, owner)

        assert await positions(db_session, project.id) == [("To Do", 1), ("Done", 3)]

        remaining = [s.id for s in await list_siblings(db_session, Section, Section.project_id, project.id)]
        await section_service.reorder_sections(db_session, project, owner, remaining)

        assert await positions(db_session, project.id) == [("To Do", 1), ("Done", 2)]

    async def test_reorder_renumbers_densely(self, db_session, project, owner):
        todo, doing, done = await list_siblings(db_session, Section, Section.project_id, project.id)

        reordered = await section_service.reorder_sections(
            db_session, project, owner, [done.id, todo.id, doing.id]
        )

        assert [(s.id, s.position) for s in reordered] == [(done.id, 1), (todo.id, 2), (doing.id, 3)]

    async def test_rejected_reorder_changes_nothing(self, db_session, project, owner):
        todo, doing, done = await list_siblings(db_session, Section, Section.project_id, project.id)
        before = await positions(db_session, project.id)

        with pytest.raises(InvalidReorder):
            await section_service.reorder_sections(db_session, project, owner, [todo.id, done.id])
        with pytest.raises(InvalidReorder):
            await section_service.reorder_sections(
                db_session, project, owner, [todo.id, done.id, doing.id, uuid4()]
            )

        assert await positions(db_session, project.id) == before


@pytest.mark.asyncio
class TestItemPositions:
    """Tests for item append and reorder within a section."""

    async def test_items_appended_in_order(self, db_session, project, owner):
        section = project.sections[0]
        first = await item_service.create_item(db_session, section, project, owner, title="First")
        second = await item_service.create_item(db_session, section, project, owner, title="Second")

        assert (first.position, second.position) == (1, 2)

    async def test_positions_are_per_section(self, db_session, project, owner):
        todo, doing, _done = project.sections
        await item_service.create_item(db_session, todo, project, owner, title="A")
        other = await item_service.create_item(db_session, doing, project, owner, title="B")

        assert other.position == 1

    async def test_reorder_items(self, db_session, project, owner):
        section = project.sections[0]
        items = [
            await item_service.create_item(db_session, section, project, owner, title=title)
            for title in ("A", "B", "C")
        ]

        reordered = await item_service.reorder_items(
            db_session, section, project, owner, [items[2].id, items[0].id, items[1].id]
        )

        assert [(i.title, i.position) for i in reordered] == [("C", 1), ("A", 2), ("B", 3)]

    async def test_item_from_other_section_rejected(self, db_session, project, owner):
        todo, doing, _done = project.sections
        mine = await item_service.create_item(db_session, todo, project, owner, title="Mine")
        theirs = await item_service.create_item(db_session, doing, project, owner, title="Theirs")

        with pytest.raises(InvalidReorder):
            await item_service.reorder_items(db_session, todo, project, owner, [mine.id, theirs.id])

        siblings = await list_siblings(db_session, Item, Item.section_id, todo.id)
        assert [(i.id, i.position) for i in siblings] == [(mine.id, 1)]
