"""Tests for section API endpoints and section_service."""

from uuid import uuid4

import pytest

from kanban.exceptions import AuthorizationDenied, NotFound, ValidationFailed
from kanban.services import item_service, project_service, section_service, tag_service


@pytest.mark.asyncio
class TestSectionService:
    """Tests for section create/update/delete."""

    async def test_create_with_date_filter(self, db_session, project, owner):
        section = await section_service.create_section(
            db_session,
            project,
            owner,
            name="This month",
            filter_type="date",
            filter_value={"due_between": {"start": "2024-06-01", "end": "2024-06-30"}},
            item_limit=5,
        )

        assert section.filter_type == "date"
        assert section.filter_value == {"due_between": {"start": "2024-06-01", "end": "2024-06-30"}}
        assert section.item_limit == 5

    async def test_create_rejects_invalid_filter(self, db_session, project, owner):
        with pytest.raises(ValidationFailed):
            await section_service.create_section(
                db_session, project, owner, name="Bad", filter_type="status", filter_value="later"
            )

    async def test_assignee_filter_requires_existing_user(self, db_session, project, owner):
        with pytest.raises(ValidationFailed):
            await section_service.create_section(
                db_session, project, owner, name="Ghost", filter_type="assigned_to", filter_value=str(uuid4())
            )

    async def test_tag_filter_requires_project_tag(self, db_session, project, owner, outsider):
        elsewhere = await project_service.create_project(db_session, outsider, name="Elsewhere")
        foreign = await tag_service.create_tag(db_session, elsewhere, outsider, name="foreign")

        with pytest.raises(ValidationFailed):
            await section_service.create_section(
                db_session, project, owner, name="Foreign", filter_type="tag", filter_value=str(foreign.id)
            )

    async def test_editor_cannot_create(self, db_session, team_project, editor_user):
        with pytest.raises(AuthorizationDenied):
            await section_service.create_section(db_session, team_project, editor_user, name="Nope")

    async def test_changing_type_clears_value(self, db_session, project, owner):
        section = project.sections[0]

        updated = await section_service.update_section(
            db_session, section, project, owner, {"filter_type": "priority"}
        )

        assert (updated.filter_type, updated.filter_value) == ("priority", None)

    async def test_update_value_keeps_type(self, db_session, project, owner):
        section = project.sections[0]

        updated = await section_service.update_section(
            db_session, section, project, owner, {"filter_value": "blocked", "item_limit": 3}
        )

        assert (updated.filter_type, updated.filter_value, updated.item_limit) == ("status", "blocked", 3)

    async def test_null_name_rejected(self, db_session, project, owner):
        with pytest.raises(ValidationFailed):
            await section_service.update_section(db_session, project.sections[0], project, owner, {"name": None})

    async def test_delete_cascades_items(self, db_session, project, owner):
        section = project.sections[0]
        item = await item_service.create_item(db_session, section, project, owner, title="Doomed")

        await section_service.delete_section(db_session, section, project, owner)

        with pytest.raises(NotFound):
            await item_service.get_item(db_session, item.id)

    async def test_get_section_scoped_to_project(self, db_session, project, outsider):
        other = await project_service.create_project(db_session, outsider, name="Other board")

        with pytest.raises(NotFound):
            await section_service.get_section(db_session, project.sections[0].id, other.id)


@pytest.mark.asyncio
class TestSectionEndpoints:
    """API tests for /api/projects/{id}/sections."""

    async def test_list_sections_with_counts(self, client, db_session, project, owner, headers_for):
        await item_service.create_item(db_session, project.sections[0], project, owner, title="One", status="done")

        response = await client.get(f"/api/projects/{project.id}/sections", headers=headers_for(owner))

        assert response.status_code == 200
        data = response.json()
        assert [(s["name"], s["position"], s["items_count"]) for s in data] == [
            ("To Do", 1, 1),
            ("In Progress", 2, 0),
            ("Done", 3, 0),
        ]

    async def test_create_section(self, client, project, owner, headers_for):
        response = await client.post(
            f"/api/projects/{project.id}/sections",
            json={"name": "Urgent", "filter_type": "priority", "filter_value": "urgent", "item_limit": 10},
            headers=headers_for(owner),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["position"] == 4
        assert data["filter_value"] == "urgent"
        assert data["items_count"] == 0

    async def test_create_section_invalid_date_filter(self, client, project, owner, headers_for):
        response = await client.post(
            f"/api/projects/{project.id}/sections",
            json={"name": "Bad", "filter_type": "date", "filter_value": {"due_on": "tomorrow"}},
            headers=headers_for(owner),
        )

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_FAILED"

    async def test_member_cannot_create(self, client, team_project, member_user, headers_for):
        response = await client.post(
            f"/api/projects/{team_project.id}/sections",
            json={"name": "Mine"},
            headers=headers_for(member_user),
        )
        assert response.status_code == 403

    async def test_reorder_endpoint(self, client, project, owner, headers_for):
        todo, doing, done = [s.id for s in project.sections]

        response = await client.post(
            f"/api/projects/{project.id}/sections/reorder",
            json={"section_ids": [str(done), str(doing), str(todo)]},
            headers=headers_for(owner),
        )

        assert response.status_code == 200
        assert [s["name"] for s in response.json()] == ["Done", "In Progress", "To Do"]
        assert [s["position"] for s in response.json()] == [1, 2, 3]

    async def test_reorder_with_missing_id(self, client, project, owner, headers_for):
        todo, doing, _done = [s.id for s in project.sections]

        response = await client.post(
            f"/api/projects/{project.id}/sections/reorder",
            json={"section_ids": [str(todo), str(doing)]},
            headers=headers_for(owner),
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_REORDER"

    async def test_update_section(self, client, project, owner, headers_for):
        section_id = project.sections[1].id

        response = await client.put(
            f"/api/projects/{project.id}/sections/{section_id}",
            json={"name": "Doing", "filter_type": "date", "filter_value": {"overdue": True}},
            headers=headers_for(owner),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Doing"
        assert response.json()["filter_value"] == {"overdue": True}

    async def test_delete_section(self, client, project, owner, headers_for):
        section_id = project.sections[2].id

        response = await client.delete(
            f"/api/projects/{project.id}/sections/{section_id}",
            headers=headers_for(owner),
        )
        assert response.status_code == 204

        response = await client.get(
            f"/api/projects/{project.id}/sections/{section_id}",
            headers=headers_for(owner),
        )
        assert response.status_code == 404

    async def test_outsider_gets_403_for_unknown_section(self, client, project, outsider, headers_for):
        url = f"/api/projects/{project.id}/sections/{uuid4()}"

        assert (await client.get(url, headers=headers_for(outsider))).status_code == 403
        response = await client.put(url, json={"name": "Renamed"}, headers=headers_for(outsider))
        assert response.status_code == 403
        assert (await client.delete(url, headers=headers_for(outsider))).status_code == 403

    async def test_member_gets_404_for_unknown_section(self, client, project, owner, headers_for):
        response = await client.get(
            f"/api/projects/{project.id}/sections/{uuid4()}",
            headers=headers_for(owner),
        )
        assert response.status_code == 404
