"""Tests for project API endpoints and project_service."""

from datetime import date

import pytest

from kanban.exceptions import AuthorizationDenied, Conflict, NotFound, ValidationFailed
from kanban.services import item_service, project_service, section_service


@pytest.mark.asyncio
class TestCreateProject:
    """Tests for project creation."""

    async def test_create_attaches_owner_and_default_sections(self, db_session, owner, assert_single_owner):
        project = await project_service.create_project(db_session, owner, name="Roadmap")

        assert project.owner_user_id == owner.id
        assert project.status == "active"
        assert await assert_single_owner(project.id) == owner.id
        assert [(s.name, s.position, s.filter_type, s.filter_value) for s in project.sections] == [
            ("To Do", 1, "status", "todo"),
            ("In Progress", 2, "status", "in_progress"),
            ("Done", 3, "status", "done"),
        ]

    async def test_name_unique_per_owner(self, db_session, project, owner):
        with pytest.raises(Conflict) as exc_info:
            await project_service.create_project(db_session, owner, name=project.name)
        assert exc_info.value.message == "You already have a project with this name"

    async def test_same_name_for_different_owners(self, db_session, project, outsider):
        other = await project_service.create_project(db_session, outsider, name=project.name)
        assert other.id != project.id

    async def test_end_before_start_rejected(self, db_session, owner):
        with pytest.raises(ValidationFailed):
            await project_service.create_project(
                db_session,
                owner,
                name="Backwards",
                start_date=date(2024, 6, 30),
                end_date=date(2024, 6, 1),
            )


@pytest.mark.asyncio
class TestUpdateDeleteProject:
    """Tests for project updates and deletion."""

    async def test_admin_updates(self, db_session, team_project, admin_user):
        project = await project_service.update_project(
            db_session, team_project, admin_user, {"status": "on_hold", "color": "#abc"}
        )
        assert (project.status, project.color) == ("on_hold", "#abc")

    async def test_editor_cannot_update(self, db_session, team_project, editor_user):
        with pytest.raises(AuthorizationDenied):
            await project_service.update_project(db_session, team_project, editor_user, {"name": "Mine"})

    async def test_update_checks_resulting_date_range(self, db_session, project, owner):
        project = await project_service.update_project(
            db_session, project, owner, {"start_date": date(2024, 6, 1)}
        )
        with pytest.raises(ValidationFailed):
            await project_service.update_project(db_session, project, owner, {"end_date": date(2024, 5, 1)})

    async def test_null_name_rejected(self, db_session, project, owner):
        with pytest.raises(ValidationFailed):
            await project_service.update_project(db_session, project, owner, {"name": None})

    async def test_rename_to_existing_conflicts(self, db_session, project, owner):
        other = await project_service.create_project(db_session, owner, name="Second")
        with pytest.raises(Conflict):
            await project_service.update_project(db_session, other, owner, {"name": project.name})

    async def test_only_owner_deletes(self, db_session, team_project, owner, admin_user):
        project_id = team_project.id
        with pytest.raises(AuthorizationDenied):
            await project_service.delete_project(db_session, team_project, admin_user)

        await project_service.delete_project(db_session, team_project, owner)

        with pytest.raises(NotFound):
            await project_service.get_project(db_session, project_id)


@pytest.mark.asyncio
class TestListProjects:
    """Tests for paginated project listing and per-project counts."""

    async def test_pages_cover_every_project_once(self, db_session, owner):
        for name in ("One", "Two", "Three"):
            await project_service.create_project(db_session, owner, name=name)

        first = await project_service.list_projects(db_session, owner, skip=0, limit=2)
        rest = await project_service.list_projects(db_session, owner, skip=2, limit=2)

        assert len(first) == 2
        assert len(rest) == 1
        assert {p.name for p in first + rest} == {"One", "Two", "Three"}

    async def test_counts_sections_and_items(self, db_session, project, owner):
        empty = await project_service.create_project(db_session, owner, name="Empty board")
        await section_service.delete_section(db_session, empty.sections[0], empty, owner)
        for title in ("a", "b"):
            await item_service.create_item(db_session, project.sections[0], project, owner, title=title)
        await item_service.create_item(db_session, project.sections[2], project, owner, title="c")

        counts = await project_service.count_project_contents(db_session, [project.id, empty.id])

        assert counts == {project.id: (3, 3), empty.id: (2, 0)}

    async def test_counts_for_no_projects(self, db_session):
        assert await project_service.count_project_contents(db_session, []) == {}


@pytest.mark.asyncio
class TestProjectEndpoints:
    """API tests for /api/projects."""

    async def test_create_project(self, client, owner, headers_for):
        response = await client.post(
            "/api/projects",
            json={"name": "Website", "description": "Redesign", "color": "#ff8800"},
            headers=headers_for(owner),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Website"
        assert data["owner_user_id"] == str(owner.id)
        assert [s["name"] for s in data["sections"]] == ["To Do", "In Progress", "Done"]
        assert [m["role"] for m in data["members"]] == ["owner"]

    async def test_create_duplicate_name(self, client, project, owner, headers_for):
        response = await client.post(
            "/api/projects",
            json={"name": project.name},
            headers=headers_for(owner),
        )

        assert response.status_code == 409
        assert response.json()["errors"] == {"name": "You already have a project with this name"}

    async def test_create_invalid_dates(self, client, owner, headers_for):
        response = await client.post(
            "/api/projects",
            json={"name": "Bad", "start_date": "2024-06-30", "end_date": "2024-06-01"},
            headers=headers_for(owner),
        )
        assert response.status_code == 422

    async def test_create_requires_auth(self, client):
        response = await client.post("/api/projects", json={"name": "Anon"})
        assert response.status_code == 401

    async def test_list_includes_memberships(self, client, team_project, member_user, outsider, headers_for):
        response = await client.get("/api/projects", headers=headers_for(member_user))
        assert [p["id"] for p in response.json()] == [str(team_project.id)]

        response = await client.get("/api/projects", headers=headers_for(outsider))
        assert response.json() == []

    async def test_get_project_detail(self, client, team_project, editor_user, headers_for):
        response = await client.get(f"/api/projects/{team_project.id}", headers=headers_for(editor_user))

        assert response.status_code == 200
        assert len(response.json()["members"]) == 4

    async def test_outsider_gets_403(self, client, project, outsider, headers_for):
        response = await client.get(f"/api/projects/{project.id}", headers=headers_for(outsider))
        assert response.status_code == 403

    async def test_unknown_project_404(self, client, owner, headers_for):
        response = await client.get(
            "/api/projects/00000000-0000-0000-0000-000000000000",
            headers=headers_for(owner),
        )
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    async def test_update_project(self, client, team_project, admin_user, headers_for):
        response = await client.put(
            f"/api/projects/{team_project.id}",
            json={"description": "Updated"},
            headers=headers_for(admin_user),
        )

        assert response.status_code == 200
        assert response.json()["description"] == "Updated"
        assert response.json()["name"] == team_project.name

    async def test_delete_project(self, client, project, owner, headers_for):
        response = await client.delete(f"/api/projects/{project.id}", headers=headers_for(owner))
        assert response.status_code == 204

        response = await client.get(f"/api/projects/{project.id}", headers=headers_for(owner))
        assert response.status_code == 404

    async def test_member_cannot_delete(self, client, team_project, member_user, headers_for):
        response = await client.delete(f"/api/projects/{team_project.id}", headers=headers_for(member_user))
        assert response.status_code == 403

    async def test_list_paginates_with_counts(self, client, db_session, project, owner, headers_for):
        await project_service.create_project(db_session, owner, name="Second")
        await item_service.create_item(db_session, project.sections[1], project, owner, title="Task")

        response = await client.get("/api/projects", params={"limit": 1}, headers=headers_for(owner))
        assert response.status_code == 200
        assert len(response.json()) == 1

        response = await client.get("/api/projects", headers=headers_for(owner))
        counts = {p["name"]: (p["sections_count"], p["items_count"]) for p in response.json()}
        assert counts == {project.name: (3, 1), "Second": (3, 0)}

        response = await client.get("/api/projects", params={"skip": 2}, headers=headers_for(owner))
        assert response.json() == []

    async def test_list_rejects_bad_page_params(self, client, owner, headers_for):
        response = await client.get("/api/projects", params={"limit": 0}, headers=headers_for(owner))
        assert response.status_code == 422

        response = await client.get("/api/projects", params={"skip": -1}, headers=headers_for(owner))
        assert response.status_code == 422
