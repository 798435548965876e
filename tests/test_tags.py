"""Tests for tag API endpoints and tag_service."""

import pytest

from kanban.exceptions import AuthorizationDenied, Conflict, ValidationFailed
from kanban.services import item_service, project_service, tag_service


@pytest.mark.asyncio
class TestTagService:
    """Tests for tag create/update/delete."""

    async def test_create_uses_default_color(self, db_session, project, owner):
        tag = await tag_service.create_tag(db_session, project, owner, name="backend")

        assert tag.project_id == project.id
        assert tag.color == "#3b82f6"

    async def test_duplicate_name_in_project(self, db_session, project, owner):
        await tag_service.create_tag(db_session, project, owner, name="backend")
        with pytest.raises(Conflict):
            await tag_service.create_tag(db_session, project, owner, name="backend")

    async def test_same_name_in_other_project(self, db_session, project, owner):
        other = await project_service.create_project(db_session, owner, name="Second board")
        first = await tag_service.create_tag(db_session, project, owner, name="backend")
        second = await tag_service.create_tag(db_session, other, owner, name="backend")

        assert first.id != second.id

    async def test_editor_cannot_create(self, db_session, team_project, editor_user):
        with pytest.raises(AuthorizationDenied):
            await tag_service.create_tag(db_session, team_project, editor_user, name="nope")

    async def test_rename_and_recolor(self, db_session, project, owner):
        tag = await tag_service.create_tag(db_session, project, owner, name="old")

        tag = await tag_service.update_tag(db_session, tag, project, owner, {"name": "new", "color": "#000000"})

        assert (tag.name, tag.color, tag.project_id) == ("new", "#000000", project.id)

    async def test_rename_to_existing(self, db_session, project, owner):
        await tag_service.create_tag(db_session, project, owner, name="taken")
        tag = await tag_service.create_tag(db_session, project, owner, name="free")

        with pytest.raises(Conflict):
            await tag_service.update_tag(db_session, tag, project, owner, {"name": "taken"})

    async def test_null_color_rejected(self, db_session, project, owner):
        tag = await tag_service.create_tag(db_session, project, owner, name="x")
        with pytest.raises(ValidationFailed):
            await tag_service.update_tag(db_session, tag, project, owner, {"color": None})

    async def test_delete_detaches_from_items(self, db_session, project, owner):
        tag = await tag_service.create_tag(db_session, project, owner, name="temp")
        item = await item_service.create_item(
            db_session, project.sections[0], project, owner, title="tagged", tag_ids=[tag.id]
        )

        await tag_service.delete_tag(db_session, tag, project, owner)

        reloaded = await item_service.get_item(db_session, item.id)
        assert reloaded.tags == []


@pytest.mark.asyncio
class TestTagEndpoints:
    """API tests for tag routes."""

    async def test_create_and_list(self, client, project, owner, headers_for):
        for name in ("zeta", "alpha"):
            response = await client.post(
                f"/api/projects/{project.id}/tags",
                json={"name": name, "color": "#112233"},
                headers=headers_for(owner),
            )
            assert response.status_code == 201

        response = await client.get(f"/api/projects/{project.id}/tags", headers=headers_for(owner))

        assert [t["name"] for t in response.json()] == ["alpha", "zeta"]

    async def test_invalid_color(self, client, project, owner, headers_for):
        response = await client.post(
            f"/api/projects/{project.id}/tags",
            json={"name": "bad", "color": "red"},
            headers=headers_for(owner),
        )
        assert response.status_code == 422

    async def test_duplicate_tag_409(self, client, db_session, project, owner, headers_for):
        await tag_service.create_tag(db_session, project, owner, name="dup")

        response = await client.post(
            f"/api/projects/{project.id}/tags",
            json={"name": "dup"},
            headers=headers_for(owner),
        )
        assert response.status_code == 409

    async def test_get_update_delete(self, client, db_session, team_project, owner, member_user, headers_for):
        tag = await tag_service.create_tag(db_session, team_project, owner, name="shared")

        response = await client.get(f"/api/tags/{tag.id}", headers=headers_for(member_user))
        assert response.status_code == 200

        response = await client.put(
            f"/api/tags/{tag.id}", json={"name": "renamed"}, headers=headers_for(member_user)
        )
        assert response.status_code == 403

        response = await client.put(f"/api/tags/{tag.id}", json={"name": "renamed"}, headers=headers_for(owner))
        assert response.status_code == 200
        assert response.json()["name"] == "renamed"

        response = await client.delete(f"/api/tags/{tag.id}", headers=headers_for(owner))
        assert response.status_code == 204

        response = await client.get(f"/api/tags/{tag.id}", headers=headers_for(owner))
        assert response.status_code == 404

    async def test_outsider_cannot_read(self, client, db_session, project, owner, outsider, headers_for):
        tag = await tag_service.create_tag(db_session, project, owner, name="private")

        response = await client.get(f"/api/tags/{tag.id}", headers=headers_for(outsider))
        assert response.status_code == 403
