"""Tests for project membership management."""

from uuid import uuid4

import pytest

from kanban.exceptions import AuthorizationDenied, Conflict, Forbidden, NotFound, NotMember, ValidationFailed
from kanban.models import ProjectMemberRole
from kanban.services import membership_service


@pytest.mark.asyncio
class TestAddMember:
    """Tests for adding members."""

    async def test_owner_adds_member(self, db_session, project, owner, member_user):
        member = await membership_service.add_member(db_session, project, owner, member_user.id, "editor")

        assert member.user_id == member_user.id
        assert member.role == ProjectMemberRole.EDITOR.value
        assert member.user.email == member_user.email

    async def test_admin_adds_member(self, db_session, team_project, admin_user, outsider):
        member = await membership_service.add_member(db_session, team_project, admin_user, outsider.id, "member")
        assert member.role == "member"

    async def test_editor_cannot_add(self, db_session, team_project, editor_user, outsider):
        with pytest.raises(AuthorizationDenied):
            await membership_service.add_member(db_session, team_project, editor_user, outsider.id, "member")

        assert await membership_service.get_member(db_session, team_project.id, outsider.id) is None

    async def test_owner_role_cannot_be_assigned(self, db_session, project, owner, member_user):
        with pytest.raises(ValidationFailed):
            await membership_service.add_member(db_session, project, owner, member_user.id, "owner")

    async def test_unknown_role_rejected(self, db_session, project, owner, member_user):
        with pytest.raises(ValidationFailed):
            await membership_service.add_member(db_session, project, owner, member_user.id, "superuser")

    async def test_unknown_user(self, db_session, project, owner):
        with pytest.raises(NotFound):
            await membership_service.add_member(db_session, project, owner, uuid4(), "member")

    async def test_duplicate_member(self, db_session, team_project, owner, member_user):
        with pytest.raises(Conflict):
            await membership_service.add_member(db_session, team_project, owner, member_user.id, "admin")


@pytest.mark.asyncio
class TestUpdateMemberRole:
    """Tests for role changes."""

    async def test_owner_promotes_member(self, db_session, team_project, owner, member_user):
        member = await membership_service.update_member_role(
            db_session, team_project, owner, member_user.id, "admin"
        )
        assert member.role == "admin"

    async def test_admin_demotes_editor(self, db_session, team_project, admin_user, editor_user):
        member = await membership_service.update_member_role(
            db_session, team_project, admin_user, editor_user.id, "member"
        )
        assert member.role == "member"

    async def test_owner_role_is_protected(self, db_session, team_project, admin_user, owner, assert_single_owner):
        with pytest.raises(Forbidden):
            await membership_service.update_member_role(db_session, team_project, admin_user, owner.id, "member")

        assert await assert_single_owner(team_project.id) == owner.id

    async def test_owner_cannot_change_own_role(self, db_session, team_project, owner):
        with pytest.raises(Forbidden):
            await membership_service.update_member_role(db_session, team_project, owner, owner.id, "admin")

    async def test_admin_cannot_change_own_role(self, db_session, team_project, admin_user):
        with pytest.raises(Forbidden):
            await membership_service.update_member_role(
                db_session, team_project, admin_user, admin_user.id, "member"
            )

    async def test_member_cannot_change_roles(self, db_session, team_project, member_user, editor_user):
        with pytest.raises(AuthorizationDenied):
            await membership_service.update_member_role(
                db_session, team_project, member_user, editor_user.id, "admin"
            )

    async def test_non_member_target(self, db_session, project, owner, outsider):
        with pytest.raises(NotMember):
            await membership_service.update_member_role(db_session, project, owner, outsider.id, "admin")


@pytest.mark.asyncio
class TestRemoveAndLeave:
    """Tests for removing members and leaving."""

    async def test_owner_removes_member(self, db_session, team_project, owner, member_user):
        await membership_service.remove_member(db_session, team_project, owner, member_user.id)
        assert await membership_service.get_member(db_session, team_project.id, member_user.id) is None

    async def test_owner_cannot_be_removed(self, db_session, team_project, admin_user, owner):
        with pytest.raises(Forbidden):
            await membership_service.remove_member(db_session, team_project, admin_user, owner.id)

    async def test_admin_cannot_remove_themself(self, db_session, team_project, admin_user):
        with pytest.raises(Forbidden):
            await membership_service.remove_member(db_session, team_project, admin_user, admin_user.id)

    async def test_remove_non_member(self, db_session, project, owner, outsider):
        with pytest.raises(NotMember):
            await membership_service.remove_member(db_session, project, owner, outsider.id)

    async def test_member_leaves(self, db_session, team_project, editor_user):
        await membership_service.leave_project(db_session, team_project, editor_user)
        assert await membership_service.get_member(db_session, team_project.id, editor_user.id) is None

    async def test_owner_cannot_leave(self, db_session, team_project, owner, assert_single_owner):
        with pytest.raises(Forbidden):
            await membership_service.leave_project(db_session, team_project, owner)

        assert await assert_single_owner(team_project.id) == owner.id

    async def test_outsider_cannot_leave(self, db_session, project, outsider):
        with pytest.raises(NotMember):
            await membership_service.leave_project(db_session, project, outsider)


@pytest.mark.asyncio
class TestMemberEndpoints:
    """API tests for the members router."""

    async def test_list_members(self, client, team_project, owner, headers_for):
        response = await client.get(f"/api/projects/{team_project.id}/members", headers=headers_for(owner))

        assert response.status_code == 200
        roles = {m["user"]["email"]: m["role"] for m in response.json()}
        assert roles == {
            "owner@example.com": "owner",
            "admin@example.com": "admin",
            "editor@example.com": "editor",
            "member@example.com": "member",
        }

    async def test_outsider_cannot_list(self, client, project, outsider, headers_for):
        response = await client.get(f"/api/projects/{project.id}/members", headers=headers_for(outsider))
        assert response.status_code == 403
        assert response.json()["code"] == "AUTHORIZATION_DENIED"

    async def test_add_member_endpoint(self, client, project, owner, member_user, headers_for):
        response = await client.post(
            f"/api/projects/{project.id}/members",
            json={"user_id": str(member_user.id), "role": "editor"},
            headers=headers_for(owner),
        )

        assert response.status_code == 201
        assert response.json()["role"] == "editor"

    async def test_add_member_twice_conflicts(self, client, team_project, owner, member_user, headers_for):
        response = await client.post(
            f"/api/projects/{team_project.id}/members",
            json={"user_id": str(member_user.id), "role": "member"},
            headers=headers_for(owner),
        )
        assert response.status_code == 409

    async def test_change_owner_role_forbidden(self, client, team_project, admin_user, owner, headers_for):
        response = await client.put(
            f"/api/projects/{team_project.id}/members/{owner.id}",
            json={"role": "member"},
            headers=headers_for(admin_user),
        )
        assert response.status_code == 403

    async def test_get_missing_member(self, client, project, owner, outsider, headers_for):
        response = await client.get(
            f"/api/projects/{project.id}/members/{outsider.id}",
            headers=headers_for(owner),
        )
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_MEMBER"

    async def test_leave_endpoint(self, client, team_project, member_user, headers_for):
        response = await client.post(
            f"/api/projects/{team_project.id}/leave",
            headers=headers_for(member_user),
        )
        assert response.status_code == 204

    async def test_remove_endpoint(self, client, team_project, admin_user, editor_user, headers_for):
        response = await client.delete(
            f"/api/projects/{team_project.id}/members/{editor_user.id}",
            headers=headers_for(admin_user),
        )
        assert response.status_code == 204
