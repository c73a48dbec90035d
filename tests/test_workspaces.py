# =============================================================================
# tests/test_workspaces.py - Workspace & Base Service Tests
# =============================================================================
# Membership roles, the default workspace and base creation under the
# plan's bases limit.
#
# Run with: pytest tests/test_workspaces.py -v
# =============================================================================

import pytest

from app.config import settings
from app.exceptions import (
    BaseNotFoundError,
    PermissionDeniedError,
    PlanLimitExceededError,
    WorkspaceNotFoundError,
)
from core.models.workspace import BASE_COLORS, BASE_ICONS, WRITE_ROLES, WorkspaceRole
from core.services.base_service import BaseService
from core.services.workspace_service import WorkspaceService
from lib.supabase_client import SupabaseClientError


# =============================================================================
# Workspaces
# =============================================================================

class TestWorkspaces:
    """Tests for WorkspaceService."""

    def test_create_adds_owner_membership(self, db, user_id):
        workspace = WorkspaceService.create_workspace(user_id, "Team")

        assert workspace["role"] == "owner"
        members = db.rows("workspace_members", workspace_id=workspace["id"])
        assert len(members) == 1
        assert members[0]["user_id"] == user_id
        assert members[0]["role"] == "owner"

    def test_membership_failure_removes_workspace(self, db, user_id):
        db.fail("workspace_members", "insert")

        with pytest.raises(SupabaseClientError):
            WorkspaceService.create_workspace(user_id, "Team")

        assert db.rows("workspaces") == []

    def test_list_creates_default_workspace(self, db, user_id):
        workspaces = WorkspaceService.list_workspaces(user_id)

        assert len(workspaces) == 1
        assert workspaces[0]["name"] == settings.DEFAULT_WORKSPACE_NAME
        assert workspaces[0]["role"] == "owner"

        # Second call finds the membership instead of creating another
        assert len(WorkspaceService.list_workspaces(user_id)) == 1
        assert len(db.rows("workspaces")) == 1

    def test_list_newest_first_with_roles(self, db, user_id, other_user_id, add_member):
        first = WorkspaceService.create_workspace(user_id, "First")
        shared = WorkspaceService.create_workspace(other_user_id, "Shared")
        add_member(shared["id"], user_id, "viewer")

        workspaces = WorkspaceService.list_workspaces(user_id)

        assert [w["id"] for w in workspaces] == [shared["id"], first["id"]]
        assert [w["role"] for w in workspaces] == ["viewer", "owner"]

    def test_non_member_gets_not_found(self, db, workspace, other_user_id):
        with pytest.raises(WorkspaceNotFoundError):
            WorkspaceService.get_workspace(workspace["id"], other_user_id)

    def test_rename_is_owner_only(self, db, workspace, user_id, other_user_id, add_member):
        add_member(workspace["id"], other_user_id, "editor")

        with pytest.raises(PermissionDeniedError) as exc_info:
            WorkspaceService.rename_workspace(workspace["id"], other_user_id, "Mine")
        assert exc_info.value.status_code == 403

        renamed = WorkspaceService.rename_workspace(workspace["id"], user_id, "Renamed")
        assert renamed["name"] == "Renamed"

    def test_delete(self, db, workspace, user_id):
        WorkspaceService.delete_workspace(workspace["id"], user_id)
        assert db.get("workspaces", workspace["id"]) is None

    def test_require_role(self, db, workspace, other_user_id, add_member):
        add_member(workspace["id"], other_user_id, "viewer")

        assert WorkspaceService.require_role(workspace["id"], other_user_id) == WorkspaceRole.VIEWER
        with pytest.raises(PermissionDeniedError):
            WorkspaceService.require_role(workspace["id"], other_user_id, WRITE_ROLES)


# =============================================================================
# Bases
# =============================================================================

class TestBases:
    """Tests for BaseService."""

    def test_create_picks_icon_and_color(self, db, base, user_id):
        assert base["name"] == "Sales"
        assert base["icon"] in BASE_ICONS
        assert base["color"] in BASE_COLORS
        assert base["created_by"] == user_id
        assert base["description"] == ""

    def test_create_keeps_given_icon_and_color(self, db, workspace, user_id, make_plan):
        make_plan(user_id)
        base = BaseService.create_base(
            workspace["id"], user_id, "CRM", icon="🚀", color="#123456"
        )
        assert base["icon"] == "🚀"
        assert base["color"] == "#123456"

    def test_new_base_has_no_tables(self, db, base):
        assert db.rows("tables", base_id=base["id"]) == []

    def test_bases_limit(self, db, workspace, user_id, make_plan):
        make_plan(user_id, name="Free", max_bases=1)
        BaseService.create_base(workspace["id"], user_id, "One")

        with pytest.raises(PlanLimitExceededError) as exc_info:
            BaseService.create_base(workspace["id"], user_id, "Two")

        assert exc_info.value.code == "PLAN_LIMIT_REACHED"
        assert exc_info.value.details["current"] == 1
        assert exc_info.value.details["limit"] == 1

    def test_no_plan_refuses(self, db, workspace, user_id):
        with pytest.raises(PlanLimitExceededError):
            BaseService.create_base(workspace["id"], user_id, "One")

    def test_viewer_cannot_create(self, db, workspace, other_user_id, add_member, make_plan):
        add_member(workspace["id"], other_user_id, "viewer")
        make_plan(other_user_id)

        with pytest.raises(PermissionDeniedError):
            BaseService.create_base(workspace["id"], other_user_id, "Nope")

    def test_list_newest_first(self, db, workspace, user_id, make_plan):
        make_plan(user_id)
        first = BaseService.create_base(workspace["id"], user_id, "First")
        second = BaseService.create_base(workspace["id"], user_id, "Second")

        bases = BaseService.list_bases(workspace["id"], user_id)
        assert [b["id"] for b in bases] == [second["id"], first["id"]]

    def test_get_base_hides_from_non_members(self, db, base, other_user_id):
        with pytest.raises(BaseNotFoundError):
            BaseService.get_base(base["id"], other_user_id)

    def test_update(self, db, base, user_id):
        updated = BaseService.update_base(base["id"], user_id, name="Revenue")
        assert updated["name"] == "Revenue"
        assert updated["icon"] == base["icon"]

    def test_delete_is_owner_only(self, db, base, workspace, user_id, other_user_id, add_member):
        add_member(workspace["id"], other_user_id, "editor")

        with pytest.raises(PermissionDeniedError):
            BaseService.delete_base(base["id"], other_user_id)

        BaseService.delete_base(base["id"], user_id)
        assert db.get("bases", base["id"]) is None
