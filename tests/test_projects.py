# =============================================================================
# tests/test_projects.py - Project Service Tests
# =============================================================================

import pytest

from app.exceptions import (
    PermissionDeniedError,
    PlanLimitExceededError,
    ProjectArchivedError,
    ProjectNotFoundError,
)
from core.services.project_service import ProjectService
from core.services.subscription_service import SubscriptionService


class TestProjects:
    """Tests for ProjectService."""

    def test_create(self, db, project, user_id, workspace):
        assert project["status"] == "active"
        assert project["user_id"] == user_id
        assert project["workspace_id"] == workspace["id"]

    def test_projects_limit(self, db, workspace, user_id, make_plan):
        make_plan(user_id, max_projects=1)
        ProjectService.create_project(workspace["id"], user_id, "First")

        with pytest.raises(PlanLimitExceededError):
            ProjectService.create_project(workspace["id"], user_id, "Second")

    def test_archived_projects_stop_counting(self, db, workspace, user_id, make_plan):
        make_plan(user_id, max_projects=1)
        first = ProjectService.create_project(workspace["id"], user_id, "First")

        ProjectService.archive_project(first["id"], user_id)

        assert SubscriptionService.count_projects(user_id) == 0
        second = ProjectService.create_project(workspace["id"], user_id, "Second")
        assert second["status"] == "active"

    def test_viewer_cannot_create(self, db, workspace, other_user_id, add_member, make_plan):
        add_member(workspace["id"], other_user_id, "viewer")
        make_plan(other_user_id)

        with pytest.raises(PermissionDeniedError):
            ProjectService.create_project(workspace["id"], other_user_id, "Nope")

    def test_only_owner_sees_project(self, db, project, other_user_id):
        with pytest.raises(ProjectNotFoundError):
            ProjectService.get_project(project["id"], other_user_id)

    def test_list_newest_first(self, db, workspace, user_id, project):
        newer = ProjectService.create_project(workspace["id"], user_id, "Newer")

        projects = ProjectService.list_projects(workspace["id"], user_id)
        assert [p["id"] for p in projects] == [newer["id"], project["id"]]

    def test_update(self, db, project, user_id):
        updated = ProjectService.update_project(
            project["id"], user_id, deployment_url="https://crm.example.com"
        )
        assert updated["deployment_url"] == "https://crm.example.com"
        assert updated["updated_at"]

    def test_archive_is_idempotent(self, db, project, user_id):
        first = ProjectService.archive_project(project["id"], user_id)
        second = ProjectService.archive_project(project["id"], user_id)

        assert first["status"] == second["status"] == "archived"

    def test_archived_project_cannot_change(self, db, project, user_id):
        ProjectService.archive_project(project["id"], user_id)

        with pytest.raises(ProjectArchivedError):
            ProjectService.update_project(project["id"], user_id, name="Again")
