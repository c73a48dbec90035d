# =============================================================================
# tests/test_marketplace.py - Blueprint Marketplace Tests
# =============================================================================

import pytest

from app.exceptions import (
    BlueprintInstallNotFoundError,
    BlueprintNotFoundError,
    InstallStateError,
    ProjectArchivedError,
    ProjectNotFoundError,
)
from core.services.marketplace_service import MarketplaceService
from core.services.project_service import ProjectService


@pytest.fixture
def blueprint(db):
    return db.seed(
        "blueprints",
        name="CRM Starter",
        description="Contacts, deals and a pipeline board",
        category="sales",
        version="1.2.0",
        install_count=4,
        is_public=True,
        code_template={},
        config_schema={},
    )


class TestBrowse:
    """Tests for listing and reading blueprints."""

    def test_list_public_most_installed_first(self, db, blueprint, user_id):
        popular = db.seed("blueprints", name="Popular", category="ops", version="1.0.0", install_count=50)
        db.seed("blueprints", name="Draft", category="ops", version="0.1.0", is_public=False, author_id=user_id)

        names = [b["name"] for b in MarketplaceService.list_blueprints()]
        assert names == [popular["name"], blueprint["name"]]

    def test_filter_by_category(self, db, blueprint):
        db.seed("blueprints", name="Ops", category="ops", version="1.0.0")
        assert [b["name"] for b in MarketplaceService.list_blueprints("sales")] == ["CRM Starter"]

    def test_private_blueprint_visible_to_author_only(self, db, user_id, other_user_id):
        draft = db.seed(
            "blueprints", name="Draft", category="ops", version="0.1.0",
            is_public=False, author_id=user_id,
        )

        assert MarketplaceService.get_blueprint(draft["id"], user_id)["name"] == "Draft"
        with pytest.raises(BlueprintNotFoundError):
            MarketplaceService.get_blueprint(draft["id"], other_user_id)
        with pytest.raises(BlueprintNotFoundError):
            MarketplaceService.get_blueprint(draft["id"])


class TestInstall:
    """Tests for installing and rolling back."""

    def test_install(self, db, blueprint, project, user_id):
        install = MarketplaceService.install_blueprint(
            blueprint["id"], project["id"], user_id, {"currency": "EUR"}
        )

        assert install["status"] == "installed"
        assert install["version_installed"] == "1.2.0"
        assert install["config_values"] == {"currency": "EUR"}
        assert db.get("blueprints", blueprint["id"])["install_count"] == 5

    def test_install_into_someone_elses_project(self, db, blueprint, project, other_user_id):
        with pytest.raises(ProjectNotFoundError):
            MarketplaceService.install_blueprint(blueprint["id"], project["id"], other_user_id)
        assert db.rows("blueprint_installs") == []

    def test_install_into_archived_project(self, db, blueprint, project, user_id):
        ProjectService.archive_project(project["id"], user_id)

        with pytest.raises(ProjectArchivedError):
            MarketplaceService.install_blueprint(blueprint["id"], project["id"], user_id)

    def test_rollback_once(self, db, blueprint, project, user_id):
        install = MarketplaceService.install_blueprint(blueprint["id"], project["id"], user_id)

        rolled_back = MarketplaceService.rollback_install(install["id"], user_id)
        assert rolled_back["status"] == "rolled_back"
        assert rolled_back["rolled_back_at"]

        with pytest.raises(InstallStateError) as exc_info:
            MarketplaceService.rollback_install(install["id"], user_id)
        assert exc_info.value.status_code == 409

    def test_rollback_by_other_user(self, db, blueprint, project, user_id, other_user_id):
        install = MarketplaceService.install_blueprint(blueprint["id"], project["id"], user_id)

        with pytest.raises(BlueprintInstallNotFoundError):
            MarketplaceService.rollback_install(install["id"], other_user_id)

    def test_list_installs_newest_first(self, db, blueprint, project, user_id):
        first = MarketplaceService.install_blueprint(blueprint["id"], project["id"], user_id)
        second = MarketplaceService.install_blueprint(blueprint["id"], project["id"], user_id)

        installs = MarketplaceService.list_installs(project["id"], user_id)
        assert [i["id"] for i in installs] == [second["id"], first["id"]]
