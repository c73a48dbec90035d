# =============================================================================
# tests/test_api.py - HTTP Endpoint Tests
# =============================================================================
# Runs the FastAPI app against the in-memory database with auth and the
# Celery app replaced through dependency_overrides.
# =============================================================================

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.auth import AuthUser, get_current_user
from app.dependencies import get_celery_app
from app.main import app


@pytest.fixture
def celery():
    mock = MagicMock()
    mock.send_task.return_value = MagicMock(id="task-1")
    return mock


@pytest.fixture
def client(db, user_id, celery):
    app.dependency_overrides[get_current_user] = lambda: AuthUser(id=user_id)
    app.dependency_overrides[get_celery_app] = lambda: celery
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Health & Auth
# =============================================================================

class TestHealth:
    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["name"] == "Gridbase API"

    def test_missing_token_rejected(self, db):
        response = TestClient(app).get("/api/v1/workspaces")
        assert response.status_code in (401, 403)


# =============================================================================
# Workspaces & Bases
# =============================================================================

class TestWorkspaceEndpoints:
    def test_first_list_creates_default(self, client):
        response = client.get("/api/v1/workspaces")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["workspaces"][0]["name"] == "My Workspace"

    def test_create_and_get(self, client):
        created = client.post("/api/v1/workspaces", json={"name": "Team"})
        assert created.status_code == 201

        workspace_id = created.json()["id"]
        fetched = client.get(f"/api/v1/workspaces/{workspace_id}")
        assert fetched.status_code == 200
        assert fetched.json()["role"] == "owner"

    def test_unknown_workspace_is_404(self, client):
        response = client.get("/api/v1/workspaces/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json()["code"] == "WORKSPACE_NOT_FOUND"
        assert "detail" in response.json()

    def test_blank_name_rejected(self, client):
        response = client.post("/api/v1/workspaces", json={"name": ""})
        assert response.status_code == 422

    def test_base_without_plan_hits_limit(self, client, workspace):
        response = client.post(
            f"/api/v1/workspaces/{workspace['id']}/bases", json={"name": "Sales"}
        )

        assert response.status_code == 403
        assert response.json()["code"] == "PLAN_LIMIT_REACHED"

    def test_create_base(self, client, workspace, make_plan, user_id):
        make_plan(user_id)
        response = client.post(
            f"/api/v1/workspaces/{workspace['id']}/bases", json={"name": "Sales"}
        )

        assert response.status_code == 201
        listed = client.get(f"/api/v1/workspaces/{workspace['id']}/bases").json()
        assert listed["count"] == 1

    def test_limit_check_for_gated_types(self, client, db):
        db.rpc_results["check_user_subscription_limit"] = True

        response = client.get("/api/v1/usage/check/bases")

        assert response.status_code == 200
        assert response.json() == {"limit_type": "bases", "allowed": True}

    @pytest.mark.parametrize("limit_type", ["records", "storage"])
    def test_limit_check_rejects_ungated_types(self, client, db, limit_type):
        response = client.get(f"/api/v1/usage/check/{limit_type}")

        assert response.status_code == 422
        assert db.rpc_calls == []

    def test_delete_only_table(self, client, db, table):
        response = client.delete(f"/api/v1/tables/{table['id']}")

        assert response.status_code == 200
        assert response.json() == {"id": table["id"], "deleted": True}
        assert db.rows("fields", table_id=table["id"]) == []

    def test_backend_failure_is_502(self, client, db):
        db.fail("workspace_members", "select")
        response = client.get("/api/v1/workspaces")

        assert response.status_code == 502
        assert response.json()["code"] == "BACKEND_ERROR"


# =============================================================================
# Grid
# =============================================================================

class TestGridEndpoints:
    def test_table_starts_with_name_field(self, client, base):
        created = client.post(f"/api/v1/bases/{base['id']}/tables", json={"name": "Leads"})
        assert created.status_code == 201

        fields = client.get(f"/api/v1/tables/{created.json()['id']}/fields").json()
        assert [f["name"] for f in fields["fields"]] == ["Name"]

    def test_add_record_and_edit_cell(self, client, table, name_field):
        amount = client.post(
            f"/api/v1/tables/{table['id']}/fields",
            json={"name": "Amount", "type": "number"},
        ).json()

        record = client.post(
            f"/api/v1/tables/{table['id']}/records",
            json={"values": {name_field["id"]: "Ada"}},
        )
        assert record.status_code == 201
        record_id = record.json()["id"]
        assert record.json()["data"][name_field["id"]] == "Ada"

        edited = client.patch(
            f"/api/v1/records/{record_id}/cells",
            json={"field_id": amount["id"], "value": "42"},
        )
        assert edited.status_code == 200
        assert edited.json()["data"][amount["id"]] == 42

    def test_record_without_body(self, client, table, name_field):
        response = client.post(f"/api/v1/tables/{table['id']}/records")

        assert response.status_code == 201
        assert response.json()["data"][name_field["id"]] == ""

    def test_invalid_cell_value(self, client, table):
        amount = client.post(
            f"/api/v1/tables/{table['id']}/fields",
            json={"name": "Amount", "type": "number"},
        ).json()
        record = client.post(f"/api/v1/tables/{table['id']}/records").json()

        response = client.patch(
            f"/api/v1/records/{record['id']}/cells",
            json={"field_id": amount["id"], "value": "lots"},
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_CELL_VALUE"

    def test_move_table(self, client, base, table):
        second = client.post(f"/api/v1/bases/{base['id']}/tables", json={"name": "Deals"}).json()

        response = client.post(f"/api/v1/tables/{second['id']}/move", json={"position": 0})
        assert response.status_code == 200

        tables = client.get(f"/api/v1/bases/{base['id']}/tables").json()["tables"]
        assert [t["name"] for t in tables] == ["Deals", "Leads"]

    def test_csv_export(self, client, table, name_field):
        client.post(
            f"/api/v1/tables/{table['id']}/records",
            json={"values": {name_field["id"]: "Ada"}},
        )

        response = client.get(f"/api/v1/tables/{table['id']}/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="Leads.csv"' in response.headers["content-disposition"]
        assert response.text.splitlines() == ["Name", "Ada"]


# =============================================================================
# Builder & Tasks
# =============================================================================

class TestBuilderEndpoints:
    def test_prompt_is_queued(self, client, celery, user_id):
        session = client.post("/api/v1/builder/sessions").json()

        response = client.post(
            f"/api/v1/builder/sessions/{session['id']}/prompts",
            json={"prompt": "Add a kanban view"},
        )

        assert response.status_code == 202
        assert response.json()["task_id"] == "task-1"
        celery.send_task.assert_called_once_with(
            "workers.tasks.process_builder_prompt",
            args=[session["id"], str(user_id), "Add a kanban view"],
            queue="ai_tasks",
        )

    def test_prompt_on_ended_session(self, client, celery):
        session = client.post("/api/v1/builder/sessions").json()
        client.post(f"/api/v1/builder/sessions/{session['id']}/end")

        response = client.post(
            f"/api/v1/builder/sessions/{session['id']}/prompts",
            json={"prompt": "Add a kanban view"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "BUILDER_SESSION_ENDED"
        celery.send_task.assert_not_called()

    def test_queue_unreachable(self, client, celery):
        celery.send_task.side_effect = ConnectionError("broker down")
        session = client.post("/api/v1/builder/sessions").json()

        response = client.post(
            f"/api/v1/builder/sessions/{session['id']}/prompts",
            json={"prompt": "Add a kanban view"},
        )

        assert response.status_code == 503

    def test_task_status(self, client, celery):
        celery.AsyncResult.return_value = MagicMock(
            status="SUCCESS", result={"success": True, "response": "Done"}
        )

        response = client.get("/api/v1/tasks/task-1")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "SUCCESS"
        assert body["progress"] == 100
        assert body["result"]["response"] == "Done"
