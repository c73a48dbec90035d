# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - An in-memory stand-in for the Supabase query builder, installed as the
#   SupabaseClient singleton so services run unmodified
# - Factories for users, plans, memberships and a ready-made grid
# =============================================================================

import copy
import os
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("BUILDER_BACKEND", "placeholder")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from lib.supabase_client import SupabaseClient


# =============================================================================
# In-Memory Supabase
# =============================================================================

# Columns the database fills in on insert, besides id and created_at
TABLE_DEFAULTS: dict[str, dict[str, Any]] = {
    "bases": {"description": "", "icon": None, "color": None},
    "tables": {"description": ""},
    "projects": {"code_repository": None, "deployment_url": None},
    "ai_sessions": {"ended_at": None, "credits_consumed": 0},
    "change_requests": {"approved_by": None, "approved_at": None},
    "pipeline_stages": {"completed_at": None},
    "blueprint_installs": {"rolled_back_at": None},
    "blueprints": {"install_count": 0, "is_public": True, "price_cents": 0},
}

# Timestamp column set on insert, per table
TIMESTAMP_COLUMN = {"blueprint_installs": "installed_at"}

# ON DELETE CASCADE foreign keys: parent table -> [(child table, column)]
CASCADES: dict[str, list[tuple[str, str]]] = {
    "workspaces": [("workspace_members", "workspace_id"), ("bases", "workspace_id")],
    "bases": [("tables", "base_id")],
    "tables": [("fields", "table_id"), ("records", "table_id")],
}


class FakeResponse:
    def __init__(self, data: Any = None, count: int | None = None):
        self.data = data
        self.count = count


class FakeQuery:
    """
    Chainable query over one in-memory table.

    Supports the subset of the postgrest builder SupabaseClient uses.
    """

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.count_mode = None
        self.payload: dict[str, Any] | None = None
        self.predicates: list[Callable[[dict[str, Any]], bool]] = []
        self.order_column: str | None = None
        self.order_desc = False
        self.limit_count: int | None = None
        self.single_row = False

    # -- operations ----------------------------------------------------------

    def select(self, columns: str = "*", count: str | None = None) -> "FakeQuery":
        self.op = "select"
        self.columns = columns
        self.count_mode = count
        return self

    def insert(self, data: dict[str, Any]) -> "FakeQuery":
        self.op = "insert"
        self.payload = data
        return self

    def update(self, data: dict[str, Any]) -> "FakeQuery":
        self.op = "update"
        self.payload = data
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    # -- filters -------------------------------------------------------------

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.predicates.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value: Any) -> "FakeQuery":
        self.predicates.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column: str, values: list[Any]) -> "FakeQuery":
        allowed = list(values)
        self.predicates.append(lambda row: row.get(column) in allowed)
        return self

    def gte(self, column: str, value: Any) -> "FakeQuery":
        self.predicates.append(
            lambda row: row.get(column) is not None and row[column] >= value
        )
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_column = column
        self.order_desc = desc
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.limit_count = count
        return self

    def single(self) -> "FakeQuery":
        self.single_row = True
        return self

    # -- execution -----------------------------------------------------------

    def _matches(self) -> list[dict[str, Any]]:
        return [row for row in self.db.tables[self.table] if all(p(row) for p in self.predicates)]

    def _project(self, row: dict[str, Any]) -> dict[str, Any]:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        keys = [c.strip() for c in self.columns.split(",")]
        return {k: copy.deepcopy(row.get(k)) for k in keys}

    def execute(self) -> FakeResponse:
        if (self.table, self.op) in self.db.failures:
            raise RuntimeError(f"simulated {self.op} failure on {self.table}")

        if self.op == "insert":
            row = self.db.seed(self.table, **self.payload)
            return FakeResponse(data=[copy.deepcopy(row)])

        if self.op == "update":
            rows = self._matches()
            for row in rows:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse(data=[copy.deepcopy(r) for r in rows])

        if self.op == "delete":
            rows = self._matches()
            self.db.remove(self.table, rows)
            return FakeResponse(data=[copy.deepcopy(r) for r in rows])

        rows = self._matches()
        if self.order_column:
            rows = sorted(
                rows,
                key=lambda r: (r.get(self.order_column) is None, r.get(self.order_column)),
                reverse=self.order_desc,
            )
        if self.limit_count is not None:
            rows = rows[:self.limit_count]

        if self.single_row:
            if len(rows) != 1:
                raise RuntimeError(
                    "{'code': 'PGRST116', 'message': 'JSON object requested, "
                    "multiple (or no) rows returned'}"
                )
            return FakeResponse(data=self._project(rows[0]))

        count = len(rows) if self.count_mode else None
        return FakeResponse(data=[self._project(r) for r in rows], count=count)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", function: str, params: dict[str, Any]):
        self.db = db
        self.function = function
        self.params = params

    def execute(self) -> FakeResponse:
        self.db.rpc_calls.append((self.function, self.params))
        result = self.db.rpc_results.get(self.function)
        if callable(result):
            result = result(self.params)
        return FakeResponse(data=result)


class FakeSupabase:
    """
    In-memory stand-in for the supabase Client.

    Rows are plain dicts keyed by table name. Inserts get a uuid id and a
    strictly increasing created_at so "newest first" ordering is stable.
    """

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.failures: set[tuple[str, str]] = set()
        self.rpc_results: dict[str, Any] = {}
        self.rpc_calls: list[tuple[str, dict[str, Any]]] = []
        self._epoch = datetime.now(timezone.utc)
        self._tick = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, function: str, params: dict[str, Any]) -> FakeRpc:
        return FakeRpc(self, function, params)

    def now(self) -> str:
        self._tick += 1
        stamp = self._epoch + timedelta(milliseconds=self._tick)
        return stamp.isoformat(timespec="microseconds")

    def fail(self, table: str, op: str) -> None:
        """Make every `op` (insert/update/delete/select) on `table` raise."""
        self.failures.add((table, op))

    def seed(self, table: str, **values: Any) -> dict[str, Any]:
        """Insert a row directly, filling in the database defaults."""
        row: dict[str, Any] = {"id": str(uuid.uuid4())}
        row[TIMESTAMP_COLUMN.get(table, "created_at")] = self.now()
        row.update(copy.deepcopy(TABLE_DEFAULTS.get(table, {})))
        row.update(copy.deepcopy(values))
        self.tables[table].append(row)
        return row

    def remove(self, table: str, rows: list[dict[str, Any]]) -> None:
        """Delete rows and follow the cascading foreign keys."""
        self.tables[table] = [r for r in self.tables[table] if r not in rows]
        ids = {str(r["id"]) for r in rows}
        for child, column in CASCADES.get(table, []):
            orphans = [r for r in self.tables[child] if str(r.get(column)) in ids]
            if orphans:
                self.remove(child, orphans)

    def rows(self, table: str, **filters: Any) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(r) for r in self.tables[table]
            if all(r.get(k) == v for k, v in filters.items())
        ]

    def get(self, table: str, row_id: str) -> dict[str, Any] | None:
        found = self.rows(table, id=str(row_id))
        return found[0] if found else None


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def db(monkeypatch):
    """Fresh in-memory database installed as the Supabase client."""
    fake = FakeSupabase()
    monkeypatch.setattr(SupabaseClient, "_instance", fake)
    return fake


@pytest.fixture
def user_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def other_user_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def make_plan(db):
    """
    Factory: give a user an active subscription to a new plan.

    Limits default to unlimited (-1) with exports enabled.
    """
    def _make_plan(
        user_id: str,
        name: str = "Pro",
        max_projects: int = -1,
        max_bases: int = -1,
        max_records_per_base: int = -1,
        max_storage_mb: int = -1,
        features: dict[str, Any] | None = None,
        status: str = "active",
        price_monthly: float = 20,
    ) -> dict[str, Any]:
        plan = db.seed(
            "subscription_plans",
            name=name,
            price_monthly=price_monthly,
            price_yearly=price_monthly * 10,
            max_projects=max_projects,
            max_bases=max_bases,
            max_records_per_base=max_records_per_base,
            max_storage_mb=max_storage_mb,
            features={"exports": True} if features is None else features,
        )
        db.seed(
            "user_subscriptions",
            user_id=str(user_id),
            plan_id=plan["id"],
            status=status,
            cancel_at_period_end=False,
        )
        return plan

    return _make_plan


@pytest.fixture
def add_member(db):
    """Factory: add a user to a workspace with a role."""
    def _add_member(workspace_id: str, user_id: str, role: str) -> dict[str, Any]:
        return db.seed(
            "workspace_members",
            workspace_id=str(workspace_id),
            user_id=str(user_id),
            role=role,
        )

    return _add_member


@pytest.fixture
def workspace(db, user_id):
    from core.services.workspace_service import WorkspaceService
    return WorkspaceService.create_workspace(user_id, "Team")


@pytest.fixture
def base(db, user_id, workspace, make_plan):
    from core.services.base_service import BaseService
    make_plan(user_id)
    return BaseService.create_base(workspace["id"], user_id, "Sales")


@pytest.fixture
def table(db, user_id, base):
    from core.services.table_service import TableService
    return TableService.create_table(base["id"], user_id, "Leads")


@pytest.fixture
def name_field(db, table):
    """The default Name field every table starts with."""
    return db.rows("fields", table_id=table["id"])[0]


@pytest.fixture
def project(db, user_id, workspace, make_plan):
    from core.services.project_service import ProjectService
    if not db.rows("user_subscriptions", user_id=str(user_id)):
        make_plan(user_id)
    return ProjectService.create_project(workspace["id"], user_id, "CRM App")
