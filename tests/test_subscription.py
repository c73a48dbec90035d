# =============================================================================
# tests/test_subscription.py - Plans, Usage & Limit Gate Tests
# =============================================================================

import pytest

from app.exceptions import PlanLimitExceededError
from core.models.subscription import LimitType
from core.services.base_service import BaseService
from core.services.record_service import RecordService
from core.services.subscription_service import SubscriptionService


class TestPlans:
    """Tests for plan and subscription lookups."""

    def test_plans_cheapest_first(self, db, make_plan, user_id, other_user_id):
        make_plan(user_id, name="Pro", price_monthly=20)
        make_plan(other_user_id, name="Free", price_monthly=0)

        assert [p["name"] for p in SubscriptionService.list_plans()] == ["Free", "Pro"]

    def test_active_plan_ignores_cancelled(self, db, make_plan, user_id):
        make_plan(user_id, status="cancelled")
        assert SubscriptionService.get_active_plan(user_id) is None

    def test_get_subscription_includes_plan(self, db, make_plan, user_id):
        plan = make_plan(user_id, status="past_due")

        subscription = SubscriptionService.get_subscription(user_id)

        assert subscription["status"] == "past_due"
        assert subscription["plan"]["id"] == plan["id"]

    def test_no_subscription(self, db, user_id):
        assert SubscriptionService.get_subscription(user_id) is None


class TestGate:
    """Tests for the creation gate."""

    def test_no_plan_means_no(self, db, user_id):
        assert SubscriptionService.can_create_resource(user_id, LimitType.BASES) is False

    def test_limit_reached(self, db, user_id, workspace, make_plan):
        make_plan(user_id, max_bases=2)
        BaseService.create_base(workspace["id"], user_id, "A")
        assert SubscriptionService.can_create_resource(user_id, LimitType.BASES) is True

        BaseService.create_base(workspace["id"], user_id, "B")
        assert SubscriptionService.can_create_resource(user_id, LimitType.BASES) is False

    def test_unlimited(self, db, user_id, workspace, make_plan):
        make_plan(user_id, max_bases=-1)
        for n in range(5):
            BaseService.create_base(workspace["id"], user_id, f"Base {n}")
        assert SubscriptionService.can_create_resource(user_id, LimitType.BASES) is True

    def test_bases_in_shared_workspaces_dont_count(
        self, db, user_id, other_user_id, workspace, add_member, make_plan
    ):
        add_member(workspace["id"], other_user_id, "editor")
        make_plan(other_user_id)
        BaseService.create_base(workspace["id"], other_user_id, "Theirs")

        assert SubscriptionService.count_bases(user_id) == 1
        assert SubscriptionService.count_bases(other_user_id) == 0

    def test_ensure_can_create_raises(self, db, user_id, make_plan):
        make_plan(user_id, max_projects=0)
        with pytest.raises(PlanLimitExceededError):
            SubscriptionService.ensure_can_create(user_id, LimitType.PROJECTS)

    def test_ensure_can_create_follows_can_create_resource(self, db, user_id, monkeypatch):
        calls = []

        def allow(uid, limit_type):
            calls.append(limit_type)
            return True

        monkeypatch.setattr(SubscriptionService, "can_create_resource", staticmethod(allow))

        # No plan at all, but the gate says yes
        SubscriptionService.ensure_can_create(user_id, LimitType.BASES)
        assert calls == [LimitType.BASES]

    @pytest.mark.parametrize("limit_type", [LimitType.RECORDS, LimitType.STORAGE])
    def test_only_projects_and_bases_are_gated(self, db, user_id, make_plan, limit_type):
        make_plan(user_id)
        with pytest.raises(ValueError):
            SubscriptionService.can_create_resource(user_id, limit_type)
        with pytest.raises(ValueError):
            SubscriptionService.check_limit(user_id, limit_type)
        assert db.rpc_calls == []

    def test_check_limit_asks_database(self, db, user_id):
        db.rpc_results["check_user_subscription_limit"] = True

        assert SubscriptionService.check_limit(user_id, LimitType.BASES) is True
        assert db.rpc_calls == [
            ("check_user_subscription_limit", {"p_user_id": user_id, "p_limit_type": "bases"})
        ]

    def test_check_limit_non_true_is_false(self, db, user_id):
        db.rpc_results["check_user_subscription_limit"] = None
        assert SubscriptionService.check_limit(user_id, LimitType.PROJECTS) is False


class TestUsageSummary:
    """Tests for get_usage_summary."""

    def test_summary(self, db, user_id, table):
        RecordService.add_record(table["id"], user_id)
        summary = SubscriptionService.get_usage_summary(user_id)

        assert summary["plan"] == "Pro"
        assert summary["bases"] == {
            "current": 1,
            "limit": -1,
            "percentage": 0.0,
            "display": "1 / Unlimited",
            "level": "ok",
        }
        assert summary["records"]["current"] == 1
        assert summary["storage"]["current"] == 0

    def test_levels(self, db, user_id, workspace, make_plan):
        make_plan(user_id, name="Free", max_bases=4, max_projects=10)
        for n in range(3):
            BaseService.create_base(workspace["id"], user_id, f"Base {n}")

        summary = SubscriptionService.get_usage_summary(user_id)

        assert summary["bases"]["percentage"] == 75.0
        assert summary["bases"]["level"] == "warning"
        assert summary["bases"]["display"] == "3 / 4"
        assert summary["projects"]["level"] == "ok"

    def test_without_plan(self, db, user_id):
        summary = SubscriptionService.get_usage_summary(user_id)

        assert summary["plan"] is None
        assert summary["projects"]["limit"] == 0
        assert summary["projects"]["level"] == "critical"


def test_has_feature(db, user_id, other_user_id, make_plan):
    make_plan(user_id, features={"exports": True})
    make_plan(other_user_id, features={"exports": "yes"})

    assert SubscriptionService.has_feature(user_id, "exports") is True
    assert SubscriptionService.has_feature(other_user_id, "exports") is False
    assert SubscriptionService.has_feature(user_id, "api_access") is False
