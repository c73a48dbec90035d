# =============================================================================
# core/services/subscription_service.py - Plans, Usage and the Limit Gate
# =============================================================================
# Reads the user's active plan and current counts, and decides whether a
# new project or base may be created.
#
# Two checks exist:
# - can_create_resource(): counts here, compares with core.limits.can_create
# - check_limit(): asks the database's check_user_subscription_limit()
# ensure_can_create() wraps the first and raises PlanLimitExceededError;
# both accept only the gated types (projects, bases).
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from app.exceptions import PlanLimitExceededError
from core.limits import can_create, format_usage, usage_level, usage_percentage
from core.models.project import ProjectStatus
from core.models.subscription import GATED_LIMITS, LimitType, SubscriptionStatus

logger = logging.getLogger(__name__)


class SubscriptionService:
    """
    Service for subscription plans and usage limits.
    """

    # -------------------------------------------------------------------------
    # Plans & Subscriptions
    # -------------------------------------------------------------------------

    @staticmethod
    def list_plans() -> list[dict[str, Any]]:
        """All plans, cheapest first."""
        return SupabaseClient.fetch_rows("subscription_plans", order_by="price_monthly")

    @staticmethod
    def get_subscription(user_id: str | UUID) -> dict[str, Any] | None:
        """
        The user's most recent subscription (any status), with its plan.

        Returns:
            Subscription dict with a "plan" key, or None
        """
        rows = SupabaseClient.fetch_rows(
            "user_subscriptions",
            {"user_id": str(user_id)},
            order_by="created_at",
            desc=True,
            limit=1,
        )
        if not rows:
            return None

        subscription = rows[0]
        plan = SupabaseClient.fetch_row("subscription_plans", subscription["plan_id"])
        return {**subscription, "plan": plan}

    @staticmethod
    def get_active_plan(user_id: str | UUID) -> dict[str, Any] | None:
        """
        The plan of the user's active subscription.

        Cancelled, past-due and trialing subscriptions don't count.

        Returns:
            Plan dict, or None when there's no active subscription
        """
        rows = SupabaseClient.fetch_rows(
            "user_subscriptions",
            {"user_id": str(user_id), "status": SubscriptionStatus.ACTIVE.value},
            columns="plan_id",
            limit=1,
        )
        if not rows:
            return None
        return SupabaseClient.fetch_row("subscription_plans", rows[0]["plan_id"])

    # -------------------------------------------------------------------------
    # Counts
    # -------------------------------------------------------------------------

    @staticmethod
    def count_projects(user_id: str | UUID) -> int:
        """The user's projects that aren't archived."""
        return SupabaseClient.count_rows(
            "projects",
            {"user_id": str(user_id)},
            neq={"status": ProjectStatus.ARCHIVED.value},
        )

    @staticmethod
    def count_bases(user_id: str | UUID) -> int:
        """Bases in workspaces the user owns."""
        owned = SupabaseClient.fetch_rows(
            "workspaces",
            {"owner_id": str(user_id)},
            columns="id",
        )
        return SupabaseClient.count_rows(
            "bases",
            in_filters={"workspace_id": [w["id"] for w in owned]},
        )

    @staticmethod
    def count_records(user_id: str | UUID) -> int:
        """Records created by the user."""
        return SupabaseClient.count_rows("records", {"created_by": str(user_id)})

    @staticmethod
    def current_count(user_id: str | UUID, limit_type: LimitType) -> int:
        if limit_type == LimitType.PROJECTS:
            return SubscriptionService.count_projects(user_id)
        if limit_type == LimitType.BASES:
            return SubscriptionService.count_bases(user_id)
        if limit_type == LimitType.RECORDS:
            return SubscriptionService.count_records(user_id)
        # Storage isn't metered yet
        return 0

    # -------------------------------------------------------------------------
    # Gate
    # -------------------------------------------------------------------------

    @staticmethod
    def can_create_resource(user_id: str | UUID, limit_type: LimitType) -> bool:
        """
        Whether the user may create one more resource of this type.

        No active plan -> False.

        Raises:
            ValueError: If the limit type doesn't gate creation
        """
        if limit_type not in GATED_LIMITS:
            raise ValueError(f"{limit_type.value} is not a creation limit")
        plan = SubscriptionService.get_active_plan(user_id)
        if not plan:
            return False
        current = SubscriptionService.current_count(user_id, limit_type)
        return can_create(plan[limit_type.plan_column], current)

    @staticmethod
    def ensure_can_create(user_id: str | UUID, limit_type: LimitType) -> None:
        """
        Raise when the plan doesn't allow another resource.

        Raises:
            PlanLimitExceededError: If can_create_resource() says no
        """
        if SubscriptionService.can_create_resource(user_id, limit_type):
            return

        plan = SubscriptionService.get_active_plan(user_id)
        limit = plan[limit_type.plan_column] if plan else 0
        current = SubscriptionService.current_count(user_id, limit_type)
        logger.warning(
            f"User {user_id} blocked creating {limit_type.value}: {current}/{limit}"
        )
        raise PlanLimitExceededError(limit_type.value, current=current, limit=limit)

    @staticmethod
    def check_limit(user_id: str | UUID, limit_type: LimitType) -> bool:
        """
        Ask the database's authoritative check_user_subscription_limit().

        Raises:
            ValueError: If the limit type doesn't gate creation
        """
        if limit_type not in GATED_LIMITS:
            raise ValueError(f"{limit_type.value} is not a creation limit")
        result = SupabaseClient.call_rpc(
            "check_user_subscription_limit",
            {"p_user_id": str(user_id), "p_limit_type": limit_type.value},
        )
        return result is True

    # -------------------------------------------------------------------------
    # Usage & Features
    # -------------------------------------------------------------------------

    @staticmethod
    def get_usage_summary(user_id: str | UUID) -> dict[str, Any]:
        """
        Plan name plus current/limit/percentage/display per limited resource.
        """
        plan = SubscriptionService.get_active_plan(user_id)
        summary: dict[str, Any] = {"plan": plan["name"] if plan else None}

        for limit_type in LimitType:
            current = SubscriptionService.current_count(user_id, limit_type)
            limit = plan[limit_type.plan_column] if plan else 0
            percentage = usage_percentage(current, limit)
            summary[limit_type.value] = {
                "current": current,
                "limit": limit,
                "percentage": round(percentage, 1),
                "display": format_usage(current, limit),
                "level": usage_level(percentage),
            }

        return summary

    @staticmethod
    def has_feature(user_id: str | UUID, flag: str) -> bool:
        """Whether the active plan turns a feature flag on."""
        plan = SubscriptionService.get_active_plan(user_id)
        if not plan:
            return False
        return (plan.get("features") or {}).get(flag) is True
