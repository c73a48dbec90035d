# =============================================================================
# core/models/subscription.py - Plan & Usage Schemas
# =============================================================================
# These models define the API contract for subscriptions:
# - SubscriptionPlan: Limits and feature flags of a plan
# - UserSubscription: Which plan a user is on
# - LimitType: The resources a plan limits
# - UsageSummary: Current usage vs. limits, ready for display
#
# A limit of -1 means unlimited, everywhere.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    PAST_DUE = "past_due"
    TRIALING = "trialing"


class LimitType(str, Enum):
    """
    Resources limited by a plan.

    Only projects and bases are gated at creation time; records and storage
    are reported in the usage summary.
    """
    PROJECTS = "projects"
    BASES = "bases"
    RECORDS = "records"
    STORAGE = "storage"

    @property
    def plan_column(self) -> str:
        """Column of subscription_plans holding this limit."""
        return {
            LimitType.PROJECTS: "max_projects",
            LimitType.BASES: "max_bases",
            LimitType.RECORDS: "max_records_per_base",
            LimitType.STORAGE: "max_storage_mb",
        }[self]


# Limit types that block creation
GATED_LIMITS = (LimitType.PROJECTS, LimitType.BASES)


class SubscriptionPlan(BaseModel):
    """
    A subscription plan.

    Example:
        {
            "name": "Free",
            "max_projects": 1,
            "max_bases": 3,
            "max_records_per_base": 1000,
            "max_storage_mb": 100,
            "features": {"exports": true, "ai_builder": true}
        }
    """
    id: UUID
    name: str
    price_monthly: float = 0
    price_yearly: float = 0
    max_projects: int = Field(..., ge=-1)
    max_bases: int = Field(..., ge=-1)
    max_records_per_base: int = Field(..., ge=-1)
    max_storage_mb: int = Field(..., ge=-1)
    features: dict[str, Any] = Field(default_factory=dict)


class UserSubscription(BaseModel):
    """A user's subscription row, with its plan when joined."""
    id: UUID | None = None
    user_id: UUID
    plan_id: UUID
    status: SubscriptionStatus
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    cancel_at_period_end: bool = False
    plan: SubscriptionPlan | None = None


class UsageItem(BaseModel):
    """Usage of one limited resource."""
    current: int = Field(..., ge=0)
    limit: int = Field(..., ge=-1)
    percentage: float = Field(..., ge=0, le=100)
    display: str = Field(..., description='Like "2 / 3" or "2 / Unlimited"')
    level: str = Field(..., description="ok, warning or critical")


class UsageSummary(BaseModel):
    """
    Current usage vs. the active plan's limits.

    `plan` is None when the user has no active subscription; every limit is
    then reported as 0.
    """
    plan: str | None = None
    projects: UsageItem
    bases: UsageItem
    records: UsageItem
    storage: UsageItem
