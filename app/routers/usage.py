# =============================================================================
# app/routers/usage.py - Plans, Subscription and Usage Endpoints
# =============================================================================
# Read-only view of the plan catalogue and where the user stands against
# their plan's limits. A limit of -1 means unlimited.
# =============================================================================

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Path

from app.dependencies import CurrentUser
from core.models.subscription import LimitType, UsageSummary
from core.services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/plans")
async def list_plans():
    """List subscription plans, cheapest first. No login needed."""
    plans = SubscriptionService.list_plans()
    return {"plans": plans, "count": len(plans)}


@router.get("/subscription")
async def get_subscription(user: CurrentUser):
    """
    The user's most recent subscription with its plan.

    Returns {"subscription": null} when the user never subscribed.
    """
    return {"subscription": SubscriptionService.get_subscription(user.id)}


@router.get("/usage", response_model=UsageSummary)
async def get_usage(user: CurrentUser):
    """
    Usage against each plan limit.

    Levels: ok below 70%, warning from 70%, critical from 90%.
    """
    return SubscriptionService.get_usage_summary(user.id)


@router.get("/usage/check/{limit_type}")
async def check_limit(
    limit_type: Annotated[Literal["projects", "bases"], Path(description="projects or bases")],
    user: CurrentUser,
):
    """
    Ask the database whether the user may create one more project or base.

    Records and storage are reported by /usage but never gate creation.
    """
    allowed = SubscriptionService.check_limit(user.id, LimitType(limit_type))
    return {"limit_type": limit_type, "allowed": allowed}
