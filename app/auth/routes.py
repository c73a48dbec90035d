# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Sign-up and login happen client-side with Supabase Auth. These routes
# report who the token belongs to.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, ProfileResponse
from core.services.subscription_service import SubscriptionService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me", response_model=ProfileResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> ProfileResponse:
    """
    Get the current user's profile and active plan.

    Users whose profile row hasn't been created yet get the token's data.
    """
    profile = SupabaseClient.fetch_row("profiles", user.id)
    plan = SubscriptionService.get_active_plan(user.id)
    plan_name = plan["name"] if plan else None

    if profile:
        return ProfileResponse(**{**profile, "plan": plan_name})

    logger.debug(f"No profile row yet for user {user.id}")
    return ProfileResponse(id=user.id, email=user.email, plan=plan_name)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email,
    }
