"""User profile persistence."""

from datetime import datetime, timezone
from typing import Optional
from b2y.models.user_profile import UserProfile
from b2y.services.supabase_client import SupabaseClient, first_row
from b2y.utils.errors import SupabaseError
from b2y.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


async def save_user_profile(user_id: str, profile: UserProfile) -> UserProfile:
    """Create or update the profile row for a user."""
    data = profile.model_dump(mode="json", exclude={"user_id", "updated_at"})
    data["user_id"] = user_id
    data["updated_at"] = datetime.now(timezone.utc).isoformat()

    async with SupabaseClient() as client:
        try:
            result = client.table("profiles").upsert(data, on_conflict="user_id").execute()
            row = first_row(result)
        except Exception as e:
            raise SupabaseError(f"Failed to save user profile: {e}")

    logger.info(
        "User profile saved",
        user_id=mask_user_id(user_id),
        profile_type=data.get("profile_type")
    )
    return UserProfile(**(row or data))


async def get_user_profile(user_id: str) -> Optional[UserProfile]:
    async with SupabaseClient() as client:
        try:
            result = client.table("profiles").select("*").eq("user_id", user_id).execute()
            row = first_row(result)
        except Exception as e:
            raise SupabaseError(f"Failed to get user profile: {e}")
    return UserProfile(**row) if row else None
