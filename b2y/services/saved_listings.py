"""Saved listings: per-user bookmarks keyed by (user_id, listing_id)."""

from datetime import datetime, timezone
from b2y.models.saved_listing import SavedListing
from b2y.services.supabase_client import SupabaseClient
from b2y.utils.errors import SupabaseError
from b2y.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


async def save_listing(user_id: str, listing_id: str, title: str) -> None:
    """Bookmark a listing. Saving twice just refreshes the bookmark."""
    async with SupabaseClient() as client:
        try:
            client.table("saved_listings").upsert(
                {
                    "user_id": user_id,
                    "listing_id": listing_id,
                    "title": title,
                    "saved_at": datetime.now(timezone.utc).isoformat(),
                },
                on_conflict="user_id,listing_id",
            ).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to save listing: {e}")

    logger.info("Listing saved", user_id=mask_user_id(user_id), listing_id=listing_id)


async def remove_saved_listing(user_id: str, listing_id: str) -> None:
    """Remove a bookmark. The listing itself is untouched."""
    async with SupabaseClient() as client:
        try:
            (
                client.table("saved_listings")
                .delete()
                .eq("user_id", user_id)
                .eq("listing_id", listing_id)
                .execute()
            )
        except Exception as e:
            raise SupabaseError(f"Failed to remove saved listing: {e}")

    logger.info("Saved listing removed", user_id=mask_user_id(user_id), listing_id=listing_id)


async def is_listing_saved(user_id: str, listing_id: str) -> bool:
    async with SupabaseClient() as client:
        try:
            result = (
                client.table("saved_listings")
                .select("listing_id")
                .eq("user_id", user_id)
                .eq("listing_id", listing_id)
                .execute()
            )
        except Exception as e:
            raise SupabaseError(f"Failed to check saved listing: {e}")
    return bool(result.data)


async def get_user_saved_listings(user_id: str) -> list[SavedListing]:
    """A user's bookmarks, most recently saved first."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table("saved_listings")
                .select("*")
                .eq("user_id", user_id)
                .order("saved_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise SupabaseError(f"Failed to get saved listings: {e}")
    return [SavedListing(**row) for row in (result.data or [])]
