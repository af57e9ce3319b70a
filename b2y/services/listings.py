"""Listing repository: create, read, update, delete, image upload."""

import time
from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import ValidationError
from b2y.models.listing import Listing, ListingDraft, MonthlyCosts
from b2y.models.session import Session
from b2y.services.session import require_owner
from b2y.services.supabase_client import SupabaseClient, first_row
from b2y.utils.config import AppConfig
from b2y.utils.errors import SupabaseError
from b2y.utils.formatters import parse_br_number, parse_percentage
from b2y.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)

# Fields an owner may change through update_listing
EDITABLE_FIELDS = {
    "listing_type", "title", "sector", "location", "price", "description",
    "image_url", "gallery", "annual_revenue", "profit_margin", "employees",
    "monthly_costs",
}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_listing_draft(draft: ListingDraft) -> dict:
    """
    Normalize a publish form into storable listing fields.

    Money fields are pt-BR strings, profit margin is a percent, and the
    structured address is flattened into one location string. Raises
    ValueError when a number cannot be parsed and pydantic's
    ValidationError when a value breaks a listing invariant.
    """
    employees = str(draft.employees).strip()
    fields = {
        "listing_type": draft.listing_type.value,
        "title": draft.title.strip(),
        "sector": draft.sector,
        "location": draft.location.to_text(),
        "price": parse_br_number(draft.price),
        "description": draft.description,
        "image_url": draft.image_url,
        "gallery": list(draft.gallery),
        "annual_revenue": parse_br_number(draft.annual_revenue),
        "profit_margin": parse_percentage(draft.profit_margin),
        "employees": int(employees) if employees else 0,
        "monthly_costs": MonthlyCosts(
            rent=parse_br_number(draft.monthly_costs.rent),
            utilities=parse_br_number(draft.monthly_costs.utilities),
            payroll=parse_br_number(draft.monthly_costs.payroll),
            others=parse_br_number(draft.monthly_costs.others),
        ).model_dump(),
    }

    # Run the listing invariants before anything reaches the store
    Listing(**fields)
    return fields


async def create_listing(session: Session, draft: ListingDraft) -> str:
    """Publish a listing owned by the session user. Returns the new ID."""
    fields = parse_listing_draft(draft)
    now = utc_now_iso()
    fields.update({"owner_id": session.user_id, "created_at": now, "updated_at": now})

    async with SupabaseClient() as client:
        try:
            result = client.table("listings").insert(fields).execute()
            row = first_row(result)
            if row is None:
                raise SupabaseError("Failed to create listing: no data returned")
        except SupabaseError:
            raise
        except Exception as e:
            raise SupabaseError(f"Failed to create listing: {e}")

    logger.info(
        "Listing created",
        listing_id=row["id"],
        owner_id=mask_user_id(session.user_id),
        sector=fields["sector"]
    )
    return row["id"]


async def get_listing(listing_id: str) -> Optional[Listing]:
    """Get a listing by ID, or None when it does not exist."""
    async with SupabaseClient() as client:
        try:
            result = client.table("listings").select("*").eq("id", listing_id).execute()
            row = first_row(result)
        except Exception as e:
            raise SupabaseError(f"Failed to get listing: {e}")
    return Listing(**row) if row else None


async def get_user_created_listings(user_id: str) -> list[Listing]:
    """Listings owned by a user, newest first."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table("listings")
                .select("*")
                .eq("owner_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise SupabaseError(f"Failed to get user listings: {e}")
    return [Listing(**row) for row in (result.data or [])]


def _clean_updates(updates: dict[str, Any]) -> dict[str, Any]:
    unknown = set(updates) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
    return dict(updates)


async def update_listing(session: Session, listing_id: str, updates: dict[str, Any]) -> Optional[Listing]:
    """
    Apply an owner's edits to a listing.

    Returns the updated listing, or None when the listing does not exist.
    Raises AuthorizationError when the session user is not the owner.
    """
    changes = _clean_updates(updates)
    existing = await get_listing(listing_id)
    if existing is None:
        return None
    require_owner(session, existing.owner_id)

    # Validate the merged record and write the normalized values
    merged = existing.model_dump()
    merged.update(changes)
    try:
        validated = Listing(**merged)
    except ValidationError:
        logger.warning("Rejected invalid listing update", listing_id=listing_id, fields=sorted(changes))
        raise

    changes = validated.model_dump(mode="json", include=set(changes))
    changes["updated_at"] = utc_now_iso()
    async with SupabaseClient() as client:
        try:
            result = client.table("listings").update(changes).eq("id", listing_id).execute()
            row = first_row(result)
            if row is None:
                raise SupabaseError(f"Failed to update listing: {listing_id}")
        except SupabaseError:
            raise
        except Exception as e:
            raise SupabaseError(f"Failed to update listing: {e}")

    logger.info("Listing updated", listing_id=listing_id, fields=sorted(changes))
    return Listing(**row)


async def delete_listing(session: Session, listing_id: str) -> bool:
    """
    Delete an owner's listing and every saved-listing row pointing at it.

    Conversations about the listing are kept; inbox views render them with
    a placeholder title. Returns False when the listing did not exist.
    """
    existing = await get_listing(listing_id)
    if existing is None:
        return False
    require_owner(session, existing.owner_id)

    async with SupabaseClient() as client:
        try:
            client.table("saved_listings").delete().eq("listing_id", listing_id).execute()
            client.table("listings").delete().eq("id", listing_id).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to delete listing: {e}")

    logger.info("Listing deleted", listing_id=listing_id, owner_id=mask_user_id(session.user_id))
    return True


def image_storage_path(owner_id: str, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """Object key for a listing image: listings/{owner}/{timestamp}_{filename}."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    safe_name = filename.replace("/", "_").replace("\\", "_")
    return f"listings/{owner_id}/{timestamp_ms}_{safe_name}"


async def upload_listing_image(
    session: Session,
    filename: str,
    content: bytes,
    content_type: str = "image/jpeg"
) -> str:
    """Upload an image for the session user's listing and return its public URL."""
    path = image_storage_path(session.user_id, filename)
    bucket_name = AppConfig.images_bucket()

    async with SupabaseClient() as client:
        try:
            bucket = client.storage.from_(bucket_name)
            bucket.upload(path, content, {"content-type": content_type})
            url = bucket.get_public_url(path)
        except Exception as e:
            raise SupabaseError(f"Failed to upload listing image: {e}")

    logger.info("Listing image uploaded", bucket=bucket_name, path=path, size_bytes=len(content))
    return url
