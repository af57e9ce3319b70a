"""Listing search: fetch every listing, then filter in the application layer.

Filtering happens here rather than as compound store queries. That is fine
at marketplace volumes of a few thousand rows and is the first thing to
move into SQL if the table grows.
"""

from typing import Iterable, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator
from b2y.models.listing import Listing
from b2y.services.supabase_client import SupabaseClient
from b2y.utils.errors import SupabaseError
from b2y.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)


def _split_csv(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


class ListingFilters(BaseModel):
    """Search criteria. Empty sets mean "no restriction"."""
    sectors: frozenset[str] = Field(default_factory=frozenset)
    max_price: Optional[float] = Field(None, ge=0, description="Inclusive price ceiling")
    locations: frozenset[str] = Field(default_factory=frozenset, description="Lowercase substrings")

    @field_validator("locations", mode="before")
    @classmethod
    def lowercase_locations(cls, value):
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(loc.strip().lower() for loc in value if loc and loc.strip())

    @classmethod
    def from_query(cls, params: dict[str, str]) -> "ListingFilters":
        """
        Build filters from the search endpoint's query string.

        setores and localidades are comma-separated; valor_max is a plain
        number. Raises pydantic.ValidationError on a bad valor_max.
        """
        raw_max = (params.get("valor_max") or "").strip()
        return cls(
            sectors=frozenset(_split_csv(params.get("setores"))),
            max_price=raw_max or None,
            locations=_split_csv(params.get("localidades")),
        )

    def is_empty(self) -> bool:
        return self.max_price is None and not self.sectors and not self.locations


def matches(listing: Listing, filters: ListingFilters) -> bool:
    """True when the listing satisfies every active filter."""
    if filters.max_price is not None and listing.price > filters.max_price:
        return False
    if filters.sectors and listing.sector not in filters.sectors:
        return False
    if filters.locations:
        location = listing.location_text().lower()
        if not any(loc in location for loc in filters.locations):
            return False
    return True


def apply_filters(listings: Iterable[Listing], filters: ListingFilters) -> list[Listing]:
    """Filter listings, preserving their input order."""
    return [listing for listing in listings if matches(listing, filters)]


async def fetch_all_listings() -> list[Listing]:
    """Read the whole listings table in store order."""
    async with SupabaseClient() as client:
        try:
            result = client.table("listings").select("*").execute()
            rows = result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to fetch listings: {e}")

    listings = []
    for row in rows:
        try:
            listings.append(Listing(**row))
        except ValidationError as e:
            # One bad row should not take the whole search down
            logger.warning("Skipping invalid listing row", listing_id=row.get("id"), error=str(e))
    return listings


async def search_listings(filters: ListingFilters) -> list[Listing]:
    """Return every listing matching all of the given filters."""
    with log_timing("search_listings", logger=logger):
        listings = await fetch_all_listings()
        results = apply_filters(listings, filters)

    logger.info(
        "Listing search completed",
        sectors=sorted(filters.sectors),
        max_price=filters.max_price,
        locations=sorted(filters.locations),
        total_listings=len(listings),
        matched_listings=len(results)
    )
    return results
