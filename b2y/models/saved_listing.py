"""Saved listing model."""

from typing import Optional
from pydantic import BaseModel, Field


class SavedListing(BaseModel):
    """A user's bookmark of a listing. (user_id, listing_id) is the key."""
    user_id: str
    listing_id: str
    title: str = Field("", description="Listing title at save time")
    saved_at: Optional[str] = None
