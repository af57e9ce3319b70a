"""Conversation and message models."""

from typing import Optional
from pydantic import BaseModel, Field


class Conversation(BaseModel):
    """A messaging thread for one listing between two users."""
    id: str = Field(..., description="Canonical conversation ID")
    listing_id: str
    participant_ids: list[str] = Field(default_factory=list, description="[owner_id, buyer_id] as created")
    last_message: str = Field("", description="Copy of the newest message text")
    last_message_at: Optional[str] = None
    created_at: Optional[str] = None


class Message(BaseModel):
    """A single chat message. Ordered by created_at ascending."""
    id: Optional[str] = None
    conversation_id: str
    sender_id: str
    text: str
    created_at: Optional[str] = Field(None, description="Server-assigned send time")


class ListingRef(BaseModel):
    id: Optional[str] = None
    title: str
    image_url: Optional[str] = None


class Participant(BaseModel):
    id: Optional[str] = None
    name: str


class EnrichedConversation(BaseModel):
    """Inbox row: conversation joined with its listing and the other participant."""
    id: str
    listing: ListingRef
    other_participant: Participant
    last_message: str = ""
    last_message_at: Optional[str] = None
