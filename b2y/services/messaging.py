"""Conversation and message data access, including live message subscriptions."""

import asyncio
import inspect
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Union
from supabase import AsyncClient
from b2y.models.conversation import (
    Conversation,
    EnrichedConversation,
    ListingRef,
    Message,
    Participant,
)
from b2y.services.supabase_client import SupabaseClient, first_row, get_realtime_client
from b2y.utils.errors import SupabaseError
from b2y.utils.logging import (
    get_structured_logger,
    mask_user_id,
    sanitize_message_text,
    timed,
)

logger = get_structured_logger(__name__)

MISSING_LISTING_TITLE = "Listing not found"

SnapshotCallback = Callable[[list[Message]], Union[None, Awaitable[None]]]
ErrorCallback = Callable[[Exception], Any]


def conversation_id_for(listing_id: str, owner_id: str, buyer_id: str) -> str:
    """
    Canonical conversation ID for a listing and a pair of users.

    The smaller user ID always comes first, so both participants resolve
    the same ID no matter who starts the conversation.
    """
    if owner_id > buyer_id:
        return f"{listing_id}_{buyer_id}_{owner_id}"
    return f"{listing_id}_{owner_id}_{buyer_id}"


async def get_conversation(conversation_id: str) -> Optional[Conversation]:
    async with SupabaseClient() as client:
        try:
            result = client.table("conversations").select("*").eq("id", conversation_id).execute()
            row = first_row(result)
        except Exception as e:
            raise SupabaseError(f"Failed to get conversation: {e}")
    return Conversation(**row) if row else None


async def get_or_create_conversation(listing_id: str, owner_id: str, buyer_id: str) -> str:
    """Return the conversation ID for this pair, creating the record on first contact."""
    conversation_id = conversation_id_for(listing_id, owner_id, buyer_id)

    async with SupabaseClient() as client:
        try:
            result = client.table("conversations").select("id").eq("id", conversation_id).execute()
            if result.data and len(result.data) > 0:
                return conversation_id

            now = datetime.now(timezone.utc).isoformat()
            client.table("conversations").insert({
                "id": conversation_id,
                "listing_id": listing_id,
                "participant_ids": [owner_id, buyer_id],
                "last_message": "",
                "last_message_at": now,
                "created_at": now,
            }).execute()
        except Exception as e:
            # The other participant created it between our read and insert
            if "duplicate key" in str(e).lower():
                return conversation_id
            raise SupabaseError(f"Failed to get or create conversation: {e}")

    logger.info(
        "Conversation created",
        conversation_id=conversation_id,
        listing_id=listing_id,
        owner_id=mask_user_id(owner_id),
        buyer_id=mask_user_id(buyer_id)
    )
    return conversation_id


async def send_message(conversation_id: str, sender_id: str, text: str) -> Optional[Message]:
    """
    Append a message and refresh the conversation's last-message fields.

    Blank text is ignored and returns None, as does a conversation that
    does not exist. This is the only code path that writes last_message /
    last_message_at.
    """
    if not text or not text.strip():
        return None

    async with SupabaseClient() as client:
        try:
            existing = client.table("conversations").select("id").eq("id", conversation_id).execute()
            if not existing.data:
                logger.warning("Message for unknown conversation dropped", conversation_id=conversation_id)
                return None

            result = client.table("messages").insert({
                "conversation_id": conversation_id,
                "sender_id": sender_id,
                "text": text,
            }).execute()
            row = first_row(result)
            if row is None:
                raise SupabaseError("Failed to send message: no data returned")

            # created_at comes from the database default
            sent_at = row.get("created_at") or datetime.now(timezone.utc).isoformat()
            client.table("conversations").update({
                "last_message": text,
                "last_message_at": sent_at,
            }).eq("id", conversation_id).execute()
        except SupabaseError:
            raise
        except Exception as e:
            raise SupabaseError(f"Failed to send message: {e}")

    logger.info(
        "Message sent",
        conversation_id=conversation_id,
        sender_id=mask_user_id(sender_id),
        message_preview=sanitize_message_text(text, max_length=100)
    )
    return Message(**row)


async def list_messages(conversation_id: str) -> list[Message]:
    """All messages of a conversation, oldest first."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table("messages")
                .select("*")
                .eq("conversation_id", conversation_id)
                .order("created_at")
                .order("id")
                .execute()
            )
        except Exception as e:
            raise SupabaseError(f"Failed to list messages: {e}")
    return [Message(**row) for row in (result.data or [])]


async def get_user_conversations(user_id: str) -> list[Conversation]:
    """Conversations the user takes part in, most recently active first."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table("conversations")
                .select("*")
                .contains("participant_ids", [user_id])
                .order("last_message_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise SupabaseError(f"Failed to get conversations: {e}")
    return [Conversation(**row) for row in (result.data or [])]


async def _enrich(conversation: Conversation, user_id: str) -> EnrichedConversation:
    other_id = next((pid for pid in conversation.participant_ids if pid != user_id), None)

    async with SupabaseClient() as client:
        try:
            listing_row = first_row(
                client.table("listings").select("id, title, image_url").eq("id", conversation.listing_id).execute()
            )
            profile_row = None
            if other_id:
                profile_row = first_row(
                    client.table("profiles").select("user_id, name").eq("user_id", other_id).execute()
                )
        except Exception as e:
            raise SupabaseError(f"Failed to enrich conversation: {e}")

    if listing_row:
        listing = ListingRef(
            id=conversation.listing_id,
            title=listing_row.get("title") or "",
            image_url=listing_row.get("image_url"),
        )
    else:
        listing = ListingRef(id=conversation.listing_id, title=MISSING_LISTING_TITLE, image_url="")

    if other_id is None:
        other = Participant(id=None, name="Removed user")
    elif profile_row and profile_row.get("name"):
        other = Participant(id=other_id, name=profile_row["name"])
    else:
        other = Participant(id=other_id, name=f"User {other_id[:5]}")

    return EnrichedConversation(
        id=conversation.id,
        listing=listing,
        other_participant=other,
        last_message=conversation.last_message,
        last_message_at=conversation.last_message_at,
    )


@timed("get_enriched_user_conversations", logger=logger)
async def get_enriched_user_conversations(user_id: str) -> list[EnrichedConversation]:
    """Inbox rows with listing title/image and the other participant's name."""
    conversations = await get_user_conversations(user_id)
    return list(await asyncio.gather(*(_enrich(c, user_id) for c in conversations)))


class MessageSubscription:
    """
    Live, ordered view of a conversation's messages.

    Every change to the conversation's messages re-reads the full ordered
    snapshot and hands it to on_snapshot. The Realtime channel stays open
    until unsubscribe() is called, so hold the handle for as long as the
    view is open and release it on teardown (or use ``async with``).
    """

    def __init__(
        self,
        conversation_id: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
        realtime_client: Optional[AsyncClient] = None,
    ):
        self.conversation_id = conversation_id
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._client = realtime_client
        self._channel: Any = None
        self._active = False
        self._pending: set[asyncio.Task] = set()

    @property
    def active(self) -> bool:
        return self._active

    async def start(self) -> "MessageSubscription":
        """
        Open the channel and deliver the first snapshot.

        If the first delivery fails and there is no on_error to take the
        error, the channel is closed again and the error is raised.
        """
        if self._active:
            return self
        if self._client is None:
            self._client = await get_realtime_client()

        channel = self._client.channel(f"messages:{self.conversation_id}")
        channel.on_postgres_changes(
            "*",
            schema="public",
            table="messages",
            filter=f"conversation_id=eq.{self.conversation_id}",
            callback=self._on_change,
        )
        await channel.subscribe()
        self._channel = channel
        self._active = True
        logger.info("Message subscription opened", conversation_id=self.conversation_id)

        try:
            await self.refresh(raise_unhandled=True)
        except BaseException:
            await self.unsubscribe()
            raise
        return self

    def _on_change(self, payload: Any) -> None:
        if not self._active:
            return
        task = asyncio.ensure_future(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "Message error callback failed",
                conversation_id=self.conversation_id,
                error=str(error)
            )

    async def refresh(self, raise_unhandled: bool = False) -> None:
        """
        Read the current snapshot and deliver it if still subscribed.

        Store and callback errors go to on_error. Without one they are
        logged, or raised when raise_unhandled is set.
        """
        if not self._active:
            return
        try:
            messages = await list_messages(self.conversation_id)
            # unsubscribe() may have run while the read was in flight
            if not self._active:
                return
            result = self._on_snapshot(messages)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(
                "Failed to deliver message snapshot",
                conversation_id=self.conversation_id,
                error=str(e)
            )
            if self._on_error is None:
                if raise_unhandled:
                    raise
                return
            result = self._on_error(e)
            if inspect.isawaitable(result):
                await result

    async def unsubscribe(self) -> None:
        """Close the Realtime channel. Safe to call more than once."""
        self._active = False
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()

        if self._channel is not None:
            channel, self._channel = self._channel, None
            await self._client.remove_channel(channel)
            logger.info("Message subscription closed", conversation_id=self.conversation_id)

    async def __aenter__(self) -> "MessageSubscription":
        return await self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.unsubscribe()
        return False


async def subscribe_messages(
    conversation_id: str,
    on_snapshot: SnapshotCallback,
    on_error: Optional[ErrorCallback] = None,
    realtime_client: Optional[AsyncClient] = None,
) -> MessageSubscription:
    """Open a live message subscription. The caller must unsubscribe() it."""
    subscription = MessageSubscription(conversation_id, on_snapshot, on_error, realtime_client)
    return await subscription.start()
