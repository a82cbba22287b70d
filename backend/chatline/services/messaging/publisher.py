# backend/chatline/services/messaging/publisher.py
"""
High-level publishing functions for realtime events.

Every function here is called after the durable write has been committed.
Publishing is best-effort: failures are logged and never propagate, so a
committed HTTP response is never turned into an error by fan-out.
"""

import logging
from typing import Optional

from ...models.conversation import Conversation
from ...models.message import Message
from ..conversation_service import DeletedConversation
from .events import (
    build_conversation_created_event,
    build_conversation_deleted_event,
    build_conversation_seen_updated_event,
    build_message_created_event,
    build_message_deleted_event,
    build_message_edited_event,
    build_message_reaction_changed_event,
)
from .hub import ConnectionHub

logger = logging.getLogger(__name__)


async def publish_conversation_created(
    hub: ConnectionHub,
    conversation: Conversation,
    exclude_session_id: Optional[str] = None,
) -> None:
    """Join online participants to the new room and emit conversation-created."""
    try:
        delivered = await hub.on_conversation_created(
            conversation.participant_ids,
            conversation.id,
            build_conversation_created_event(conversation),
            exclude_session_id=exclude_session_id,
        )
        logger.debug(
            f"[PUBLISH] conversation-created for {conversation.id} reached {delivered} sessions"
        )
    except Exception as e:
        # Fire-and-forget: log but don't fail the request
        logger.error(
            "[PUBLISH] Failed to publish conversation-created",
            extra={"error": str(e), "conversation_id": conversation.id},
        )


async def publish_conversation_deleted(
    hub: ConnectionHub,
    deleted: DeletedConversation,
    deleted_by: str,
    exclude_session_id: Optional[str] = None,
) -> None:
    """Emit conversation-deleted to the room, then close the room."""
    try:
        await hub.notify(
            deleted.conversation_id,
            build_conversation_deleted_event(deleted.conversation_id, deleted_by),
            exclude_session_id=exclude_session_id,
        )
    except Exception as e:
        logger.error(
            "[PUBLISH] Failed to publish conversation-deleted",
            extra={"error": str(e), "conversation_id": deleted.conversation_id},
        )
    finally:
        hub.close_room(deleted.conversation_id)


async def publish_seen_updated(
    hub: ConnectionHub,
    conversation: Conversation,
    user_id: str,
    message_id: str,
    exclude_session_id: Optional[str] = None,
) -> None:
    try:
        await hub.notify(
            conversation.id,
            build_conversation_seen_updated_event(
                conversation.id, user_id, message_id, conversation.seen or {}
            ),
            exclude_session_id=exclude_session_id,
        )
    except Exception as e:
        logger.error(
            "[PUBLISH] Failed to publish conversation-seen-updated",
            extra={"error": str(e), "conversation_id": conversation.id},
        )


async def publish_message_created(
    hub: ConnectionHub, message: Message, exclude_session_id: Optional[str] = None
) -> None:
    try:
        await hub.notify(
            message.conversation_id,
            build_message_created_event(message),
            exclude_session_id=exclude_session_id,
        )
    except Exception as e:
        logger.error(
            "[PUBLISH] Failed to publish message-created",
            extra={"error": str(e), "message_id": message.id},
        )


async def publish_message_edited(
    hub: ConnectionHub, message: Message, exclude_session_id: Optional[str] = None
) -> None:
    try:
        await hub.notify(
            message.conversation_id,
            build_message_edited_event(message),
            exclude_session_id=exclude_session_id,
        )
    except Exception as e:
        logger.error(
            "[PUBLISH] Failed to publish message-edited",
            extra={"error": str(e), "message_id": message.id},
        )


async def publish_reaction_changed(
    hub: ConnectionHub,
    message: Message,
    user_id: str,
    reaction: Optional[str],
    exclude_session_id: Optional[str] = None,
) -> None:
    try:
        await hub.notify(
            message.conversation_id,
            build_message_reaction_changed_event(message, user_id, reaction),
            exclude_session_id=exclude_session_id,
        )
    except Exception as e:
        logger.error(
            "[PUBLISH] Failed to publish message-reaction-changed",
            extra={"error": str(e), "message_id": message.id},
        )


async def publish_message_deleted(
    hub: ConnectionHub,
    message: Message,
    deleted_by: str,
    exclude_session_id: Optional[str] = None,
) -> None:
    try:
        await hub.notify(
            message.conversation_id,
            build_message_deleted_event(message, deleted_by),
            exclude_session_id=exclude_session_id,
        )
    except Exception as e:
        logger.error(
            "[PUBLISH] Failed to publish message-deleted",
            extra={"error": str(e), "message_id": message.id},
        )
