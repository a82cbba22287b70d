# backend/chatline/services/messaging/events.py
"""
Realtime event type definitions and builders.

All events follow this structure:
{
    "type": str,           # Event type identifier
    "schema_version": int, # Schema version (currently 1)
    "timestamp": str,      # ISO 8601 timestamp
    "payload": dict        # Event-specific data
}
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ...models.conversation import Conversation
from ...models.message import Message


class EventType(str, Enum):
    """Valid realtime event types."""

    CONVERSATION_CREATED = "conversation-created"
    CONVERSATION_DELETED = "conversation-deleted"
    CONVERSATION_SEEN_UPDATED = "conversation-seen-updated"
    MESSAGE_CREATED = "message-created"
    MESSAGE_EDITED = "message-edited"
    MESSAGE_REACTION_CHANGED = "message-reaction-changed"
    MESSAGE_DELETED = "message-deleted"
    USER_ONLINE = "user-online"
    USER_OFFLINE = "user-offline"
    CONNECTED = "connected"


# Current schema version - increment when payload structure changes
SCHEMA_VERSION = 1


def build_event(event_type: EventType, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build a properly structured event.

    Args:
        event_type: The type of event
        payload: Event-specific payload data

    Returns:
        Complete event dict ready for publishing
    """
    return {
        "type": event_type.value,
        "schema_version": SCHEMA_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "payload": payload,
    }


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_message(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "author_id": message.author_id,
        "reply_to_id": message.reply_to_id,
        "content": None if message.is_deleted else message.content,
        "posted_at": _isoformat(message.posted_at),
        "is_edited": bool(message.is_edited),
        "is_deleted": bool(message.is_deleted),
        "reactions": dict(message.reactions or {}),
    }


def build_conversation_created_event(conversation: Conversation) -> Dict[str, Any]:
    return build_event(
        EventType.CONVERSATION_CREATED,
        {
            "conversation": {
                "id": conversation.id,
                "title": conversation.title,
                "created_at": _isoformat(conversation.created_at),
                "last_activity_at": _isoformat(conversation.last_activity_at),
                "participant_ids": list(conversation.participant_ids),
            }
        },
    )


def build_conversation_deleted_event(conversation_id: str, deleted_by: str) -> Dict[str, Any]:
    return build_event(
        EventType.CONVERSATION_DELETED,
        {"conversation_id": conversation_id, "deleted_by": deleted_by},
    )


def build_conversation_seen_updated_event(
    conversation_id: str, user_id: str, message_id: str, seen: Dict[str, str]
) -> Dict[str, Any]:
    """Build a conversation-seen-updated event; ``seen`` is the full pointer map."""
    return build_event(
        EventType.CONVERSATION_SEEN_UPDATED,
        {
            "conversation_id": conversation_id,
            "user_id": user_id,
            "message_id": message_id,
            "seen": dict(seen),
        },
    )


def build_message_created_event(message: Message) -> Dict[str, Any]:
    return build_event(
        EventType.MESSAGE_CREATED,
        {"conversation_id": message.conversation_id, "message": serialize_message(message)},
    )


def build_message_edited_event(message: Message) -> Dict[str, Any]:
    return build_event(
        EventType.MESSAGE_EDITED,
        {
            "conversation_id": message.conversation_id,
            "message_id": message.id,
            "content": None if message.is_deleted else message.content,
            "is_edited": True,
        },
    )


def build_message_reaction_changed_event(
    message: Message, user_id: str, reaction: Optional[str]
) -> Dict[str, Any]:
    """Build a message-reaction-changed event. ``reaction`` None means cleared."""
    return build_event(
        EventType.MESSAGE_REACTION_CHANGED,
        {
            "conversation_id": message.conversation_id,
            "message_id": message.id,
            "user_id": user_id,
            "reaction": reaction,
            "reactions": dict(message.reactions or {}),
        },
    )


def build_message_deleted_event(message: Message, deleted_by: str) -> Dict[str, Any]:
    return build_event(
        EventType.MESSAGE_DELETED,
        {
            "conversation_id": message.conversation_id,
            "message_id": message.id,
            "deleted_by": deleted_by,
        },
    )


def build_user_presence_event(online: bool, user_id: str, username: str) -> Dict[str, Any]:
    return build_event(
        EventType.USER_ONLINE if online else EventType.USER_OFFLINE,
        {"user_id": user_id, "username": username},
    )


def build_connected_event(
    session_id: str, user_id: Optional[str], conversation_ids: List[str]
) -> Dict[str, Any]:
    """
    Build the handshake event sent to a new session.

    ``user_id`` is None when the connection could not be identified.
    """
    return build_event(
        EventType.CONNECTED,
        {
            "session_id": session_id,
            "user_id": user_id,
            "conversation_ids": list(conversation_ids),
        },
    )
