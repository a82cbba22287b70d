# backend/chatline/services/messaging/__init__.py
"""
Realtime messaging package.

Architecture:
- ConnectionHub keeps live sessions, user bindings and conversation rooms
- Publishers mirror committed mutations to the affected room
- Events share one envelope (type, schema_version, timestamp, payload)
"""

from .events import SCHEMA_VERSION, EventType, build_event
from .hub import ConnectionHub, LiveSession, SessionState
from .publisher import (
    publish_conversation_created,
    publish_conversation_deleted,
    publish_message_created,
    publish_message_deleted,
    publish_message_edited,
    publish_reaction_changed,
    publish_seen_updated,
)

__all__ = [
    # Hub
    "ConnectionHub",
    "LiveSession",
    "SessionState",
    # Publishers
    "publish_conversation_created",
    "publish_conversation_deleted",
    "publish_message_created",
    "publish_message_deleted",
    "publish_message_edited",
    "publish_reaction_changed",
    "publish_seen_updated",
    # Events
    "EventType",
    "SCHEMA_VERSION",
    "build_event",
]
