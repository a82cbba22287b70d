# backend/chatline/models/__init__.py
"""
Database models for the chat backend.

Importing this package registers every mapper on ``Base.metadata``.
"""

from .conversation import Conversation, ConversationParticipant
from .message import Message, ReactionType
from .user import User

__all__ = [
    "Conversation",
    "ConversationParticipant",
    "Message",
    "ReactionType",
    "User",
]
