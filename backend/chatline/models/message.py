# backend/chatline/models/message.py
"""
Message model for the chat system.

Messages reference their conversation by id only, without a foreign key:
a message outlives the hard delete of its conversation, and operating on such
an orphan is reported as an integrity fault.
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text
from sqlalchemy.types import JSON as SAJSON
import ulid

from ..database import Base


class ReactionType(str, Enum):
    """Reactions a participant may leave on a message."""

    HAPPY = "HAPPY"
    SAD = "SAD"
    THUMBSUP = "THUMBSUP"
    THUMBSDOWN = "THUMBSDOWN"
    LOVE = "LOVE"


class Message(Base):
    """
    Chat message.

    Deleting a message is a soft delete: ``is_deleted`` is set and the content
    is kept so replies still point at something.
    """

    __tablename__ = "messages"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    conversation_id = Column(String(26), nullable=False)
    author_id = Column(String(26), nullable=False)
    reply_to_id = Column(String(26), nullable=True)
    content = Column(Text, nullable=False)
    posted_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    is_edited = Column(Boolean, nullable=False, default=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    # { user_id: ReactionType value }
    reactions = Column(SAJSON, nullable=False, default=dict)

    __table_args__ = (Index("idx_messages_conversation", "conversation_id"),)

    def __repr__(self) -> str:
        return f"<Message {self.id} conversation={self.conversation_id}>"
