# backend/chatline/models/conversation.py
"""
Conversation model for multi-party messaging.

A conversation owns an ordered participant list (invite order), an append-only
list of message ids and a per-participant seen pointer. The message id list and
the seen map are document-style JSON columns; both must be reassigned, not
mutated in place, for SQLAlchemy to detect the change.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON as SAJSON
import ulid

from ..database import Base


class Conversation(Base):
    """
    Conversation between one or more users.

    Attributes:
        id: ULID primary key
        title: Display title (defaults to the creation timestamp)
        created_at: When the conversation was created
        last_activity_at: Bumped by every message mutation in the conversation
        message_ids: Ordered list of message ids, append-only
        seen: Mapping participant id -> last seen message id
    """

    __tablename__ = "conversations"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    title = Column(String(200), nullable=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    last_activity_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    message_ids = Column(SAJSON, nullable=False, default=list)
    seen = Column(SAJSON, nullable=False, default=dict)

    # Relationships
    participants = relationship(
        "ConversationParticipant",
        back_populates="conversation",
        order_by="ConversationParticipant.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (Index("idx_conversations_last_activity", "last_activity_at"),)

    @property
    def participant_ids(self) -> list[str]:
        return [p.user_id for p in self.participants]

    def __repr__(self) -> str:
        return f"<Conversation {self.id} participants={len(self.participants)}>"


class ConversationParticipant(Base):
    """
    Membership row of a conversation.

    ``position`` keeps the invite order; the requester is always position 0.
    """

    __tablename__ = "conversation_participants"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    conversation_id = Column(
        String(26), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    conversation = relationship("Conversation", back_populates="participants")
    user = relationship("User", lazy="joined")

    __table_args__ = (
        UniqueConstraint("conversation_id", "user_id", name="uq_conversation_participant"),
        Index("idx_conversation_participants_user", "user_id"),
    )
