# backend/chatline/repositories/conversation_repository.py
"""
Conversation Repository for multi-party messaging.

Provides data access for conversations, their ordered participant rows and
the document-style message list and seen map.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.conversation import Conversation, ConversationParticipant
from .base_repository import BaseRepository


class ConversationRepository(BaseRepository[Conversation]):
    """
    Repository for Conversation entity operations.

    Handles:
    - Creating a conversation with its participants in invite order
    - Listing conversations for a participant
    - Updating the message list, seen pointers and last activity
    """

    def __init__(self, db: Session):
        """Initialize with database session."""
        super().__init__(db, Conversation)

    def create_with_participants(
        self,
        title: str,
        participant_ids: Sequence[str],
        created_at: Optional[datetime] = None,
    ) -> Conversation:
        """
        Create a conversation and one participant row per id.

        Args:
            title: Conversation title
            participant_ids: Unique user ids, in invite order
            created_at: Creation time (defaults to now)

        Returns:
            The flushed conversation
        """
        now = created_at or datetime.now(timezone.utc)
        return self.create(
            title=title,
            created_at=now,
            last_activity_at=now,
            message_ids=[],
            seen={},
            participants=[
                ConversationParticipant(user_id=user_id, position=position)
                for position, user_id in enumerate(participant_ids)
            ],
        )

    def list_for_user(self, user_id: str) -> List[Conversation]:
        """
        All conversations the user participates in.

        Ordered by last activity, most recent first.
        """
        try:
            return (
                self.db.query(Conversation)
                .join(
                    ConversationParticipant,
                    ConversationParticipant.conversation_id == Conversation.id,
                )
                .filter(ConversationParticipant.user_id == user_id)
                .order_by(Conversation.last_activity_at.desc(), Conversation.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing conversations for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to list conversations: {str(e)}")

    def conversation_ids_for_user(self, user_id: str) -> List[str]:
        """Ids of every conversation the user participates in."""
        try:
            rows = (
                self.db.query(ConversationParticipant.conversation_id)
                .filter(ConversationParticipant.user_id == user_id)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching conversation ids for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to fetch conversation ids: {str(e)}")
        return [row[0] for row in rows]

    def append_message(
        self, conversation: Conversation, message_id: str, at: Optional[datetime] = None
    ) -> Conversation:
        """Append a message id and bump last activity."""
        conversation.message_ids = [*(conversation.message_ids or []), message_id]
        return self.touch(conversation, at)

    def set_seen(self, conversation: Conversation, user_id: str, message_id: str) -> Conversation:
        """Upsert the seen pointer of one participant. Latest write wins."""
        seen = dict(conversation.seen or {})
        seen[user_id] = message_id
        conversation.seen = seen
        self.db.flush()
        return conversation

    def touch(self, conversation: Conversation, at: Optional[datetime] = None) -> Conversation:
        """Bump last activity."""
        conversation.last_activity_at = at or datetime.now(timezone.utc)
        self.db.flush()
        return conversation
