# backend/chatline/repositories/message_repository.py
"""
Message Repository for the chat system.

Implements the data access operations for messages and their reaction map.
"""

from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.message import Message
from .base_repository import BaseRepository


class MessageRepository(BaseRepository[Message]):
    """Repository for Message entity operations."""

    def __init__(self, db: Session):
        super().__init__(db, Message)

    def get_by_ids(self, message_ids: Sequence[str]) -> List[Message]:
        """
        Fetch messages in the order of ``message_ids``.

        Ids without a stored message are skipped, which tolerates a message
        list that briefly references a message that was never committed.
        """
        if not message_ids:
            return []
        try:
            rows = self.db.query(Message).filter(Message.id.in_(list(message_ids))).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching messages by ids: {str(e)}")
            raise RepositoryException(f"Failed to fetch messages: {str(e)}")
        by_id = {message.id: message for message in rows}
        return [by_id[message_id] for message_id in message_ids if message_id in by_id]

    def get_in_conversation(self, message_id: str, conversation_id: str) -> Optional[Message]:
        return self.find_one_by(id=message_id, conversation_id=conversation_id)

    def set_content(self, message: Message, content: str) -> Message:
        message.content = content
        message.is_edited = True
        self.db.flush()
        return message

    def set_reaction(self, message: Message, user_id: str, reaction: Optional[str]) -> Message:
        """
        Upsert or clear the reaction of one user.

        A user holds at most one reaction per message.
        """
        reactions = dict(message.reactions or {})
        if reaction:
            reactions[user_id] = reaction
        else:
            reactions.pop(user_id, None)
        message.reactions = reactions
        self.db.flush()
        return message

    def mark_deleted(self, message: Message) -> Message:
        """Soft delete; content is retained."""
        message.is_deleted = True
        self.db.flush()
        return message
