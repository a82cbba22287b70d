# backend/chatline/services/message_service.py
"""
Message Service for the chat system.

Edit, react and soft delete on existing messages. A message whose
conversation has been deleted is an orphan; touching it is an integrity
fault, reported separately from "message not found".
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import integrity_error, not_found_error, validation_error
from ..core.ulid_helper import is_valid_ulid
from ..models.conversation import Conversation
from ..models.message import Message, ReactionType
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .membership_guard import MembershipGuard


@dataclass
class MessageMutation:
    message: Message
    conversation: Conversation


class MessageService(BaseService):
    """
    Service for message operations.

    Each mutation commits the message change first, then bumps the parent
    conversation's last activity in its own transaction.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self.message_repository = RepositoryFactory.create_message_repository(db)
        self.conversation_repository = RepositoryFactory.create_conversation_repository(db)
        self.guard = MembershipGuard()

    def get_message_or_404(self, message_id: str) -> Message:
        if not is_valid_ulid(message_id):
            raise validation_error("The provided message id is not valid", message_id=message_id)
        message = self.message_repository.get_by_id(message_id)
        if message is None:
            raise not_found_error("Message not found", message_id=message_id)
        return message

    def _get_parent_conversation(self, message: Message) -> Conversation:
        conversation = self.conversation_repository.get_by_id(message.conversation_id)
        if conversation is None:
            self.logger.error(
                "Message has no parent conversation",
                extra={"message_id": message.id, "conversation_id": message.conversation_id},
            )
            raise integrity_error("Message has no parent conversation", message_id=message.id)
        return conversation

    def _touch(self, conversation: Conversation) -> None:
        with self.transaction():
            self.conversation_repository.touch(conversation)

    @BaseService.measure_operation("edit_message")
    def edit_message(self, requester: User, message_id: str, content: str) -> MessageMutation:
        """
        Replace the content of a message and flag it as edited.

        Raises:
            DomainException: NOT_FOUND, AUTHORIZATION (not the author) or
                INTEGRITY (orphaned message)
        """
        message = self.get_message_or_404(message_id)
        self.guard.require_author(requester, message)
        conversation = self._get_parent_conversation(message)

        with self.transaction():
            self.message_repository.set_content(message, content)
        self._touch(conversation)

        self.log_operation("edit_message", message_id=message.id)
        return MessageMutation(message=message, conversation=conversation)

    @BaseService.measure_operation("react_to_message")
    def react_to_message(
        self, requester: User, message_id: str, reaction: Optional[ReactionType]
    ) -> MessageMutation:
        """
        Set the requester's reaction, or clear it when ``reaction`` is None.

        Raises:
            DomainException: NOT_FOUND, INTEGRITY (orphaned message) or
                AUTHORIZATION (not a participant)
        """
        message = self.get_message_or_404(message_id)
        conversation = self._get_parent_conversation(message)
        self.guard.require_participant(requester, conversation)

        value = ReactionType(reaction).value if reaction else None
        with self.transaction():
            self.message_repository.set_reaction(message, requester.id, value)
        self._touch(conversation)

        self.log_operation("react_to_message", message_id=message.id, reaction=value)
        return MessageMutation(message=message, conversation=conversation)

    @BaseService.measure_operation("delete_message")
    def delete_message(self, requester: User, message_id: str) -> MessageMutation:
        """
        Soft delete a message. The content stays in storage.

        Raises:
            DomainException: NOT_FOUND, AUTHORIZATION (not the author) or
                INTEGRITY (orphaned message)
        """
        message = self.get_message_or_404(message_id)
        self.guard.require_author(requester, message)
        conversation = self._get_parent_conversation(message)

        with self.transaction():
            self.message_repository.mark_deleted(message)
        self._touch(conversation)

        self.log_operation("delete_message", message_id=message.id)
        return MessageMutation(message=message, conversation=conversation)
