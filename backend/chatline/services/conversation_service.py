# backend/chatline/services/conversation_service.py
"""
Conversation Service for multi-party messaging.

Handles the conversation use cases: creation, listing, deletion, sending
messages and seen pointers. Every operation reads and authorizes before it
writes. Message creation and the conversation update are committed as two
separate transactions (message first), so a failure in between leaves an
unlinked message that readers ignore.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.exceptions import integrity_error, not_found_error, validation_error
from ..core.ulid_helper import is_valid_ulid
from ..models.conversation import Conversation
from ..models.message import Message
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .membership_guard import MembershipGuard


@dataclass
class ConversationDetails:
    """A conversation with its participants and messages resolved."""

    conversation: Conversation
    participants: List[User] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)


@dataclass
class DeletedConversation:
    conversation_id: str
    participant_ids: List[str]


def default_title(created_at: datetime) -> str:
    return created_at.strftime("%Y-%m-%d %H:%M:%S")


class ConversationService(BaseService):
    """
    Service for conversation operations.

    Handles:
    - Creating conversations between the requester and invited users
    - Listing the requester's conversations
    - Deleting conversations
    - Sending messages and updating seen pointers
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self.conversation_repository = RepositoryFactory.create_conversation_repository(db)
        self.message_repository = RepositoryFactory.create_message_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.guard = MembershipGuard()

    def get_conversation_or_404(self, conversation_id: str) -> Conversation:
        """
        Load a conversation referenced by the request path.

        Raises:
            DomainException: VALIDATION for a malformed id, NOT_FOUND if absent
        """
        if not is_valid_ulid(conversation_id):
            raise validation_error(
                "The provided conversation id is not valid", conversation_id=conversation_id
            )
        conversation = self.conversation_repository.get_by_id(conversation_id)
        if conversation is None:
            raise not_found_error("Conversation not found", conversation_id=conversation_id)
        return conversation

    @BaseService.measure_operation("create_conversation")
    def create_conversation(
        self,
        requester: User,
        participant_ids: Sequence[str],
        title: Optional[str] = None,
    ) -> Conversation:
        """
        Create a conversation between the requester and the given users.

        The requester always comes first; the others follow in invite order,
        duplicates removed.

        Raises:
            DomainException: VALIDATION if an id is malformed or names no user
        """
        for participant_id in participant_ids:
            if not is_valid_ulid(participant_id):
                raise validation_error(
                    "The provided participant id is not valid", participant_id=participant_id
                )

        ordered_ids: List[str] = [requester.id]
        for participant_id in participant_ids:
            if participant_id not in ordered_ids:
                ordered_ids.append(participant_id)

        invited = ordered_ids[1:]
        found = {user.id for user in self.user_repository.get_by_ids(invited)}
        missing = [user_id for user_id in invited if user_id not in found]
        if missing:
            raise validation_error("Participant not found", participant_ids=missing)

        created_at = datetime.now(timezone.utc)
        with self.transaction():
            conversation = self.conversation_repository.create_with_participants(
                title=title or default_title(created_at),
                participant_ids=ordered_ids,
                created_at=created_at,
            )

        self.log_operation(
            "create_conversation",
            conversation_id=conversation.id,
            participant_count=len(ordered_ids),
        )
        return conversation

    @BaseService.measure_operation("list_conversations")
    def list_conversations(self, requester: User) -> List[ConversationDetails]:
        """All conversations of the requester, most recent activity first."""
        conversations = self.conversation_repository.list_for_user(requester.id)

        user_ids: List[str] = []
        for conversation in conversations:
            for user_id in conversation.participant_ids:
                if user_id not in user_ids:
                    user_ids.append(user_id)
        users_by_id: Dict[str, User] = {
            user.id: user for user in self.user_repository.get_by_ids(user_ids)
        }

        details = []
        for conversation in conversations:
            participants = [
                users_by_id[user_id]
                for user_id in conversation.participant_ids
                if user_id in users_by_id
            ]
            messages = self.message_repository.get_by_ids(conversation.message_ids or [])
            details.append(
                ConversationDetails(
                    conversation=conversation, participants=participants, messages=messages
                )
            )
        return details

    def conversation_ids_for_user(self, user_id: str) -> List[str]:
        return self.conversation_repository.conversation_ids_for_user(user_id)

    @BaseService.measure_operation("delete_conversation")
    def delete_conversation(self, requester: User, conversation_id: str) -> DeletedConversation:
        """
        Hard delete a conversation. Its messages are kept.

        Raises:
            DomainException: VALIDATION, NOT_FOUND or AUTHORIZATION
        """
        conversation = self.get_conversation_or_404(conversation_id)
        self.guard.require_participant(requester, conversation)

        deleted = DeletedConversation(
            conversation_id=conversation.id,
            participant_ids=list(conversation.participant_ids),
        )
        with self.transaction():
            self.conversation_repository.delete(conversation.id)

        self.log_operation("delete_conversation", conversation_id=conversation_id)
        return deleted

    @BaseService.measure_operation("send_message")
    def send_message(
        self,
        requester: User,
        conversation_id: str,
        content: str,
        reply_to_id: Optional[str] = None,
    ) -> Message:
        """
        Post a message to a conversation.

        Raises:
            DomainException: VALIDATION for a bad reply reference, plus the
                errors of ``get_conversation_or_404`` and AUTHORIZATION
        """
        conversation = self.get_conversation_or_404(conversation_id)
        self.guard.require_participant(requester, conversation)

        if reply_to_id is not None:
            if not is_valid_ulid(reply_to_id):
                raise validation_error(
                    "The provided reply message id is not valid", reply_to_id=reply_to_id
                )
            if self.message_repository.get_in_conversation(reply_to_id, conversation.id) is None:
                raise validation_error(
                    "The replied message does not exist in this conversation",
                    reply_to_id=reply_to_id,
                )

        with self.transaction():
            message = self.message_repository.create(
                conversation_id=conversation.id,
                author_id=requester.id,
                reply_to_id=reply_to_id,
                content=content,
                posted_at=datetime.now(timezone.utc),
                is_edited=False,
                is_deleted=False,
                reactions={},
            )

        with self.transaction():
            self.conversation_repository.append_message(conversation, message.id, message.posted_at)

        self.log_operation(
            "send_message", conversation_id=conversation.id, message_id=message.id
        )
        return message

    @BaseService.measure_operation("mark_seen")
    def mark_seen(self, requester: User, conversation_id: str, message_id: str) -> Conversation:
        """
        Record ``message_id`` as the last message the requester has seen.

        Raises:
            DomainException: VALIDATION if the message id is malformed or names
                no message, INTEGRITY if that message has lost its conversation,
                plus the errors of ``get_conversation_or_404`` and AUTHORIZATION
        """
        conversation = self.get_conversation_or_404(conversation_id)
        self.guard.require_participant(requester, conversation)

        if not is_valid_ulid(message_id):
            raise validation_error("The provided message id is not valid", message_id=message_id)
        message = self.message_repository.get_by_id(message_id)
        if message is None:
            raise validation_error("Message not found", message_id=message_id)
        if self.conversation_repository.get_by_id(message.conversation_id) is None:
            raise integrity_error(
                "Message has no parent conversation", message_id=message_id
            )

        with self.transaction():
            self.conversation_repository.set_seen(conversation, requester.id, message.id)

        return conversation
