# backend/chatline/services/membership_guard.py
"""
Membership and authorship checks.

Participant and author references can be raw id strings, ``User`` rows or
``ConversationParticipant`` rows. Every reference is resolved to its canonical
string id before comparison, so a check never depends on object identity.
"""

from typing import Any, Optional

from ..core.exceptions import authorization_error
from ..models.conversation import Conversation, ConversationParticipant
from ..models.message import Message
from ..models.user import User


def resolve_user_id(reference: Any) -> Optional[str]:
    """Canonical user id for a user reference, or None if it has none."""
    if reference is None:
        return None
    if isinstance(reference, str):
        return reference
    if isinstance(reference, ConversationParticipant):
        return str(reference.user_id)
    if isinstance(reference, User):
        return str(reference.id)
    user_id = getattr(reference, "user_id", None) or getattr(reference, "id", None)
    return str(user_id) if user_id is not None else None


class MembershipGuard:
    """Answers "may this user act on this conversation or message"."""

    @staticmethod
    def is_participant(user: Any, conversation: Conversation) -> bool:
        user_id = resolve_user_id(user)
        if user_id is None:
            return False
        return any(resolve_user_id(p) == user_id for p in conversation.participants)

    @staticmethod
    def is_author(user: Any, message: Message) -> bool:
        user_id = resolve_user_id(user)
        return user_id is not None and resolve_user_id(message.author_id) == user_id

    @classmethod
    def require_participant(cls, user: Any, conversation: Conversation) -> None:
        if not cls.is_participant(user, conversation):
            raise authorization_error("You are not a participant of this conversation")

    @classmethod
    def require_author(cls, user: Any, message: Message) -> None:
        if not cls.is_author(user, message):
            raise authorization_error("You are not the author of this message")
