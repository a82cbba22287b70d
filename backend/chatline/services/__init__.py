# backend/chatline/services/__init__.py
"""
Service layer for the chat backend.

Services hold the use-case logic and own transaction boundaries; routes only
translate HTTP to service calls and publish realtime events afterwards.
"""

from .base import BaseService
from .conversation_service import ConversationService
from .membership_guard import MembershipGuard
from .message_service import MessageService
from .user_service import UserService

__all__ = [
    "BaseService",
    "ConversationService",
    "MembershipGuard",
    "MessageService",
    "UserService",
]
