# backend/chatline/repositories/__init__.py
"""
Repository layer for the chat backend.

This package contains all repository classes that handle data access
logic, separating it from business logic in services.
"""

from .base_repository import BaseRepository
from .conversation_repository import ConversationRepository
from .factory import RepositoryFactory
from .message_repository import MessageRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ConversationRepository",
    "MessageRepository",
    "RepositoryFactory",
    "UserRepository",
]
