# backend/chatline/repositories/factory.py
"""
Repository Factory for the chat backend.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from sqlalchemy.orm import Session

from .conversation_repository import ConversationRepository
from .message_repository import MessageRepository
from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_user_repository(db: Session) -> UserRepository:
        return UserRepository(db)

    @staticmethod
    def create_conversation_repository(db: Session) -> ConversationRepository:
        return ConversationRepository(db)

    @staticmethod
    def create_message_repository(db: Session) -> MessageRepository:
        return MessageRepository(db)
