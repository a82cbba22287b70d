# backend/chatline/dependencies.py
"""FastAPI dependencies shared by the HTTP routes and the realtime endpoint."""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session
from starlette.requests import HTTPConnection

from .database import get_db
from .services.conversation_service import ConversationService
from .services.message_service import MessageService
from .services.messaging.hub import ConnectionHub
from .services.user_service import UserService


def get_hub(connection: HTTPConnection) -> ConnectionHub:
    """The application's realtime hub (works for HTTP and WebSocket scopes)."""
    return connection.app.state.hub


def get_session_id(
    x_session_id: Optional[str] = Header(None, alias="X-Session-Id"),
) -> Optional[str]:
    """Realtime session of the caller, excluded from its own events."""
    return x_session_id or None


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    """Dependency for ConversationService."""
    return ConversationService(db)


def get_message_service(db: Session = Depends(get_db)) -> MessageService:
    """Get message service instance."""
    return MessageService(db)
