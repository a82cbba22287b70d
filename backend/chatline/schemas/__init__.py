# backend/chatline/schemas/__init__.py
"""Request and response models for the HTTP API."""

from .conversation import (
    ConversationListResponse,
    ConversationView,
    CreateConversationRequest,
    CreateConversationResponse,
    DeleteConversationResponse,
    MarkSeenRequest,
    MarkSeenResponse,
)
from .message import (
    EditMessageRequest,
    MessageActionResponse,
    MessageView,
    ReactToMessageRequest,
    SendMessageRequest,
    SendMessageResponse,
)
from .user import LoginRequest, LoginResponse, UserListResponse, UserSummary

__all__ = [
    "ConversationListResponse",
    "ConversationView",
    "CreateConversationRequest",
    "CreateConversationResponse",
    "DeleteConversationResponse",
    "EditMessageRequest",
    "LoginRequest",
    "LoginResponse",
    "MarkSeenRequest",
    "MarkSeenResponse",
    "MessageActionResponse",
    "MessageView",
    "ReactToMessageRequest",
    "SendMessageRequest",
    "SendMessageResponse",
    "UserListResponse",
    "UserSummary",
]
