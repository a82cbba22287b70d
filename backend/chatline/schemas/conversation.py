# backend/chatline/schemas/conversation.py
"""
Pydantic schemas for conversation API.

Provides request/response models for the conversation endpoints.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ._strict_base import StrictRequestModel
from .message import MessageView
from .user import UserSummary


class CreateConversationRequest(StrictRequestModel):
    """Request to create a conversation with other users."""

    participant_ids: List[str] = Field(
        ..., min_length=1, description="Ids of the users to invite (requester is added)"
    )
    title: Optional[str] = Field(None, max_length=200)


class CreateConversationResponse(BaseModel):
    """Response for POST /conversations."""

    id: str
    title: str
    participant_ids: List[str]


class ConversationView(BaseModel):
    """A conversation with participants and messages resolved."""

    id: str
    title: str
    created_at: datetime
    last_activity_at: datetime
    participants: List[UserSummary] = Field(default_factory=list)
    messages: List[MessageView] = Field(default_factory=list)
    seen: Dict[str, str] = Field(default_factory=dict)


class ConversationListResponse(BaseModel):
    """Response for GET /conversations."""

    conversations: List[ConversationView] = Field(default_factory=list)


class DeleteConversationResponse(BaseModel):
    id: str
    deleted: bool = True


class MarkSeenRequest(StrictRequestModel):
    """Request to move the requester's seen pointer."""

    message_id: str


class MarkSeenResponse(BaseModel):
    conversation_id: str
    seen: Dict[str, str]
