# backend/chatline/schemas/message.py
"""
Request/response schemas for messages.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from ..core.config import settings
from ..models.message import Message, ReactionType
from ._strict_base import StrictRequestModel


def _check_content(value: str) -> str:
    if not value.strip():
        raise ValueError("Message content cannot be empty")
    if len(value) > settings.message_max_length:
        raise ValueError(
            f"Message content must be at most {settings.message_max_length} characters"
        )
    return value


MessageContent = Annotated[str, AfterValidator(_check_content)]


class MessageView(BaseModel):
    """A message as returned to clients. Deleted messages hide their content."""

    id: str
    conversation_id: str
    author_id: str
    reply_to_id: Optional[str] = None
    content: Optional[str] = None
    posted_at: datetime
    is_edited: bool = False
    is_deleted: bool = False
    reactions: Dict[str, ReactionType] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_message(cls, message: Message) -> "MessageView":
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            author_id=message.author_id,
            reply_to_id=message.reply_to_id,
            content=None if message.is_deleted else message.content,
            posted_at=message.posted_at,
            is_edited=bool(message.is_edited),
            is_deleted=bool(message.is_deleted),
            reactions=dict(message.reactions or {}),
        )


class SendMessageRequest(StrictRequestModel):
    """Request to post a message to a conversation."""

    content: MessageContent
    reply_to_id: Optional[str] = Field(None, description="Message being replied to")


class SendMessageResponse(BaseModel):
    """Response for POST /conversations/{conversation_id}."""

    id: str
    conversation_id: str
    posted_at: datetime


class EditMessageRequest(StrictRequestModel):
    """Request to replace the content of a message."""

    content: MessageContent


class ReactToMessageRequest(StrictRequestModel):
    """
    Request to set or clear a reaction.

    Omitting ``reaction`` (or sending an empty value) clears the requester's
    reaction.
    """

    reaction: Optional[ReactionType] = None

    @field_validator("reaction", mode="before")
    @classmethod
    def _empty_means_clear(cls, value: Any) -> Any:
        if value == "":
            return None
        return value


class MessageActionResponse(BaseModel):
    """Response for message edit/react/delete."""

    id: str
    conversation_id: str
    is_edited: bool
    is_deleted: bool
    reactions: Dict[str, ReactionType] = Field(default_factory=dict)
