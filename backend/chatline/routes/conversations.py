# backend/chatline/routes/conversations.py
"""
Conversation routes.

All business logic is delegated to ConversationService. Async routes run the
sync service calls in a worker thread (``asyncio.to_thread``) so the event
loop keeps serving realtime sessions; events are published on the loop after
the service call returns.

Endpoints:
    POST /conversations                       -> Create a conversation
    GET /conversations                        -> List the requester's conversations
    DELETE /conversations/{conversation_id}   -> Delete a conversation
    POST /conversations/see/{conversation_id} -> Mark a message as seen
    POST /conversations/{conversation_id}     -> Send a message
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from ..auth import get_current_user
from ..dependencies import get_conversation_service, get_hub, get_session_id
from ..models.user import User
from ..schemas.conversation import (
    ConversationListResponse,
    ConversationView,
    CreateConversationRequest,
    CreateConversationResponse,
    DeleteConversationResponse,
    MarkSeenRequest,
    MarkSeenResponse,
)
from ..schemas.message import MessageView, SendMessageRequest, SendMessageResponse
from ..schemas.user import UserSummary
from ..services.conversation_service import ConversationDetails, ConversationService
from ..services.messaging import (
    publish_conversation_created,
    publish_conversation_deleted,
    publish_message_created,
    publish_seen_updated,
)
from ..services.messaging.hub import ConnectionHub

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversations", tags=["conversations"])


def _build_conversation_view(details: ConversationDetails) -> ConversationView:
    conversation = details.conversation
    return ConversationView(
        id=conversation.id,
        title=conversation.title,
        created_at=conversation.created_at,
        last_activity_at=conversation.last_activity_at,
        participants=[UserSummary.model_validate(user) for user in details.participants],
        messages=[MessageView.from_message(message) for message in details.messages],
        seen=dict(conversation.seen or {}),
    )


@router.post("", response_model=CreateConversationResponse)
async def create_conversation(
    payload: CreateConversationRequest,
    current_user: User = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
    hub: ConnectionHub = Depends(get_hub),
    session_id: Optional[str] = Depends(get_session_id),
) -> CreateConversationResponse:
    """
    Create a conversation between the requester and ``participant_ids``.

    Online participants are joined to the new room before the
    ``conversation-created`` event is emitted.
    """
    conversation = await asyncio.to_thread(
        service.create_conversation,
        current_user,
        payload.participant_ids,
        title=payload.title,
    )
    await publish_conversation_created(hub, conversation, exclude_session_id=session_id)
    return CreateConversationResponse(
        id=conversation.id,
        title=conversation.title,
        participant_ids=conversation.participant_ids,
    )


@router.get("", response_model=ConversationListResponse)
def list_conversations(
    current_user: User = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
) -> ConversationListResponse:
    """List the requester's conversations, most recent activity first."""
    details = service.list_conversations(current_user)
    return ConversationListResponse(
        conversations=[_build_conversation_view(item) for item in details]
    )


@router.post("/see/{conversation_id}", response_model=MarkSeenResponse)
async def mark_seen(
    conversation_id: str,
    payload: MarkSeenRequest,
    current_user: User = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
    hub: ConnectionHub = Depends(get_hub),
    session_id: Optional[str] = Depends(get_session_id),
) -> MarkSeenResponse:
    conversation = await asyncio.to_thread(
        service.mark_seen, current_user, conversation_id, payload.message_id
    )
    await publish_seen_updated(
        hub, conversation, current_user.id, payload.message_id, exclude_session_id=session_id
    )
    return MarkSeenResponse(conversation_id=conversation.id, seen=dict(conversation.seen or {}))


@router.delete("/{conversation_id}", response_model=DeleteConversationResponse)
async def delete_conversation(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
    hub: ConnectionHub = Depends(get_hub),
    session_id: Optional[str] = Depends(get_session_id),
) -> DeleteConversationResponse:
    """Delete a conversation. Its messages stay in storage."""
    deleted = await asyncio.to_thread(service.delete_conversation, current_user, conversation_id)
    await publish_conversation_deleted(
        hub, deleted, current_user.id, exclude_session_id=session_id
    )
    return DeleteConversationResponse(id=deleted.conversation_id)


@router.post("/{conversation_id}", response_model=SendMessageResponse)
async def send_message(
    conversation_id: str,
    payload: SendMessageRequest,
    current_user: User = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
    hub: ConnectionHub = Depends(get_hub),
    session_id: Optional[str] = Depends(get_session_id),
) -> SendMessageResponse:
    """Post a message, optionally replying to another message of the conversation."""
    message = await asyncio.to_thread(
        service.send_message,
        current_user,
        conversation_id,
        payload.content,
        reply_to_id=payload.reply_to_id,
    )
    await publish_message_created(hub, message, exclude_session_id=session_id)
    return SendMessageResponse(
        id=message.id, conversation_id=message.conversation_id, posted_at=message.posted_at
    )
