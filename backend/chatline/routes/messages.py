# backend/chatline/routes/messages.py
"""
Message routes.

Service calls run via ``asyncio.to_thread``; only publishing stays on the loop.

Endpoints:
    PUT /messages/{message_id}    -> Edit a message (author only)
    POST /messages/{message_id}   -> Set or clear a reaction (participants)
    DELETE /messages/{message_id} -> Soft delete a message (author only)
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from ..auth import get_current_user
from ..dependencies import get_hub, get_message_service, get_session_id
from ..models.user import User
from ..schemas.message import EditMessageRequest, MessageActionResponse, ReactToMessageRequest
from ..services.message_service import MessageMutation, MessageService
from ..services.messaging import (
    publish_message_deleted,
    publish_message_edited,
    publish_reaction_changed,
)
from ..services.messaging.hub import ConnectionHub

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


def _action_response(mutation: MessageMutation) -> MessageActionResponse:
    message = mutation.message
    return MessageActionResponse(
        id=message.id,
        conversation_id=message.conversation_id,
        is_edited=bool(message.is_edited),
        is_deleted=bool(message.is_deleted),
        reactions=dict(message.reactions or {}),
    )


@router.put("/{message_id}", response_model=MessageActionResponse)
async def edit_message(
    message_id: str,
    payload: EditMessageRequest,
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
    hub: ConnectionHub = Depends(get_hub),
    session_id: Optional[str] = Depends(get_session_id),
) -> MessageActionResponse:
    mutation = await asyncio.to_thread(
        service.edit_message, current_user, message_id, payload.content
    )
    await publish_message_edited(hub, mutation.message, exclude_session_id=session_id)
    return _action_response(mutation)


@router.post("/{message_id}", response_model=MessageActionResponse)
async def react_to_message(
    message_id: str,
    payload: Optional[ReactToMessageRequest] = Body(None),
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
    hub: ConnectionHub = Depends(get_hub),
    session_id: Optional[str] = Depends(get_session_id),
) -> MessageActionResponse:
    """
    Set the requester's reaction on a message.

    Without a body, or with an empty ``reaction``, the reaction is cleared.
    """
    reaction = payload.reaction if payload else None
    mutation = await asyncio.to_thread(
        service.react_to_message, current_user, message_id, reaction
    )
    await publish_reaction_changed(
        hub,
        mutation.message,
        current_user.id,
        reaction.value if reaction else None,
        exclude_session_id=session_id,
    )
    return _action_response(mutation)


@router.delete("/{message_id}", response_model=MessageActionResponse)
async def delete_message(
    message_id: str,
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
    hub: ConnectionHub = Depends(get_hub),
    session_id: Optional[str] = Depends(get_session_id),
) -> MessageActionResponse:
    mutation = await asyncio.to_thread(service.delete_message, current_user, message_id)
    await publish_message_deleted(
        hub, mutation.message, current_user.id, exclude_session_id=session_id
    )
    return _action_response(mutation)
