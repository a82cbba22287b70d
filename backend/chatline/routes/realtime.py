# backend/chatline/routes/realtime.py
"""
Realtime WebSocket endpoint.

The socket is server-push only: inbound frames are read and ignored so that
disconnects are noticed. The bearer token comes from the ``token`` query
parameter or the ``Authorization`` header. A connection whose token cannot be
resolved stays open but receives nothing beyond the ``connected`` handshake.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Tuple

from fastapi import APIRouter, Depends, Query, WebSocket
from sqlalchemy.orm import Session

from ..auth import user_from_token
from ..core.exceptions import DomainException
from ..database import get_session_factory
from ..dependencies import get_hub
from ..repositories.factory import RepositoryFactory
from ..services.messaging.events import build_connected_event
from ..services.messaging.hub import ConnectionHub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

Identity = Tuple[str, str, List[str]]


def _bearer_from_header(websocket: WebSocket) -> Optional[str]:
    header = websocket.headers.get("authorization")
    if not header:
        return None
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() != "bearer" or not credentials:
        return None
    return credentials.strip()


def _resolve_identity(
    session_factory: Callable[[], Session], token: Optional[str]
) -> Optional[Identity]:
    """
    Resolve (user id, username, conversation ids) for a token.

    NOTE: This is a sync function - must be called via asyncio.to_thread()
    from async context to avoid blocking the event loop.
    """
    db = session_factory()
    try:
        user = user_from_token(db, token)
        conversation_ids = RepositoryFactory.create_conversation_repository(
            db
        ).conversation_ids_for_user(user.id)
        return user.id, user.username, conversation_ids
    except DomainException as exc:
        logger.info(f"[WS] Connection left unidentified: {exc.message}")
        return None
    finally:
        db.close()


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    hub: ConnectionHub = Depends(get_hub),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> None:
    session_id = await hub.connect(websocket)
    try:
        identity = await asyncio.to_thread(
            _resolve_identity, session_factory, token or _bearer_from_header(websocket)
        )
        user_id: Optional[str] = None
        conversation_ids: List[str] = []
        if identity is not None:
            user_id, username, conversation_ids = identity
            await hub.identify(session_id, user_id, username, conversation_ids)

        # Handshake goes out after binding and room joins
        await hub.send_to_session(
            session_id, build_connected_event(session_id, user_id, conversation_ids)
        )
        if hub.get_session(session_id) is None:
            return

        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        await hub.disconnect(session_id)
