# backend/chatline/services/messaging/hub.py
"""
In-process realtime fan-out hub.

The hub owns three tables, all touched only from the event loop:

- sessions: every open WebSocket, keyed by session id
- user bindings: user id -> the one session that currently represents the
  user (last connection wins)
- rooms: conversation id -> session ids subscribed to it

Connections move through CONNECTED -> IDENTIFIED -> JOINED -> DISCONNECTED.
A connection that cannot be identified stays CONNECTED: it is kept open but
has no binding and no rooms.

Delivery uses asyncio.gather(); sessions whose send fails are disconnected.

Deleted conversations are remembered as closed rooms so late events are
dropped. Only the most recent CLOSED_ROOM_HISTORY ids are kept; conversation
ids are never reused and a deleted conversation is never listed on connect,
so an evicted id cannot be rejoined.
"""

import asyncio
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any, Dict, Iterable, List, Optional, Set
import uuid

from ...monitoring.prometheus_metrics import prometheus_metrics
from .events import build_user_presence_event

logger = logging.getLogger(__name__)

CLOSED_ROOM_HISTORY = 10_000


class SessionState(str, Enum):
    CONNECTED = "connected"
    IDENTIFIED = "identified"
    JOINED = "joined"
    DISCONNECTED = "disconnected"


@dataclass
class LiveSession:
    """One open realtime connection."""

    session_id: str
    websocket: Any
    user_id: Optional[str] = None
    username: Optional[str] = None
    rooms: Set[str] = field(default_factory=set)
    state: SessionState = SessionState.CONNECTED


class ConnectionHub:
    """
    Room-based publish/subscribe over live WebSocket sessions.

    Designed for a single event loop; it is not thread-safe.
    """

    def __init__(self, closed_room_history: int = CLOSED_ROOM_HISTORY) -> None:
        self._sessions: Dict[str, LiveSession] = {}
        self._user_sessions: Dict[str, str] = {}
        self._rooms: Dict[str, Set[str]] = {}
        self._closed_rooms: "OrderedDict[str, None]" = OrderedDict()
        self._closed_room_history = closed_room_history

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self, websocket: Any) -> str:
        """Accept a WebSocket and register it as a new, unidentified session."""
        await websocket.accept()
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = LiveSession(session_id=session_id, websocket=websocket)
        prometheus_metrics.set_realtime_connections(len(self._sessions))
        logger.debug(f"[HUB] Session {session_id} connected")
        return session_id

    async def identify(
        self,
        session_id: str,
        user_id: str,
        username: str,
        conversation_ids: Iterable[str],
    ) -> None:
        """
        Bind a session to a user and subscribe it to the user's conversations.

        Any previous binding of the user is replaced. Everyone else is told the
        user is online.
        """
        session = self._sessions.get(session_id)
        if session is None:
            logger.warning(f"[HUB] identify called for unknown session {session_id}")
            return

        session.user_id = user_id
        session.username = username
        session.state = SessionState.IDENTIFIED

        previous = self._user_sessions.get(user_id)
        if previous and previous != session_id:
            logger.info(
                "[HUB] Replacing session binding",
                extra={"user_id": user_id, "previous_session": previous, "session_id": session_id},
            )
        self._user_sessions[user_id] = session_id

        for conversation_id in conversation_ids:
            self.join_room(session_id, conversation_id)
        session.state = SessionState.JOINED

        logger.info(
            "[HUB] User online",
            extra={"user_id": user_id, "session_id": session_id, "rooms": len(session.rooms)},
        )
        await self.broadcast(
            build_user_presence_event(True, user_id, username), exclude_session_id=session_id
        )

    async def disconnect(self, session_id: str) -> None:
        """
        Forget a session.

        The user binding is removed only if it still points at this session;
        ``user-offline`` is broadcast only in that case.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        session.state = SessionState.DISCONNECTED
        prometheus_metrics.set_realtime_connections(len(self._sessions))

        for conversation_id in list(session.rooms):
            self._leave_room(session_id, conversation_id)
        session.rooms.clear()

        if session.user_id is None:
            logger.debug(f"[HUB] Anonymous session {session_id} disconnected")
            return
        if self._user_sessions.get(session.user_id) != session_id:
            return

        del self._user_sessions[session.user_id]
        logger.info(
            "[HUB] User offline", extra={"user_id": session.user_id, "session_id": session_id}
        )
        await self.broadcast(
            build_user_presence_event(False, session.user_id, session.username or "")
        )

    async def send_to_session(self, session_id: str, event: Dict[str, Any]) -> bool:
        return await self._deliver([session_id], event) == 1

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------

    def join_room(self, session_id: str, conversation_id: str) -> bool:
        """Subscribe a session to a conversation. Closed rooms cannot be joined."""
        session = self._sessions.get(session_id)
        if session is None or conversation_id in self._closed_rooms:
            return False
        self._rooms.setdefault(conversation_id, set()).add(session_id)
        session.rooms.add(conversation_id)
        return True

    def _leave_room(self, session_id: str, conversation_id: str) -> None:
        members = self._rooms.get(conversation_id)
        if members is None:
            return
        members.discard(session_id)
        if not members:
            del self._rooms[conversation_id]

    def close_room(self, conversation_id: str) -> None:
        """Unsubscribe everyone; later events for this conversation are dropped."""
        for session_id in self._rooms.pop(conversation_id, set()):
            session = self._sessions.get(session_id)
            if session is not None:
                session.rooms.discard(conversation_id)
        self._closed_rooms[conversation_id] = None
        self._closed_rooms.move_to_end(conversation_id)
        while len(self._closed_rooms) > self._closed_room_history:
            self._closed_rooms.popitem(last=False)
        logger.debug(f"[HUB] Room {conversation_id} closed")

    def room_members(self, conversation_id: str) -> Set[str]:
        return set(self._rooms.get(conversation_id, set()))

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def notify(
        self,
        conversation_id: str,
        event: Dict[str, Any],
        exclude_session_id: Optional[str] = None,
    ) -> int:
        """
        Deliver an event to every session in a conversation room.

        Returns:
            Number of sessions the event was delivered to
        """
        if conversation_id in self._closed_rooms:
            logger.debug(f"[HUB] Dropping {event.get('type')} for closed room {conversation_id}")
            return 0
        targets = [
            session_id
            for session_id in self._rooms.get(conversation_id, set())
            if session_id != exclude_session_id
        ]
        return await self._deliver(targets, event)

    async def broadcast(
        self, event: Dict[str, Any], exclude_session_id: Optional[str] = None
    ) -> int:
        """Deliver an event to every open session."""
        targets = [
            session_id for session_id in self._sessions if session_id != exclude_session_id
        ]
        return await self._deliver(targets, event)

    async def on_conversation_created(
        self,
        participant_ids: Iterable[str],
        conversation_id: str,
        event: Dict[str, Any],
        exclude_session_id: Optional[str] = None,
    ) -> int:
        """
        Join every online participant to a new conversation room, then emit.

        Offline participants join when they next connect.
        """
        for user_id in participant_ids:
            session_id = self._user_sessions.get(user_id)
            if session_id is not None:
                self.join_room(session_id, conversation_id)
        return await self.notify(conversation_id, event, exclude_session_id=exclude_session_id)

    async def _deliver(self, session_ids: List[str], event: Dict[str, Any]) -> int:
        sessions = [self._sessions[sid] for sid in session_ids if sid in self._sessions]
        if not sessions:
            return 0

        # Send to all sessions concurrently
        results = await asyncio.gather(
            *[self._safe_send(session.websocket, event) for session in sessions],
            return_exceptions=True,
        )

        failed = [
            session.session_id
            for session, success in zip(sessions, results)
            if success is not True
        ]
        delivered = len(sessions) - len(failed)
        prometheus_metrics.record_realtime_delivery(
            str(event.get("type")), delivered=delivered, failed=len(failed)
        )
        for session_id in failed:
            logger.info(f"[HUB] Dropping session {session_id} after failed send")
            await self.disconnect(session_id)
        return delivered

    async def _safe_send(self, websocket: Any, event: Dict[str, Any]) -> bool:
        """
        Send an event to a WebSocket.

        Returns:
            True if successful, False if the connection failed
        """
        try:
            await websocket.send_json(event)
            return True
        except Exception as e:
            logger.debug(f"[HUB] Failed to send to connection: {e}")
            return False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def online_user_ids(self) -> List[str]:
        return list(self._user_sessions)

    def session_for_user(self, user_id: str) -> Optional[str]:
        return self._user_sessions.get(user_id)

    def get_session(self, session_id: str) -> Optional[LiveSession]:
        return self._sessions.get(session_id)

    def get_stats(self) -> Dict[str, int]:
        return {
            "sessions": len(self._sessions),
            "online_users": len(self._user_sessions),
            "rooms": len(self._rooms),
            "closed_rooms": len(self._closed_rooms),
        }
