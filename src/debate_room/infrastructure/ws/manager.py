"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket

from debate_room.infrastructure.ws.protocol import encode_outbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks open sockets and which rooms they are subscribed to.

    Implements application.ports.bus.EventPublisher.
    """

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._rooms: dict[str, set[WebSocket]] = {}

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self._connections.add(ws)
        logger.debug("WS connected (total=%d)", len(self._connections))

    def disconnect(self, ws: WebSocket) -> None:
        self._connections.discard(ws)
        for room_id in list(self._rooms):
            self.unsubscribe(ws, room_id)
        logger.debug("WS disconnected (total=%d)", len(self._connections))

    def subscribe(self, ws: WebSocket, room_id: str) -> None:
        self._rooms.setdefault(room_id, set()).add(ws)

    def move_to_room(self, ws: WebSocket, room_id: str) -> None:
        """Subscribe ``ws`` to ``room_id`` only; a connection follows one room at a time."""
        for other in list(self._rooms):
            if other != room_id:
                self.unsubscribe(ws, other)
        self.subscribe(ws, room_id)

    def unsubscribe(self, ws: WebSocket, room_id: str) -> None:
        subs = self._rooms.get(room_id)
        if subs is not None:
            subs.discard(ws)
            if not subs:
                del self._rooms[room_id]

    def drop_room(self, room_id: str) -> None:
        self._rooms.pop(room_id, None)

    def subscriber_count(self, room_id: str) -> int:
        return len(self._rooms.get(room_id, ()))

    async def publish(self, room_id: str, event_type: str, data: dict[str, Any]) -> None:
        """Send an event to every socket subscribed to a room."""
        raw = encode_outbound(event_type, data)
        dead: list[WebSocket] = []
        for ws in list(self._rooms.get(room_id, ())):
            try:
                await ws.send_text(raw)
            except Exception:
                dead.append(ws)
        for ws in dead:
            self.disconnect(ws)

    async def send(self, ws: WebSocket, event_type: str, data: dict[str, Any] | None = None) -> None:
        """Send an event to a single socket."""
        raw = encode_outbound(event_type, data)
        try:
            await ws.send_text(raw)
        except Exception:
            logger.debug("Send to closed socket dropped", exc_info=True)
            self.disconnect(ws)
