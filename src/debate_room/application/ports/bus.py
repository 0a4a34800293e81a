from __future__ import annotations

from typing import Any, Protocol


class EventPublisher(Protocol):
    """Fan-out of server events to every connection subscribed to a room."""

    async def publish(self, room_id: str, event_type: str, data: dict[str, Any]) -> None: ...
