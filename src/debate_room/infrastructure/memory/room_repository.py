"""Process-local room store. Rooms live until emptied or the process exits."""
from __future__ import annotations

import logging

from debate_room.domain.entities.room import Room

logger = logging.getLogger(__name__)


class InMemoryRoomRepository:
    """Implements application.repositories.room.RoomRepository."""

    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}

    def get(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def add(self, room: Room) -> bool:
        if room.id in self._rooms:
            return False
        self._rooms[room.id] = room
        logger.debug("Room stored: %s (total=%d)", room.id, len(self._rooms))
        return True

    def remove(self, room_id: str) -> Room | None:
        room = self._rooms.pop(room_id, None)
        if room is not None:
            logger.debug("Room removed: %s (total=%d)", room_id, len(self._rooms))
        return room

    def list_ids(self) -> list[str]:
        return list(self._rooms)
