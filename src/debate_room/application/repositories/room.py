from __future__ import annotations

from typing import Protocol

from debate_room.domain.entities.room import Room


class RoomRepository(Protocol):
    def get(self, room_id: str) -> Room | None: ...

    def add(self, room: Room) -> bool: ...

    def remove(self, room_id: str) -> Room | None: ...

    def list_ids(self) -> list[str]: ...
