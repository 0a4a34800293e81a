from __future__ import annotations

from debate_room.application.exceptions import (
    ForbiddenError,
    PostEndMutationError,
    RoomNotFoundError,
)
from debate_room.domain.entities.room import Room


def assert_room_exists(room: Room | None) -> Room:
    if room is None:
        raise RoomNotFoundError("Room not found")
    return room


def assert_member(room: Room, participant_id: str) -> None:
    if not room.is_member(participant_id):
        raise ForbiddenError("Not a participant of this room")


def assert_can_post(room: Room | None, participant_id: str) -> Room:
    """Raise unless the participant may add messages to the room."""
    room = assert_room_exists(room)
    assert_member(room, participant_id)
    if room.debate_ended:
        raise PostEndMutationError("Debate has ended")
    return room
