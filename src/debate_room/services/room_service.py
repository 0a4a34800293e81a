from __future__ import annotations

import logging

from debate_room.application.exceptions import (
    RoomExistsError,
    RoomFullError,
    PostEndMutationError,
    TimerActiveError,
    ValidationError,
)
from debate_room.application.policies.permissions import assert_member, assert_room_exists
from debate_room.application.ports.clock import Clock
from debate_room.application.repositories.room import RoomRepository
from debate_room.domain.entities.participant import Participant
from debate_room.domain.entities.room import Room
from debate_room.domain.topics import DEBATE_TOPICS
from debate_room.domain.value_objects.ids import ParticipantId, RoomId

logger = logging.getLogger(__name__)


def list_topics() -> list[str]:
    return list(DEBATE_TOPICS)


def create_room(
    room_id: str,
    topic: str,
    user_id: str,
    user_name: str,
    timer_duration: int,
    rooms: RoomRepository,
    clock: Clock,
) -> Room:
    """Create a room with the creator as its only participant."""
    topic = topic.strip()
    user_name = user_name.strip()
    if not topic:
        raise ValidationError("Topic must not be empty")
    if not user_name:
        raise ValidationError("Name must not be empty")
    if timer_duration <= 0:
        raise ValidationError("Timer duration must be positive")

    now = clock.now()
    room = Room(
        id=RoomId(room_id),
        topic=topic,
        timer_duration=timer_duration,
        created_at=now,
    )
    room.add_participant(Participant(id=ParticipantId(user_id), name=user_name, joined_at=now))
    if not rooms.add(room):
        raise RoomExistsError(f"Room {room_id} already exists")

    logger.info("Room created: %s topic=%r timer=%ds", room_id, topic, timer_duration)
    return room


def join_room(
    room_id: str,
    user_id: str,
    user_name: str,
    rooms: RoomRepository,
    clock: Clock,
) -> tuple[Room, bool]:
    """Join a room, or rejoin it as an existing member.

    Returns (room, joined) where joined=False means the caller was already a
    member and the room is returned unchanged.
    """
    room = assert_room_exists(rooms.get(room_id))
    if room.is_member(user_id):
        logger.info("Rejoin: %s in room %s", user_id, room_id)
        return room, False

    if room.is_full:
        raise RoomFullError("Room is full (maximum 2 participants allowed)")
    user_name = user_name.strip()
    if not user_name:
        raise ValidationError("Name must not be empty")

    room.add_participant(
        Participant(id=ParticipantId(user_id), name=user_name, joined_at=clock.now())
    )
    logger.info("Joined: %s in room %s (%d/2)", user_id, room_id, len(room.participants))
    return room, True


def leave_room(room_id: str, user_id: str, rooms: RoomRepository) -> tuple[Room, bool]:
    """Remove a participant. Returns (room, deleted) where deleted means the room emptied."""
    room = assert_room_exists(rooms.get(room_id))
    assert_member(room, user_id)
    room.remove_participant(user_id)
    if not room.participants:
        rooms.remove(room_id)
        logger.info("Room %s emptied and removed", room_id)
        return room, True
    logger.info("Left: %s from room %s", user_id, room_id)
    return room, False


def get_room(room_id: str, rooms: RoomRepository) -> Room:
    return assert_room_exists(rooms.get(room_id))


def assert_can_start(room_id: str, user_id: str, rooms: RoomRepository) -> Room:
    room = assert_room_exists(rooms.get(room_id))
    assert_member(room, user_id)
    if room.debate_ended:
        raise PostEndMutationError("Debate has ended")
    if room.timer_active:
        raise TimerActiveError("Timer is already running")
    return room
