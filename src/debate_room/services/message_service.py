from __future__ import annotations

import base64
import binascii
import uuid

from debate_room.application.exceptions import ValidationError
from debate_room.application.policies.permissions import assert_can_post
from debate_room.application.ports.clock import Clock
from debate_room.application.repositories.room import RoomRepository
from debate_room.domain.entities.message import AudioMessage, TextMessage
from debate_room.domain.value_objects.ids import MessageId, ParticipantId


def send_text(
    room_id: str,
    user_id: str,
    text: str,
    rooms: RoomRepository,
    clock: Clock,
    *,
    max_length: int,
) -> TextMessage:
    """Append a text message to the room log.

    The sender's display name comes from the room membership, not from the
    command, so it cannot change after joining.
    """
    room = assert_can_post(rooms.get(room_id), user_id)
    body = text.strip()
    if not body:
        raise ValidationError("Message must not be empty")
    if len(body) > max_length:
        raise ValidationError(f"Message exceeds {max_length} characters")

    participant = room.participants[ParticipantId(user_id)]
    msg = TextMessage(
        id=MessageId(str(uuid.uuid4())),
        author=participant.id,
        display_name=participant.name,
        body=body,
        created_at=clock.now(),
    )
    room.append(msg)
    return msg


def send_audio(
    room_id: str,
    user_id: str,
    audio: str,
    rooms: RoomRepository,
    clock: Clock,
    *,
    max_bytes: int,
) -> AudioMessage:
    """Append an audio message. ``audio`` is base64, optionally as a data URL."""
    room = assert_can_post(rooms.get(room_id), user_id)
    size = decoded_size(audio)
    if size == 0:
        raise ValidationError("Audio payload is empty")
    if size > max_bytes:
        raise ValidationError(f"Audio payload exceeds {max_bytes} bytes")

    participant = room.participants[ParticipantId(user_id)]
    msg = AudioMessage(
        id=MessageId(str(uuid.uuid4())),
        author=participant.id,
        display_name=participant.name,
        payload=audio,
        created_at=clock.now(),
    )
    room.append(msg)
    return msg


def decoded_size(audio: str) -> int:
    """Validate a base64 / data-URL payload and return its decoded length."""
    header, sep, encoded = audio.partition(",")
    if not sep:
        encoded = audio
    elif not (header.startswith("data:") and header.endswith(";base64")):
        raise ValidationError("Audio must be a base64 data URL")
    try:
        return len(base64.b64decode(encoded, validate=True))
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Audio payload is not valid base64") from exc
