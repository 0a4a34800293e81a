from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from debate_room.domain.value_objects.enums import MessageKind
from debate_room.domain.value_objects.ids import (
    AI_AUTHOR,
    AI_DISPLAY_NAME,
    MessageId,
    ParticipantId,
)


@dataclass(frozen=True, slots=True)
class TextMessage:
    id: MessageId
    author: ParticipantId
    display_name: str
    body: str
    created_at: datetime

    kind = MessageKind.TEXT


@dataclass(frozen=True, slots=True)
class AudioMessage:
    id: MessageId
    author: ParticipantId
    display_name: str
    payload: str
    created_at: datetime
    analysis: str | None = None

    kind = MessageKind.AUDIO


@dataclass(frozen=True, slots=True)
class VerdictMessage:
    id: MessageId
    body: str
    created_at: datetime

    kind = MessageKind.VERDICT
    author = AI_AUTHOR
    display_name = AI_DISPLAY_NAME


Message = TextMessage | AudioMessage | VerdictMessage
