from __future__ import annotations

from enum import StrEnum


class MessageKind(StrEnum):
    TEXT = "text"
    AUDIO = "audio"
    VERDICT = "verdict"


class RoomPhase(StrEnum):
    AWAITING_SECOND_PARTICIPANT = "awaiting_second_participant"
    READY = "ready"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"
    JUDGED = "judged"
