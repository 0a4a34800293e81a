from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from debate_room.domain.value_objects.ids import ParticipantId


@dataclass(frozen=True, slots=True)
class Participant:
    id: ParticipantId
    name: str
    joined_at: datetime
