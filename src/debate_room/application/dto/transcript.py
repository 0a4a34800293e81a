from __future__ import annotations

from dataclasses import dataclass, field

from debate_room.domain.entities.message import AudioMessage, TextMessage
from debate_room.domain.entities.room import Room


@dataclass(frozen=True, slots=True)
class TranscriptEntry:
    speaker_id: str
    speaker_name: str
    text: str | None
    has_audio: bool = False


@dataclass(frozen=True, slots=True)
class Transcript:
    room_id: str
    topic: str
    participants: dict[str, str] = field(default_factory=dict)
    entries: list[TranscriptEntry] = field(default_factory=list)

    @classmethod
    def from_room(cls, room: Room) -> Transcript:
        entries: list[TranscriptEntry] = []
        for msg in room.messages:
            if isinstance(msg, TextMessage):
                entries.append(TranscriptEntry(msg.author, msg.display_name, msg.body))
            elif isinstance(msg, AudioMessage):
                entries.append(
                    TranscriptEntry(msg.author, msg.display_name, msg.analysis, has_audio=True)
                )
        return cls(
            room_id=room.id,
            topic=room.topic,
            participants={p.id: p.name for p in room.participants.values()},
            entries=entries,
        )
