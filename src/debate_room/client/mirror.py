"""Client-side copy of a room, kept in step with server events."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from debate_room.domain.value_objects.enums import MessageKind
from debate_room.domain.value_objects.ids import AI_AUTHOR, AI_DISPLAY_NAME


@dataclass(frozen=True, slots=True)
class ChatEntry:
    id: str
    kind: str
    user: str
    user_name: str
    text: str
    timestamp: str | None = None
    audio: str | None = None
    analysis: str | None = None

    @property
    def is_verdict(self) -> bool:
        return self.user == AI_AUTHOR

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> ChatEntry:
        return cls(
            id=str(data.get("id") or uuid.uuid4()),
            kind=data.get("type") or (MessageKind.AUDIO if data.get("audio") else MessageKind.TEXT),
            user=str(data.get("user", "")),
            user_name=str(data.get("userName", "")),
            text=data.get("text") or "",
            timestamp=data.get("timestamp"),
            audio=data.get("audio"),
            analysis=data.get("analysis"),
        )


@dataclass(frozen=True, slots=True)
class RoomUser:
    id: str
    name: str


@dataclass(slots=True)
class RoomMirror:
    """Local mirror of one room.

    Full snapshots replace everything at once; incremental events merge into
    what is already here and are dropped when already applied.
    """

    room_id: str | None = None
    topic: str = ""
    messages: list[ChatEntry] = field(default_factory=list)
    users: list[RoomUser] = field(default_factory=list)
    timer_duration: int = 0
    time_left: int = 0
    timer_active: bool = False
    debate_ended: bool = False
    winner: str | None = None
    _ids: set[str] = field(default_factory=set)

    def apply_snapshot(self, data: dict[str, Any]) -> None:
        room_id = data.get("roomId") or self.room_id
        messages = []
        ids: set[str] = set()
        for raw in data.get("messages") or []:
            entry = ChatEntry.from_wire(raw)
            if entry.id in ids:
                continue
            ids.add(entry.id)
            messages.append(entry)
        users = [RoomUser(id=str(u["id"]), name=str(u.get("name", ""))) for u in data.get("users") or []]
        timer_duration = int(data.get("timerDuration") or 0)
        time_left = max(int(data.get("timeLeft", timer_duration) or 0), 0)

        ended = bool(data.get("debateEnded"))
        if room_id == self.room_id and self.debate_ended:
            ended = True

        self.room_id = room_id
        self.topic = data.get("topic") or ""
        self.messages = messages
        self._ids = ids
        self.users = users
        self.timer_duration = timer_duration
        self.time_left = 0 if ended else time_left
        self.timer_active = bool(data.get("timerActive")) and not ended
        self.debate_ended = ended
        self.winner = data.get("winner") or None

    def append_message(self, data: dict[str, Any]) -> bool:
        """Append an incoming message unless one with the same id is present."""
        entry = ChatEntry.from_wire(data)
        if entry.id in self._ids:
            return False
        self._ids.add(entry.id)
        self.messages.append(entry)
        return True

    def apply_timer_update(self, data: dict[str, Any]) -> None:
        if data.get("debateEnded"):
            self.mark_ended()
            return
        if self.debate_ended:
            return
        self.time_left = max(int(data.get("timeLeft", self.time_left)), 0)
        self.timer_active = bool(data.get("timerActive"))

    def apply_timer_started(self, data: dict[str, Any]) -> bool:
        """Returns False when ignored because the debate already ended."""
        if self.debate_ended:
            return False
        self.time_left = max(int(data.get("timeLeft", self.timer_duration)), 0)
        self.timer_active = True
        return True

    def mark_ended(self) -> None:
        self.debate_ended = True
        self.timer_active = False
        self.time_left = 0

    def apply_ai_result(self, winner: str, message: dict[str, Any] | None = None) -> bool:
        """Record the verdict and add its chat entry once.

        Returns True when a verdict entry was appended.
        """
        if self.winner is None:
            self.winner = winner
        elif self.winner != winner:
            return False
        if any(m.is_verdict and m.text == winner for m in self.messages):
            return False
        if message is not None:
            entry = ChatEntry.from_wire(message)
            if entry.id in self._ids:
                return False
        else:
            entry = ChatEntry(
                id=str(uuid.uuid4()),
                kind=MessageKind.VERDICT,
                user=AI_AUTHOR,
                user_name=AI_DISPLAY_NAME,
                text=winner,
                timestamp=datetime.now(timezone.utc).isoformat(),
            )
        self._ids.add(entry.id)
        self.messages.append(entry)
        return True

    def clear(self) -> None:
        self.room_id = None
        self.topic = ""
        self.messages = []
        self._ids = set()
        self.users = []
        self.timer_duration = 0
        self.time_left = 0
        self.timer_active = False
        self.debate_ended = False
        self.winner = None
