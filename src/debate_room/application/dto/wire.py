"""Mapping from domain objects to the JSON shapes clients receive."""
from __future__ import annotations

from typing import Any

from debate_room.domain.entities.message import (
    AudioMessage,
    Message,
    TextMessage,
    VerdictMessage,
)
from debate_room.domain.entities.room import Room


def message_to_wire(msg: Message) -> dict[str, Any]:
    data: dict[str, Any] = {
        "type": msg.kind.value,
        "id": msg.id,
        "user": msg.author,
        "userName": msg.display_name,
        "timestamp": msg.created_at.isoformat(),
    }
    if isinstance(msg, TextMessage):
        data["text"] = msg.body
    elif isinstance(msg, AudioMessage):
        data["text"] = ""
        data["audio"] = msg.payload
        if msg.analysis is not None:
            data["analysis"] = msg.analysis
    elif isinstance(msg, VerdictMessage):
        data["text"] = msg.body
    return data


def timer_snapshot(room: Room) -> dict[str, Any]:
    return {
        "timeLeft": room.time_left,
        "timerActive": room.timer_active,
        "debateEnded": room.debate_ended,
    }


def room_snapshot(room: Room) -> dict[str, Any]:
    return {
        "roomId": room.id,
        "topic": room.topic,
        "messages": [message_to_wire(m) for m in room.messages],
        "users": [{"id": p.id, "name": p.name} for p in room.participants.values()],
        "timerDuration": room.timer_duration,
        **timer_snapshot(room),
        "winner": room.winner_verdict,
    }
