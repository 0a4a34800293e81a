from __future__ import annotations

from pydantic import BaseModel


class ParticipantResponse(BaseModel):
    id: str
    name: str


class RoomSummaryResponse(BaseModel):
    id: str
    topic: str
    phase: str
    users: list[ParticipantResponse]
    timer_duration: int
    time_left: int
    timer_active: bool
    debate_ended: bool
    winner: str | None
    message_count: int
