"""Payloads of client → server WebSocket commands."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from debate_room.domain.topics import DEFAULT_TIMER_SECONDS


class _Command(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class _RoomCommand(_Command):
    room_id: str = Field(alias="roomId", min_length=1, max_length=128)


class CreateRoomCommand(_RoomCommand):
    topic: str = Field(min_length=1, max_length=500)
    user_id: str = Field(alias="userId", min_length=1, max_length=128)
    user_name: str = Field(alias="userName", min_length=1, max_length=64)
    timer_duration: int = Field(DEFAULT_TIMER_SECONDS, alias="timerDuration", ge=1)


class JoinRoomCommand(_RoomCommand):
    user_id: str = Field(alias="userId", min_length=1, max_length=128)
    user_name: str = Field(alias="userName", min_length=1, max_length=64)


class SendMessageCommand(_RoomCommand):
    user_id: str = Field(alias="userId", min_length=1, max_length=128)
    user_name: str | None = Field(None, alias="userName")
    text: str


class SendAudioCommand(_RoomCommand):
    user_id: str = Field(alias="userId", min_length=1, max_length=128)
    user_name: str | None = Field(None, alias="userName")
    audio: str = Field(min_length=1)


class StartTimerCommand(_RoomCommand):
    user_id: str = Field(alias="userId", min_length=1, max_length=128)


class LeaveRoomCommand(_RoomCommand):
    user_id: str = Field(alias="userId", min_length=1, max_length=128)


class AnalyzeDebateCommand(_RoomCommand):
    pass
