"""WebSocket envelope ``{"type": ..., "data": {...}}``, shared by server and client."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Envelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = Field(min_length=1, max_length=64)
    data: dict[str, Any] = Field(default_factory=dict)


class WsInbound(_Envelope):
    """Client → Server: create-room, join-room, send-message, start-timer, ..."""


class WsOutbound(_Envelope):
    """Server → Client: room-data, new-message, timer-update, ai-result, ..."""


def encode_outbound(event_type: str, data: dict[str, Any] | None = None) -> str:
    return WsOutbound(type=event_type, data=data or {}).model_dump_json()


def encode_inbound(event_type: str, data: dict[str, Any] | None = None) -> str:
    return WsInbound(type=event_type, data=data or {}).model_dump_json()
