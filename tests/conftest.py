"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import base64
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from debate_room.application.dto.transcript import Transcript
from debate_room.client.exceptions import TransportUnavailableError
from debate_room.client.transport import Subscription
from debate_room.domain.entities.participant import Participant
from debate_room.domain.entities.room import Room
from debate_room.domain.value_objects.ids import ParticipantId, RoomId
from debate_room.infrastructure.memory.room_repository import InMemoryRoomRepository

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def audio_payload(size: int = 16) -> str:
    return "data:audio/webm;base64," + base64.b64encode(b"\x01" * size).decode()


def make_room(
    *,
    room_id: str = "room-1",
    topic: str = "Is remote work better than office work?",
    timer_duration: int = 120,
    members: tuple[tuple[str, str], ...] = (("alice-id", "Alice"),),
) -> Room:
    room = Room(id=RoomId(room_id), topic=topic, timer_duration=timer_duration, created_at=T0)
    for pid, name in members:
        room.add_participant(Participant(id=ParticipantId(pid), name=name, joined_at=T0))
    return room


@dataclass
class FakeClock:
    current: datetime = T0

    def now(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@dataclass
class FakePublisher:
    events: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    async def publish(self, room_id: str, event_type: str, data: dict[str, Any]) -> None:
        self.events.append((room_id, event_type, data))

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [data for _, et, data in self.events if et == event_type]

    def types(self) -> list[str]:
        return [et for _, et, _ in self.events]


@dataclass
class FakeJudge:
    verdict: str = "Alice wins the debate."
    fail_with: Exception | None = None
    calls: list[Transcript] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def judge(self, transcript: Transcript) -> str:
        self.calls.append(transcript)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return self.verdict


class FakeTransport:
    """Stands in for TransportSession: records emits, lets tests deliver events."""

    def __init__(self, *, connected: bool = True) -> None:
        self.url = "ws://test/ws"
        self.connected = connected
        self.emitted: list[tuple[str, dict[str, Any]]] = []
        self._handlers: dict[str, list[Subscription]] = {}
        self.connect_calls = 0

    async def connect(self) -> FakeTransport:
        self.connect_calls += 1
        return self

    def on(self, event: str, handler: Any) -> Subscription:
        sub = Subscription(self, event, handler)  # type: ignore[arg-type]
        self._handlers.setdefault(event, []).append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        self._handlers[sub.event].remove(sub)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    async def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        if not self.connected:
            raise TransportUnavailableError("Not connected to server")
        self.emitted.append((event, data or {}))

    async def deliver(self, event: str, data: dict[str, Any] | None = None) -> None:
        for sub in list(self._handlers.get(event, ())):
            result = sub.handler(data or {})
            if asyncio.iscoroutine(result):
                await result

    def emitted_types(self) -> list[str]:
        return [e for e, _ in self.emitted]


@pytest.fixture
def rooms() -> InMemoryRoomRepository:
    return InMemoryRoomRepository()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def judge() -> FakeJudge:
    return FakeJudge()
