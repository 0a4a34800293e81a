from __future__ import annotations

import asyncio

import pytest

from debate_room.application.exceptions import DebateInProgressError, RoomNotFoundError
from debate_room.domain.entities.message import VerdictMessage
from debate_room.services import message_service
from debate_room.services.judging_service import JudgingOutcome, JudgingService
from tests.conftest import make_room


def _ended_room(rooms, room_id="R1"):
    room = make_room(room_id=room_id, timer_duration=1, members=(("a", "Alice"), ("b", "Bob")))
    room.start_timer()
    room.tick()
    rooms.add(room)
    return room


@pytest.fixture
def judging(rooms, publisher, judge, clock):
    return JudgingService(rooms, publisher, judge, clock)


@pytest.mark.asyncio
async def test_first_request_judges_and_broadcasts(rooms, publisher, judge, judging):
    room = _ended_room(rooms)

    outcome = await judging.request("R1")
    await judging.drain()

    assert outcome is JudgingOutcome.STARTED
    assert len(judge.calls) == 1
    assert room.winner_verdict == judge.verdict
    verdicts = [m for m in room.messages if isinstance(m, VerdictMessage)]
    assert len(verdicts) == 1
    results = publisher.of_type("ai-result")
    assert len(results) == 1
    assert results[0]["winner"] == judge.verdict
    assert results[0]["message"]["user"] == "AI"
    assert results[0]["message"]["id"] == verdicts[0].id


@pytest.mark.asyncio
async def test_racing_requests_call_judge_once(rooms, publisher, judge, judging):
    _ended_room(rooms)
    judge.gate = asyncio.Event()

    first = await judging.request("R1")
    second = await judging.request("R1")
    judge.gate.set()
    await judging.drain()
    third = await judging.request("R1")

    assert first is JudgingOutcome.STARTED
    assert second is JudgingOutcome.IN_PROGRESS
    assert third is JudgingOutcome.ALREADY_JUDGED
    assert len(judge.calls) == 1
    assert len(publisher.of_type("ai-result")) == 1


@pytest.mark.asyncio
async def test_request_before_end_rejected(rooms, judge, judging):
    room = make_room(room_id="R1")
    room.start_timer()
    rooms.add(room)

    with pytest.raises(DebateInProgressError):
        await judging.request("R1")
    assert judge.calls == []


@pytest.mark.asyncio
async def test_unknown_room(judging):
    with pytest.raises(RoomNotFoundError):
        await judging.request("nope")


@pytest.mark.asyncio
async def test_judge_failure_releases_latch(rooms, publisher, judge, judging):
    room = _ended_room(rooms)
    judge.fail_with = RuntimeError("model offline")

    await judging.request("R1")
    await judging.drain()

    assert room.winner_verdict is None
    errors = publisher.of_type("error")
    assert errors and errors[0]["code"] == "judge_failed"

    judge.fail_with = None
    assert await judging.request("R1") is JudgingOutcome.STARTED
    await judging.drain()
    assert room.winner_verdict == judge.verdict
    assert len(judge.calls) == 2


@pytest.mark.asyncio
async def test_verdict_dropped_when_room_deleted(rooms, publisher, judge, judging):
    _ended_room(rooms)
    judge.gate = asyncio.Event()

    await judging.request("R1")
    rooms.remove("R1")
    judge.gate.set()
    await judging.drain()

    assert publisher.of_type("ai-result") == []


@pytest.mark.asyncio
async def test_transcript_carries_arguments(rooms, clock, judge, judging):
    room = make_room(room_id="R1", timer_duration=1, members=(("a", "Alice"), ("b", "Bob")))
    rooms.add(room)

    message_service.send_text("R1", "a", "AI needs rules", rooms, clock, max_length=100)
    room.start_timer()
    room.tick()

    await judging.request("R1")
    await judging.drain()

    transcript = judge.calls[0]
    assert transcript.topic == room.topic
    assert transcript.participants == {"a": "Alice", "b": "Bob"}
    assert [e.text for e in transcript.entries] == ["AI needs rules"]
