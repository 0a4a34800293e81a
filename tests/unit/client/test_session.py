from __future__ import annotations

import pytest

from debate_room.client.identity import IdentityStore
from debate_room.client.session import DebateClient
from debate_room.client.transport import REASON_CLIENT, REASON_SERVER
from tests.conftest import FakeTransport


def _snapshot(**overrides) -> dict:
    data = {
        "roomId": "R1",
        "topic": "X",
        "messages": [],
        "users": [{"id": "me", "name": "Alice"}, {"id": "bob", "name": "Bob"}],
        "timerDuration": 120,
        "timeLeft": 120,
        "timerActive": False,
        "debateEnded": False,
        "winner": None,
    }
    data.update(overrides)
    return data


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport) -> DebateClient:
    client = DebateClient(transport, IdentityStore({"debateUserId": "me"}))  # type: ignore[arg-type]
    client.bind()
    return client


async def _joined(client: DebateClient, transport: FakeTransport, **snapshot) -> None:
    await client.join_room("R1", "Alice")
    await transport.deliver("room-data", _snapshot(**snapshot))
    transport.emitted.clear()


def test_bind_twice_keeps_one_listener_per_event(client, transport):
    client.bind()
    client.bind()

    assert transport.listener_count("new-message") == 1
    assert transport.listener_count("room-data") == 1


def test_unbind_leaves_other_subscribers(client, transport):
    other = transport.on("new-message", lambda data: None)

    client.unbind()

    assert transport.listener_count("new-message") == 1
    other.dispose()
    assert transport.listener_count("new-message") == 0


@pytest.mark.asyncio
async def test_duplicate_delivery_after_rebind_applied_once(client, transport):
    await _joined(client, transport)
    client.bind()

    await transport.deliver("new-message", {"id": "m1", "user": "bob", "userName": "Bob", "text": "hi"})

    assert [m.id for m in client.mirror.messages] == ["m1"]


@pytest.mark.asyncio
async def test_create_room_emits_command(client, transport):
    room_id = await client.create_room("Alice", "X", 300)

    event, data = transport.emitted[0]
    assert event == "create-room"
    assert data == {
        "roomId": room_id,
        "topic": "X",
        "userId": "me",
        "userName": "Alice",
        "timerDuration": 300,
    }
    assert client.connecting is True


@pytest.mark.asyncio
async def test_create_room_requires_topic(client, transport):
    assert await client.create_room("Alice", "  ") is None
    assert transport.emitted == []
    assert client.banner is not None


@pytest.mark.asyncio
async def test_room_data_marks_joined(client, transport):
    await _joined(client, transport, timerActive=True, timeLeft=42)

    assert client.joined is True
    assert client.connecting is False
    assert client.timer.time_left == 42
    assert client.timer.active is True


@pytest.mark.asyncio
async def test_room_full(client, transport):
    await client.join_room("R1", "Carol")
    await transport.deliver("room-full")

    assert client.room_full is True
    assert client.joined is False
    assert "full" in client.banner.message


@pytest.mark.asyncio
async def test_send_after_end_is_noop(client, transport):
    await _joined(client, transport)
    await transport.deliver("debate-ended")
    transport.emitted.clear()
    before = len(client.mirror.messages)

    sent = await client.send_message("one more point")
    sent_audio = await client.send_audio("data:audio/webm;base64,AAAA")

    assert (sent, sent_audio) == (False, False)
    assert "send-message" not in transport.emitted_types()
    assert len(client.mirror.messages) == before


@pytest.mark.asyncio
async def test_empty_message_not_sent(client, transport):
    await _joined(client, transport)

    assert await client.send_message("   ") is False
    assert transport.emitted == []


@pytest.mark.asyncio
async def test_send_without_connection_shows_banner(client, transport):
    await _joined(client, transport)
    transport.connected = False

    assert await client.send_message("hello") is False
    assert client.banner is not None and client.banner.persistent is False


@pytest.mark.asyncio
async def test_local_zero_does_not_request_judging(client, transport):
    await _joined(client, transport)
    await transport.deliver("timer-started", {"timeLeft": 5})

    for _ in range(5):
        if client.timer.tick():
            client._on_local_zero()

    assert client.timer.time_left == 0
    assert client.awaiting_end is True
    assert client.mirror.debate_ended is False
    assert "analyze-debate" not in transport.emitted_types()

    await transport.deliver("debate-ended")
    assert transport.emitted_types().count("analyze-debate") == 1


@pytest.mark.asyncio
async def test_both_end_signals_request_judging_once(client, transport):
    await _joined(client, transport)
    await transport.deliver("timer-started", {"timeLeft": 3})

    await transport.deliver("timer-update", {"timeLeft": 0, "timerActive": False, "debateEnded": True})
    await transport.deliver("debate-ended")
    await transport.deliver("debate-ended")

    assert transport.emitted_types().count("analyze-debate") == 1
    assert client.analyzing is True


@pytest.mark.asyncio
async def test_duplicate_ai_result_single_verdict(client, transport):
    await _joined(client, transport)
    await transport.deliver("timer-started", {"timeLeft": 3})
    await transport.deliver("debate-ended")

    result = {
        "winner": "Alice wins",
        "message": {"type": "verdict", "id": "v1", "user": "AI", "userName": "AI Judge", "text": "Alice wins"},
    }
    await transport.deliver("ai-result", result)
    await transport.deliver("ai-result", result)
    await transport.deliver("ai-result", {"winner": "Alice wins"})

    verdicts = [m for m in client.mirror.messages if m.is_verdict]
    assert len(verdicts) == 1
    assert client.mirror.winner == "Alice wins"
    assert client.analyzing is False


@pytest.mark.asyncio
async def test_rejoin_after_judged_debate_does_not_rearm(client, transport):
    verdict = {"type": "verdict", "id": "v1", "user": "AI", "userName": "AI Judge", "text": "Bob wins"}
    await _joined(client, transport, debateEnded=True, timeLeft=0, winner="Bob wins", messages=[verdict])

    await transport.deliver("room-data", _snapshot(
        debateEnded=True, timeLeft=0, winner="Bob wins", messages=[verdict],
    ))
    await transport.deliver("debate-ended")

    assert "analyze-debate" not in transport.emitted_types()


@pytest.mark.asyncio
async def test_rejoin_after_unjudged_end_requests_once(client, transport):
    await client.join_room("R1", "Alice")
    await transport.deliver("room-data", _snapshot(debateEnded=True, timeLeft=0))
    await transport.deliver("room-data", _snapshot(debateEnded=True, timeLeft=0))

    assert transport.emitted_types().count("analyze-debate") == 1


@pytest.mark.asyncio
async def test_new_timer_start_rearms_guard(client, transport):
    await _joined(client, transport)
    client.guard.try_fire()
    await transport.deliver("timer-started", {"timeLeft": 3})

    assert client.guard.fired is False
    assert client.timer.active is True


@pytest.mark.asyncio
async def test_judge_failure_allows_manual_retry(client, transport):
    await _joined(client, transport)
    await transport.deliver("timer-started", {"timeLeft": 3})
    await transport.deliver("debate-ended")
    await transport.deliver("error", {"code": "judge_failed", "message": "AI analysis failed"})

    assert client.analyzing is False
    assert await client.request_judging() is True
    assert transport.emitted_types().count("analyze-debate") == 2


@pytest.mark.asyncio
async def test_reconnect_rejoins_and_keeps_state(client, transport):
    await _joined(client, transport)
    await transport.deliver("new-message", {"id": "m1", "user": "bob", "userName": "Bob", "text": "hi"})

    await transport.deliver("disconnect", {"reason": REASON_SERVER})
    assert client.banner is not None
    await transport.deliver("connect")

    assert client.banner is None
    assert transport.emitted_types() == ["get-topics", "join-room"]
    assert [m.id for m in client.mirror.messages] == ["m1"]


@pytest.mark.asyncio
async def test_client_disconnect_shows_no_banner(client, transport):
    await transport.deliver("disconnect", {"reason": REASON_CLIENT})

    assert client.banner is None


@pytest.mark.asyncio
async def test_reconnect_failed_is_persistent(client, transport):
    await _joined(client, transport)
    await transport.deliver("reconnect_failed")
    await transport.deliver("error", {"message": "something else"})

    assert client.banner.persistent is True
    assert client.joined is True
    assert client.mirror.room_id == "R1"


@pytest.mark.asyncio
async def test_leave_room_clears_local_state(client, transport):
    await _joined(client, transport)

    await client.leave_room()

    assert transport.emitted == [("leave-room", {"roomId": "R1", "userId": "me"})]
    assert client.joined is False
    assert client.mirror.room_id is None
    assert client.mirror.messages == []


@pytest.mark.asyncio
async def test_topics(client, transport):
    await transport.deliver("available-topics", {"topics": ["A", "B"]})

    assert client.available_topics == ["A", "B"]


@pytest.mark.asyncio
async def test_start_timer(client, transport):
    await _joined(client, transport)

    assert await client.start_timer() is True
    assert transport.emitted == [("start-timer", {"roomId": "R1", "userId": "me"})]
