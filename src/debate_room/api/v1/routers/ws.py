from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import pydantic
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from debate_room.api.deps import RoomRuntime, get_runtime
from debate_room.api.middleware.correlation_id import correlation_id_ctx, new_correlation_id
from debate_room.api.v1.schemas.room import (
    AnalyzeDebateCommand,
    CreateRoomCommand,
    JoinRoomCommand,
    LeaveRoomCommand,
    SendAudioCommand,
    SendMessageCommand,
    StartTimerCommand,
)
from debate_room.application.dto.wire import message_to_wire, room_snapshot
from debate_room.application.exceptions import AppError, RoomFullError, ValidationError
from debate_room.config import settings
from debate_room.domain.entities.message import VerdictMessage
from debate_room.infrastructure.ws.protocol import WsInbound
from debate_room.services import message_service, room_service
from debate_room.services.judging_service import JudgingOutcome

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

Handler = Callable[[WebSocket, RoomRuntime, dict[str, Any]], Awaitable[None]]


@router.websocket("/ws")
async def ws_room(websocket: WebSocket) -> None:
    runtime = get_runtime(websocket)
    token = correlation_id_ctx.set(new_correlation_id())
    await runtime.manager.connect(websocket)

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket, runtime), name="ws-heartbeat",
    )
    try:
        await _read_loop(websocket, runtime)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error")
    finally:
        heartbeat_task.cancel()
        runtime.manager.disconnect(websocket)
        correlation_id_ctx.reset(token)


async def _heartbeat(ws: WebSocket, runtime: RoomRuntime) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await runtime.manager.send(ws, "pong")
    except asyncio.CancelledError:
        pass


async def _read_loop(ws: WebSocket, runtime: RoomRuntime) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except pydantic.ValidationError:
            await _send_error(ws, runtime, ValidationError("Malformed message envelope"))
            continue

        handler = _HANDLERS.get(msg.type)
        if handler is None:
            await runtime.manager.send(
                ws, "error", {"code": "unknown_type", "message": f"Unknown event {msg.type!r}"},
            )
            continue

        try:
            await handler(ws, runtime, msg.data)
        except pydantic.ValidationError as exc:
            await _send_error(ws, runtime, ValidationError(_first_error(exc)))
        except AppError as exc:
            logger.info("%s rejected: %s (%s)", msg.type, exc.code, exc.detail)
            await _send_error(ws, runtime, exc)


async def _send_error(ws: WebSocket, runtime: RoomRuntime, exc: AppError) -> None:
    """Report a rejected command to the originating socket only."""
    if isinstance(exc, RoomFullError):
        await runtime.manager.send(ws, "room-full")
        return
    await runtime.manager.send(ws, "error", {"code": exc.code, "message": exc.detail})


def _first_error(exc: pydantic.ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid")


async def _handle_ping(ws: WebSocket, runtime: RoomRuntime, data: dict[str, Any]) -> None:
    await runtime.manager.send(ws, "pong")


async def _handle_get_topics(ws: WebSocket, runtime: RoomRuntime, data: dict[str, Any]) -> None:
    await runtime.manager.send(ws, "available-topics", {"topics": room_service.list_topics()})


async def _handle_create(ws: WebSocket, runtime: RoomRuntime, data: dict[str, Any]) -> None:
    cmd = CreateRoomCommand.model_validate(data)
    if cmd.timer_duration > settings.MAX_TIMER_SECONDS:
        raise ValidationError(f"Timer duration exceeds {settings.MAX_TIMER_SECONDS} seconds")

    room = room_service.create_room(
        cmd.room_id, cmd.topic, cmd.user_id, cmd.user_name, cmd.timer_duration,
        runtime.rooms, runtime.clock,
    )
    runtime.manager.move_to_room(ws, room.id)
    await runtime.manager.send(ws, "room-data", room_snapshot(room))


async def _handle_join(ws: WebSocket, runtime: RoomRuntime, data: dict[str, Any]) -> None:
    cmd = JoinRoomCommand.model_validate(data)
    room, joined = room_service.join_room(
        cmd.room_id, cmd.user_id, cmd.user_name, runtime.rooms, runtime.clock,
    )
    runtime.manager.move_to_room(ws, room.id)
    if joined:
        # Membership changed: every member converges on the new snapshot.
        await runtime.manager.publish(room.id, "room-data", room_snapshot(room))
    else:
        await runtime.manager.send(ws, "room-data", room_snapshot(room))


async def _handle_send_message(ws: WebSocket, runtime: RoomRuntime, data: dict[str, Any]) -> None:
    cmd = SendMessageCommand.model_validate(data)
    msg = message_service.send_text(
        cmd.room_id, cmd.user_id, cmd.text, runtime.rooms, runtime.clock,
        max_length=settings.MAX_TEXT_LENGTH,
    )
    await runtime.manager.publish(cmd.room_id, "new-message", message_to_wire(msg))


async def _handle_send_audio(ws: WebSocket, runtime: RoomRuntime, data: dict[str, Any]) -> None:
    cmd = SendAudioCommand.model_validate(data)
    msg = message_service.send_audio(
        cmd.room_id, cmd.user_id, cmd.audio, runtime.rooms, runtime.clock,
        max_bytes=settings.MAX_AUDIO_BYTES,
    )
    await runtime.manager.publish(cmd.room_id, "new-audio", message_to_wire(msg))


async def _handle_start_timer(ws: WebSocket, runtime: RoomRuntime, data: dict[str, Any]) -> None:
    cmd = StartTimerCommand.model_validate(data)
    await runtime.timers.start(cmd.room_id, cmd.user_id)


async def _handle_analyze(ws: WebSocket, runtime: RoomRuntime, data: dict[str, Any]) -> None:
    cmd = AnalyzeDebateCommand.model_validate(data)
    outcome = await runtime.judging.request(cmd.room_id)
    if outcome is JudgingOutcome.ALREADY_JUDGED:
        room = room_service.get_room(cmd.room_id, runtime.rooms)
        payload: dict[str, Any] = {"winner": room.winner_verdict}
        verdict = next(
            (m for m in reversed(room.messages) if isinstance(m, VerdictMessage)), None,
        )
        if verdict is not None:
            payload["message"] = message_to_wire(verdict)
        await runtime.manager.send(ws, "ai-result", payload)


async def _handle_leave(ws: WebSocket, runtime: RoomRuntime, data: dict[str, Any]) -> None:
    cmd = LeaveRoomCommand.model_validate(data)
    room, deleted = room_service.leave_room(cmd.room_id, cmd.user_id, runtime.rooms)
    runtime.manager.unsubscribe(ws, room.id)
    if deleted:
        runtime.timers.cancel(room.id)
        runtime.manager.drop_room(room.id)
    else:
        await runtime.manager.publish(room.id, "room-data", room_snapshot(room))


_HANDLERS: dict[str, Handler] = {
    "ping": _handle_ping,
    "get-topics": _handle_get_topics,
    "create-room": _handle_create,
    "join-room": _handle_join,
    "send-message": _handle_send_message,
    "send-audio": _handle_send_audio,
    "start-timer": _handle_start_timer,
    "analyze-debate": _handle_analyze,
    "leave-room": _handle_leave,
}
