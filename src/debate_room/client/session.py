"""Client session: local room view driven by server events."""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any

from debate_room.client.audio import AudioRecorder
from debate_room.client.exceptions import TransportUnavailableError
from debate_room.client.guard import JudgingGuard
from debate_room.client.identity import IdentityStore
from debate_room.client.mirror import RoomMirror
from debate_room.client.timer import TimerSynchronizer
from debate_room.client.transport import REASON_CLIENT, Subscription, TransportSession
from debate_room.domain.topics import DEFAULT_TIMER_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Banner:
    """User-visible error. Transient banners clear on the next good event."""

    message: str
    persistent: bool = False


class DebateClient:
    """Mirrors one room for one participant.

    All room state arrives from the server; the local commands only emit.
    Sends are fire-and-forget: success shows up as the matching broadcast.
    """

    def __init__(
        self,
        transport: TransportSession,
        identity: IdentityStore | None = None,
        *,
        recorder: AudioRecorder | None = None,
        tick_seconds: float = 1.0,
    ) -> None:
        self.transport = transport
        self.user_id = (identity or IdentityStore()).get_or_create()
        self.recorder = recorder or AudioRecorder(None)
        self.mirror = RoomMirror()
        self.timer = TimerSynchronizer()
        self.guard = JudgingGuard()

        self.room_id: str | None = None
        self.user_name = ""
        self.joined = False
        self.connecting = False
        self.room_full = False
        self.analyzing = False
        self.awaiting_end = False
        self.available_topics: list[str] = []
        self.banner: Banner | None = None

        self._tick_seconds = tick_seconds
        self._subscriptions: list[Subscription] = []
        self._clock_task: asyncio.Task[None] | None = None

    # lifecycle

    def bind(self) -> None:
        """(Re)register every handler, dropping any from a previous bind."""
        self.unbind()
        handlers = {
            "connect": self._on_connect,
            "disconnect": self._on_disconnect,
            "reconnect_failed": self._on_reconnect_failed,
            "available-topics": self._on_topics,
            "room-full": self._on_room_full,
            "room-data": self._on_room_data,
            "timer-update": self._on_timer_update,
            "timer-started": self._on_timer_started,
            "debate-ended": self._on_debate_ended,
            "new-message": self._on_new_message,
            "new-audio": self._on_new_message,
            "ai-result": self._on_ai_result,
            "error": self._on_error,
        }
        self._subscriptions = [self.transport.on(event, h) for event, h in handlers.items()]

    def unbind(self) -> None:
        for sub in self._subscriptions:
            sub.dispose()
        self._subscriptions = []

    async def start(self) -> None:
        self.bind()
        await self.transport.connect()
        if self._clock_task is None or self._clock_task.done():
            self._clock_task = asyncio.create_task(
                self.timer.run(self._on_local_zero, interval=self._tick_seconds),
                name="debate-clock",
            )

    async def close(self) -> None:
        self.unbind()
        if self._clock_task is not None:
            self._clock_task.cancel()
            try:
                await self._clock_task
            except asyncio.CancelledError:
                pass
            self._clock_task = None

    # commands

    async def request_topics(self) -> bool:
        return await self._emit("get-topics")

    async def create_room(
        self,
        name: str,
        topic: str,
        timer_duration: int = DEFAULT_TIMER_SECONDS,
        *,
        room_id: str | None = None,
    ) -> str | None:
        if not name.strip():
            self._flash("Please enter your name")
            return None
        if not topic.strip():
            self._flash("Please select or enter a topic")
            return None

        room_id = room_id or str(uuid.uuid4())
        self.user_name = name.strip()
        self.room_id = room_id
        self.connecting = True
        self.room_full = False
        sent = await self._emit("create-room", {
            "roomId": room_id,
            "topic": topic.strip(),
            "userId": self.user_id,
            "userName": self.user_name,
            "timerDuration": timer_duration,
        })
        if not sent:
            self.connecting = False
            return None
        return room_id

    async def join_room(self, room_id: str, name: str) -> bool:
        if not room_id.strip() or not name.strip():
            self._flash("Please enter your name and a room id")
            return False
        self.room_id = room_id.strip()
        self.user_name = name.strip()
        self.connecting = True
        self.room_full = False
        sent = await self._emit("join-room", {
            "roomId": self.room_id, "userId": self.user_id, "userName": self.user_name,
        })
        if not sent:
            self.connecting = False
        return sent

    async def send_message(self, text: str) -> bool:
        if not text.strip() or not self._can_post():
            return False
        return await self._emit("send-message", {
            "roomId": self.room_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "text": text,
        })

    async def send_audio(self, audio: str | None = None) -> bool:
        """Send ``audio`` or, when omitted, the recorder's pending payload."""
        if not self._can_post():
            return False
        payload = audio if audio is not None else self.recorder.take()
        if not payload:
            return False
        return await self._emit("send-audio", {
            "roomId": self.room_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "audio": payload,
        })

    async def start_timer(self) -> bool:
        if not self.joined or self.mirror.debate_ended or self.mirror.timer_active:
            return False
        return await self._emit("start-timer", {"roomId": self.room_id, "userId": self.user_id})

    async def request_judging(self) -> bool:
        """Ask the server to judge the ended debate, at most once per debate."""
        if not self.room_id or not self.mirror.debate_ended or self.mirror.winner:
            return False
        if not self.guard.try_fire():
            return False
        self.analyzing = True
        logger.info("Requesting judging for room %s", self.room_id)
        if not await self._emit("analyze-debate", {"roomId": self.room_id}):
            self.guard.release()
            self.analyzing = False
            return False
        return True

    async def leave_room(self) -> None:
        if self.room_id and self.joined and self.transport.connected:
            await self._emit("leave-room", {"roomId": self.room_id, "userId": self.user_id})
        self.room_id = None
        self.user_name = ""
        self.joined = False
        self.connecting = False
        self.analyzing = False
        self.awaiting_end = False
        self.mirror.clear()
        self.timer.freeze()
        self.guard.rearm()

    # event handlers

    async def _on_connect(self, data: dict[str, Any]) -> None:
        self.banner = None
        await self._emit("get-topics")
        if self.room_id and self.user_name and (self.joined or self.connecting):
            # Rejoin is idempotent server-side and answers with a full snapshot.
            await self._emit("join-room", {
                "roomId": self.room_id, "userId": self.user_id, "userName": self.user_name,
            })

    def _on_disconnect(self, data: dict[str, Any]) -> None:
        if data.get("reason") != REASON_CLIENT:
            self._flash("Disconnected from server. Attempting to reconnect...")

    def _on_reconnect_failed(self, data: dict[str, Any]) -> None:
        self.banner = Banner("Could not reconnect to the server.", persistent=True)
        self.connecting = False

    def _on_topics(self, data: dict[str, Any]) -> None:
        self.available_topics = list(data.get("topics") or [])

    def _on_room_full(self, data: dict[str, Any]) -> None:
        self._flash("Room is full (maximum 2 participants allowed)")
        self.room_full = True
        self.joined = False
        self.connecting = False

    async def _on_room_data(self, data: dict[str, Any]) -> None:
        self.mirror.apply_snapshot(data)
        self.room_id = self.mirror.room_id
        self.timer.seed(self.mirror.time_left, self.mirror.timer_active)
        self.joined = True
        self.connecting = False
        self.room_full = False
        self.awaiting_end = False
        self.banner = None

        if self.mirror.winner:
            self.guard.settle()
            self.analyzing = False
        elif self.mirror.debate_ended:
            await self.request_judging()

    async def _on_timer_update(self, data: dict[str, Any]) -> None:
        self.mirror.apply_timer_update(data)
        self.timer.seed(self.mirror.time_left, self.mirror.timer_active)
        if self.mirror.debate_ended:
            await self._on_end()

    def _on_timer_started(self, data: dict[str, Any]) -> None:
        if not self.mirror.apply_timer_started(data):
            return
        self.guard.rearm()
        self.awaiting_end = False
        self.timer.seed(self.mirror.time_left, True)

    async def _on_debate_ended(self, data: dict[str, Any]) -> None:
        self.mirror.mark_ended()
        await self._on_end()

    async def _on_end(self) -> None:
        self.timer.freeze()
        self.awaiting_end = False
        if self.mirror.winner:
            return
        await self.request_judging()

    def _on_new_message(self, data: dict[str, Any]) -> None:
        self.mirror.append_message(data)

    def _on_ai_result(self, data: dict[str, Any]) -> None:
        winner = data.get("winner")
        if not winner:
            return
        self.mirror.apply_ai_result(winner, data.get("message"))
        self.guard.settle()
        self.analyzing = False

    def _on_error(self, data: dict[str, Any]) -> None:
        message = data.get("message") or "Unexpected server error"
        logger.warning("Server error: %s (%s)", message, data.get("code"))
        self._flash(message)
        self.connecting = False
        if self.analyzing and data.get("code") == "judge_failed":
            # The server released its latch; a manual request_judging() may retry.
            self.guard.release()
        self.analyzing = False

    def _on_local_zero(self) -> None:
        # Display frozen at 0:00; the server's end event decides the rest.
        self.awaiting_end = True

    # helpers

    def _can_post(self) -> bool:
        return bool(self.room_id) and self.joined and not self.mirror.debate_ended

    def _flash(self, message: str) -> None:
        if self.banner is not None and self.banner.persistent:
            return
        self.banner = Banner(message)

    async def _emit(self, event: str, data: dict[str, Any] | None = None) -> bool:
        try:
            await self.transport.emit(event, data)
        except TransportUnavailableError as exc:
            logger.warning("%s not sent: %s", event, exc.detail)
            self._flash("Not connected to server. Please try again.")
            return False
        return True
