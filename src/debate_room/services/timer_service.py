"""Server-side countdown: the only source of truth for remaining time."""
from __future__ import annotations

import asyncio
import logging

from debate_room.application.dto.wire import timer_snapshot
from debate_room.application.ports.bus import EventPublisher
from debate_room.application.repositories.room import RoomRepository
from debate_room.domain.entities.room import Room
from debate_room.services import room_service

logger = logging.getLogger(__name__)


class RoomTimerService:
    """Runs one countdown task per room and broadcasts its progress."""

    def __init__(
        self,
        rooms: RoomRepository,
        publisher: EventPublisher,
        *,
        tick_seconds: float = 1.0,
    ) -> None:
        self._rooms = rooms
        self._publisher = publisher
        self._tick_seconds = tick_seconds
        self._tasks: dict[str, asyncio.Task[None]] = {}

    async def start(self, room_id: str, user_id: str) -> Room:
        room = room_service.assert_can_start(room_id, user_id, self._rooms)
        epoch = room.start_timer()
        logger.info("Timer started: room=%s epoch=%d duration=%ds", room_id, epoch, room.timer_duration)

        await self._publisher.publish(room_id, "timer-started", {"timeLeft": room.time_left})
        self._tasks[room_id] = asyncio.create_task(
            self._run(room_id, epoch), name=f"room-timer-{room_id}",
        )
        return room

    def is_running(self, room_id: str) -> bool:
        task = self._tasks.get(room_id)
        return task is not None and not task.done()

    def cancel(self, room_id: str) -> None:
        task = self._tasks.pop(room_id, None)
        if task is not None and not task.done():
            task.cancel()
            logger.info("Timer cancelled: room=%s", room_id)

    async def stop(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, room_id: str, epoch: int) -> None:
        try:
            while True:
                await asyncio.sleep(self._tick_seconds)
                room = self._rooms.get(room_id)
                if room is None or room.timer_epoch != epoch or not room.timer_active:
                    return

                expired = room.tick()
                await self._publisher.publish(room_id, "timer-update", timer_snapshot(room))
                if expired:
                    logger.info("Debate ended: room=%s epoch=%d", room_id, epoch)
                    await self._publisher.publish(room_id, "debate-ended", {})
                    return
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Timer loop failed for room %s", room_id)
        finally:
            if self._tasks.get(room_id) is asyncio.current_task():
                del self._tasks[room_id]
