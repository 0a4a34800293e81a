"""Single-shot judging per debate instance.

Clients may each request judging when they see the debate end; the room's
compare-and-set latch makes every request after the first a no-op, so only one
judge call takes effect per timer epoch.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from enum import StrEnum

from debate_room.application.dto.transcript import Transcript
from debate_room.application.dto.wire import message_to_wire
from debate_room.application.exceptions import DebateInProgressError, JudgeError
from debate_room.application.policies.permissions import assert_room_exists
from debate_room.application.ports.bus import EventPublisher
from debate_room.application.ports.clock import Clock
from debate_room.application.ports.judge import Judge
from debate_room.application.repositories.room import RoomRepository
from debate_room.domain.entities.message import VerdictMessage
from debate_room.domain.value_objects.ids import MessageId

logger = logging.getLogger(__name__)


class JudgingOutcome(StrEnum):
    STARTED = "started"
    IN_PROGRESS = "in_progress"
    ALREADY_JUDGED = "already_judged"


class JudgingService:
    def __init__(
        self,
        rooms: RoomRepository,
        publisher: EventPublisher,
        judge: Judge,
        clock: Clock,
    ) -> None:
        self._rooms = rooms
        self._publisher = publisher
        self._judge = judge
        self._clock = clock
        self._tasks: set[asyncio.Task[None]] = set()

    async def request(self, room_id: str) -> JudgingOutcome:
        room = assert_room_exists(self._rooms.get(room_id))
        if not room.debate_ended:
            raise DebateInProgressError("Debate is still in progress")
        if room.winner_verdict is not None:
            return JudgingOutcome.ALREADY_JUDGED
        if not room.claim_judging():
            logger.debug("Judging already in flight for room %s", room_id)
            return JudgingOutcome.IN_PROGRESS

        epoch = room.timer_epoch
        logger.info("Judging started: room=%s epoch=%d", room_id, epoch)
        task = asyncio.create_task(self._run(room_id, epoch), name=f"judge-{room_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return JudgingOutcome.STARTED

    async def drain(self) -> None:
        """Wait for in-flight judge calls to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def stop(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.drain()

    async def _run(self, room_id: str, epoch: int) -> None:
        room = self._rooms.get(room_id)
        if room is None:
            return
        transcript = Transcript.from_room(room)
        try:
            verdict = (await self._judge.judge(transcript)).strip()
            if not verdict:
                raise JudgeError("Judge returned an empty verdict")
        except asyncio.CancelledError:
            room.release_judging()
            raise
        except Exception as exc:
            logger.exception("Judging failed for room %s", room_id)
            room.release_judging()
            await self._publisher.publish(
                room_id,
                "error",
                {"code": JudgeError.code, "message": f"AI analysis failed: {exc}"},
            )
            return

        # The room may have been deleted while the judge was running.
        if self._rooms.get(room_id) is not room or room.timer_epoch != epoch:
            logger.info("Dropping verdict for stale room %s", room_id)
            return

        msg = VerdictMessage(
            id=MessageId(str(uuid.uuid4())),
            body=verdict,
            created_at=self._clock.now(),
        )
        room.record_verdict(msg)
        logger.info("Verdict recorded: room=%s", room_id)
        await self._publisher.publish(
            room_id, "ai-result", {"winner": verdict, "message": message_to_wire(msg)},
        )
