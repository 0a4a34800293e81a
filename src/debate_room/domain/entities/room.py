from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from debate_room.domain.entities.message import Message, VerdictMessage
from debate_room.domain.entities.participant import Participant
from debate_room.domain.value_objects.enums import RoomPhase
from debate_room.domain.value_objects.ids import ParticipantId, RoomId

MAX_PARTICIPANTS = 2


class RoomStateError(Exception):
    """A transition that the room's current state does not allow."""


@dataclass(slots=True)
class Room:
    """Authoritative state of one debate.

    Mutations go through the methods below so the state-machine invariants
    hold: ``timer_active`` implies not ``debate_ended``, ``debate_ended`` never
    goes back to False and ``winner_verdict`` is written once.
    """

    id: RoomId
    topic: str
    timer_duration: int
    created_at: datetime
    time_left: int = 0
    timer_active: bool = False
    debate_ended: bool = False
    winner_verdict: str | None = None
    participants: dict[ParticipantId, Participant] = field(default_factory=dict)
    messages: list[Message] = field(default_factory=list)
    timer_epoch: int = 0
    judging_epoch: int | None = None

    def __post_init__(self) -> None:
        if self.timer_duration <= 0:
            raise ValueError("timer_duration must be positive")
        if not self.time_left:
            self.time_left = self.timer_duration

    @property
    def phase(self) -> RoomPhase:
        if self.winner_verdict is not None:
            return RoomPhase.JUDGED
        if self.debate_ended:
            return RoomPhase.ENDED
        if self.timer_active:
            return RoomPhase.IN_PROGRESS
        if len(self.participants) < MAX_PARTICIPANTS:
            return RoomPhase.AWAITING_SECOND_PARTICIPANT
        return RoomPhase.READY

    @property
    def is_full(self) -> bool:
        return len(self.participants) >= MAX_PARTICIPANTS

    def is_member(self, participant_id: str) -> bool:
        return participant_id in self.participants

    def add_participant(self, participant: Participant) -> bool:
        """Add a participant; returns False when they were already a member."""
        if participant.id in self.participants:
            return False
        if self.is_full:
            raise RoomStateError("room is full")
        self.participants[participant.id] = participant
        return True

    def remove_participant(self, participant_id: str) -> bool:
        return self.participants.pop(ParticipantId(participant_id), None) is not None

    def start_timer(self) -> int:
        """Begin a new debate instance and return its epoch."""
        if self.debate_ended:
            raise RoomStateError("debate already ended")
        if self.timer_active:
            raise RoomStateError("timer already running")
        self.timer_epoch += 1
        self.time_left = self.timer_duration
        self.timer_active = True
        return self.timer_epoch

    def tick(self) -> bool:
        """Advance the countdown by one second; returns True when it hits zero."""
        if not self.timer_active:
            return False
        self.time_left = max(self.time_left - 1, 0)
        if self.time_left == 0:
            self.end()
            return True
        return False

    def end(self) -> None:
        self.timer_active = False
        self.time_left = 0
        self.debate_ended = True

    def append(self, message: Message) -> None:
        self.messages.append(message)

    def claim_judging(self) -> bool:
        """Compare-and-set the judging latch for the current debate instance."""
        if not self.debate_ended or self.winner_verdict is not None:
            return False
        if self.judging_epoch == self.timer_epoch:
            return False
        self.judging_epoch = self.timer_epoch
        return True

    def release_judging(self) -> None:
        if self.winner_verdict is None:
            self.judging_epoch = None

    def record_verdict(self, verdict: VerdictMessage) -> None:
        if not self.debate_ended:
            raise RoomStateError("verdict before debate ended")
        if self.winner_verdict is not None:
            raise RoomStateError("verdict already recorded")
        self.winner_verdict = verdict.body
        self.messages.append(verdict)
