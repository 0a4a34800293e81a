from __future__ import annotations

from fastapi import APIRouter

from debate_room.api.deps import RuntimeDep
from debate_room.api.v1.schemas.room_summary import ParticipantResponse, RoomSummaryResponse
from debate_room.services import room_service

router = APIRouter(prefix="/api/v1/rooms", tags=["rooms"])


@router.get("/{room_id}", response_model=RoomSummaryResponse)
async def get_room(room_id: str, runtime: RuntimeDep) -> RoomSummaryResponse:
    """Lightweight room lookup used before joining; the log itself travels over WS."""
    room = room_service.get_room(room_id, runtime.rooms)
    return RoomSummaryResponse(
        id=room.id,
        topic=room.topic,
        phase=room.phase.value,
        users=[ParticipantResponse(id=p.id, name=p.name) for p in room.participants.values()],
        timer_duration=room.timer_duration,
        time_left=room.time_left,
        timer_active=room.timer_active,
        debate_ended=room.debate_ended,
        winner=room.winner_verdict,
        message_count=len(room.messages),
    )
