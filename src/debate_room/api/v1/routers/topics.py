from __future__ import annotations

from fastapi import APIRouter

from debate_room.api.v1.schemas.topics import TimerOption, TopicsResponse
from debate_room.domain.topics import TIMER_OPTIONS
from debate_room.services import room_service

router = APIRouter(prefix="/api/v1", tags=["topics"])


@router.get("/topics", response_model=TopicsResponse)
async def list_topics() -> TopicsResponse:
    return TopicsResponse(
        topics=room_service.list_topics(),
        timer_options=[TimerOption(value=v, label=label) for v, label in TIMER_OPTIONS],
    )
