"""FastAPI dependency injection helpers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from debate_room.application.ports.clock import Clock
from debate_room.application.ports.judge import Judge
from debate_room.application.repositories.room import RoomRepository
from debate_room.infrastructure.ws.manager import ConnectionManager
from debate_room.services.judging_service import JudgingService
from debate_room.services.timer_service import RoomTimerService


@dataclass(slots=True)
class RoomRuntime:
    """Process-wide room state and the services acting on it."""

    rooms: RoomRepository
    manager: ConnectionManager
    clock: Clock
    judge: Judge
    timers: RoomTimerService
    judging: JudgingService


def get_runtime(conn: HTTPConnection) -> RoomRuntime:
    """Works for both HTTP requests and WebSocket connections."""
    return conn.app.state.runtime


RuntimeDep = Annotated[RoomRuntime, Depends(get_runtime)]
