from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from debate_room.api.deps import RoomRuntime
from debate_room.api.middleware.correlation_id import CorrelationIdMiddleware
from debate_room.api.v1.routers import health, rooms, topics, ws
from debate_room.application.exceptions import (
    AppError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RoomFullError,
    ValidationError,
)
from debate_room.application.ports.clock import Clock, SystemClock
from debate_room.application.ports.judge import Judge
from debate_room.config import settings
from debate_room.infrastructure.judge.http_judge import HttpJudge
from debate_room.infrastructure.judge.transcript_judge import TranscriptJudge
from debate_room.infrastructure.memory.room_repository import InMemoryRoomRepository
from debate_room.infrastructure.ws.manager import ConnectionManager
from debate_room.services.judging_service import JudgingService
from debate_room.services.timer_service import RoomTimerService

logger = logging.getLogger(__name__)


def _build_judge() -> Judge:
    if settings.JUDGE_URL:
        logger.info("Using HTTP judge at %s", settings.JUDGE_URL)
        return HttpJudge(settings.JUDGE_URL, timeout_seconds=settings.JUDGE_TIMEOUT_SECONDS)
    logger.info("JUDGE_URL not set, using local transcript judge")
    return TranscriptJudge()


def build_runtime(*, judge: Judge | None = None, clock: Clock | None = None) -> RoomRuntime:
    room_repo = InMemoryRoomRepository()
    manager = ConnectionManager()
    clock = clock or SystemClock()
    judge = judge or _build_judge()
    return RoomRuntime(
        rooms=room_repo,
        manager=manager,
        clock=clock,
        judge=judge,
        timers=RoomTimerService(room_repo, manager, tick_seconds=settings.TIMER_TICK_SECONDS),
        judging=JudgingService(room_repo, manager, judge, clock),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    logger.info("Debate room server started")

    yield

    runtime: RoomRuntime = app.state.runtime
    await runtime.timers.stop()
    await runtime.judging.stop()
    if isinstance(runtime.judge, HttpJudge):
        await runtime.judge.close()
    logger.info("Debate room server stopped")


def create_app(*, judge: Judge | None = None, clock: Clock | None = None) -> FastAPI:
    app = FastAPI(
        title="Debate Room Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.runtime = build_runtime(judge=judge, clock=clock)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(topics.router)
    app.include_router(rooms.router)
    app.include_router(ws.router)

    return app


_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (RoomFullError, 409),
    (ConflictError, 409),
    (ValidationError, 422),
)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(_req: Request, exc: AppError) -> JSONResponse:
        status_code = next(
            (code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 400,
        )
        return JSONResponse(status_code=status_code, content={"code": exc.code, "detail": exc.detail})
