from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    code = "error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    code = "not_found"


class RoomNotFoundError(NotFoundError):
    code = "room_not_found"


class RoomFullError(AppError):
    code = "room_full"


class ForbiddenError(AppError):
    code = "not_a_member"


class ConflictError(AppError):
    code = "conflict"


class RoomExistsError(ConflictError):
    code = "room_exists"


class PostEndMutationError(ConflictError):
    code = "debate_ended"


class DebateInProgressError(ConflictError):
    code = "debate_in_progress"


class TimerActiveError(ConflictError):
    code = "timer_active"


class ValidationError(AppError):
    code = "invalid_payload"


class JudgeError(AppError):
    code = "judge_failed"
