from __future__ import annotations

from debate_room.application.exceptions import AppError


class TransportUnavailableError(AppError):
    code = "transport_unavailable"


class MediaUnavailableError(AppError):
    code = "media_unavailable"
