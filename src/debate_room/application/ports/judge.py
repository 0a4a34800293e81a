from __future__ import annotations

from typing import Protocol

from debate_room.application.dto.transcript import Transcript


class Judge(Protocol):
    """Opaque judging service: one transcript in, one verdict string out."""

    async def judge(self, transcript: Transcript) -> str: ...
