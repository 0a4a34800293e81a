"""Judge backed by an external HTTP analysis service."""
from __future__ import annotations

import logging
from typing import Any

import aiohttp
from aiohttp import ClientTimeout

from debate_room.application.dto.transcript import Transcript
from debate_room.application.exceptions import JudgeError
from debate_room.infrastructure.http_client import JUDGE_TIMEOUT, create_client_session

logger = logging.getLogger(__name__)


class HttpJudge:
    """POSTs the transcript as JSON and reads ``{"winner": "..."}`` back."""

    def __init__(self, url: str, *, timeout_seconds: float | None = None) -> None:
        self._url = url
        self._timeout = (
            ClientTimeout(total=timeout_seconds, connect=10)
            if timeout_seconds is not None
            else JUDGE_TIMEOUT
        )
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = create_client_session(timeout=self._timeout)
        return self._session

    async def judge(self, transcript: Transcript) -> str:
        session = self._get_session()
        try:
            async with session.post(self._url, json=_to_payload(transcript)) as resp:
                if resp.status >= 400:
                    body = await resp.text()
                    raise JudgeError(f"Judge service returned {resp.status}: {body[:200]}")
                data = await resp.json(content_type=None)
        except aiohttp.ClientError as exc:
            raise JudgeError(f"Judge service unreachable: {exc}") from exc

        winner = data.get("winner") if isinstance(data, dict) else None
        if not isinstance(winner, str) or not winner.strip():
            raise JudgeError("Judge service response has no winner")
        logger.debug("Judge verdict for room %s received", transcript.room_id)
        return winner

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()


def _to_payload(transcript: Transcript) -> dict[str, Any]:
    return {
        "roomId": transcript.room_id,
        "topic": transcript.topic,
        "participants": [
            {"id": pid, "name": name} for pid, name in transcript.participants.items()
        ],
        "transcript": [
            {
                "userId": e.speaker_id,
                "userName": e.speaker_name,
                "text": e.text,
                "audio": e.has_audio,
            }
            for e in transcript.entries
        ],
    }
