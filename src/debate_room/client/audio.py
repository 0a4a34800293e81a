"""Audio capture: idle → recording → pending payload → idle."""
from __future__ import annotations

import asyncio
import base64
import logging
from enum import StrEnum
from typing import Protocol

from debate_room.client.exceptions import MediaUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "audio/webm"


class AudioSource(Protocol):
    """A capture device. ``read`` returns b"" once the device is closed."""

    async def open(self) -> None: ...

    async def read(self) -> bytes: ...

    async def close(self) -> None: ...


class RecorderState(StrEnum):
    IDLE = "idle"
    RECORDING = "recording"
    PENDING = "pending"


class AudioRecorder:
    def __init__(self, source: AudioSource | None, *, mime_type: str = DEFAULT_MIME_TYPE) -> None:
        self._source = source
        self._mime_type = mime_type
        self._chunks: list[bytes] = []
        self._task: asyncio.Task[None] | None = None
        self._pending: str | None = None
        self.state = RecorderState.IDLE

    @property
    def supported(self) -> bool:
        return self._source is not None

    async def start(self) -> None:
        if self._source is None:
            raise MediaUnavailableError("Audio recording is not supported on this device")
        if self.state is RecorderState.RECORDING:
            return
        try:
            await self._source.open()
        except (PermissionError, OSError) as exc:
            raise MediaUnavailableError(
                "Failed to access microphone. Please check permissions and try again."
            ) from exc

        self._chunks = []
        self._pending = None
        self.state = RecorderState.RECORDING
        self._task = asyncio.create_task(self._capture(self._source), name="audio-capture")

    async def stop(self) -> str | None:
        """Stop recording and stage the encoded payload until ``take``."""
        if self.state is not RecorderState.RECORDING or self._source is None:
            return self._pending
        task, self._task = self._task, None
        # Any exit path leaves the recorder idle unless a payload gets staged below.
        self.state = RecorderState.IDLE
        try:
            await self._source.close()
        except BaseException:
            if task is not None:
                task.cancel()
            self._chunks = []
            raise
        try:
            if task is not None:
                await task
        except OSError as exc:
            raise MediaUnavailableError("Recording was interrupted") from exc
        finally:
            data = b"".join(self._chunks)
            self._chunks = []

        if not data:
            return None
        encoded = await asyncio.to_thread(base64.b64encode, data)
        self._pending = f"data:{self._mime_type};base64,{encoded.decode('ascii')}"
        self.state = RecorderState.PENDING
        logger.debug("Recorded %d bytes of audio", len(data))
        return self._pending

    def take(self) -> str | None:
        """Hand over the pending payload and return to idle."""
        payload, self._pending = self._pending, None
        if self.state is RecorderState.PENDING:
            self.state = RecorderState.IDLE
        return payload

    def discard(self) -> None:
        self._pending = None
        if self.state is RecorderState.PENDING:
            self.state = RecorderState.IDLE

    async def _capture(self, source: AudioSource) -> None:
        while True:
            chunk = await source.read()
            if not chunk:
                return
            self._chunks.append(chunk)
