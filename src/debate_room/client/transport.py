"""Reconnecting WebSocket event channel to the debate server."""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable

import aiohttp
import pydantic

from debate_room.client.exceptions import TransportUnavailableError
from debate_room.infrastructure.http_client import WS_TIMEOUT, create_client_session
from debate_room.infrastructure.ws.protocol import WsOutbound, encode_inbound

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], Awaitable[None] | None]

# Disconnect reasons reported with the "disconnect" event.
REASON_CLIENT = "io client disconnect"
REASON_SERVER = "io server disconnect"
REASON_TRANSPORT = "transport close"

MAX_MESSAGE_BYTES = 16 * 1024 * 1024


class Subscription:
    """Handle returned by ``TransportSession.on``; dispose it to unsubscribe."""

    def __init__(self, transport: TransportSession, event: str, handler: EventHandler) -> None:
        self._transport = transport
        self.event = event
        self.handler = handler
        self.active = True

    def dispose(self) -> None:
        if self.active:
            self.active = False
            self._transport._remove(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: object) -> None:
        self.dispose()


class TransportSession:
    """One logical connection with automatic, bounded reconnection.

    Drops initiated by the server or the network are retried with
    exponential backoff; ``disconnect()`` stops the session for good.
    Subscriptions outlive reconnects, so handlers are registered once.
    """

    def __init__(
        self,
        url: str,
        *,
        reconnection_attempts: int = 5,
        reconnection_delay: float = 1.0,
        reconnection_delay_max: float = 5.0,
        heartbeat: float | None = 25.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.url = url
        self._attempts = reconnection_attempts
        self._delay = reconnection_delay
        self._delay_max = reconnection_delay_max
        self._heartbeat = heartbeat
        self._session = session
        self._owns_session = session is None
        self._handlers: dict[str, list[Subscription]] = {}
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._task: asyncio.Task[None] | None = None
        self._closing = False

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def backoff(self, attempt: int) -> float:
        """Delay before reconnect attempt ``attempt`` (1-based)."""
        return min(self._delay * (2 ** max(attempt - 1, 0)), self._delay_max)

    async def connect(self) -> TransportSession:
        """Start the session. Calling it on a running session is a no-op."""
        if self.running:
            return self
        self._closing = False
        self._task = asyncio.create_task(self._run(), name="transport-session")
        return self

    def on(self, event: str, handler: EventHandler) -> Subscription:
        sub = Subscription(self, event, handler)
        self._handlers.setdefault(event, []).append(sub)
        return sub

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    async def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        ws = self._ws
        if ws is None or ws.closed:
            raise TransportUnavailableError("Not connected to server")
        raw = encode_inbound(event, data)
        try:
            await ws.send_str(raw)
        except (ConnectionResetError, aiohttp.ClientError) as exc:
            raise TransportUnavailableError(f"Send failed: {exc}") from exc

    async def disconnect(self) -> None:
        """Close the connection; no reconnection follows."""
        self._closing = True
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task():
            if not task.done():
                task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _remove(self, sub: Subscription) -> None:
        subs = self._handlers.get(sub.event)
        if subs and sub in subs:
            subs.remove(sub)
            if not subs:
                del self._handlers[sub.event]

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = create_client_session(timeout=WS_TIMEOUT)
            self._owns_session = True
        return self._session

    async def _dispatch(self, event: str, data: dict[str, Any]) -> None:
        for sub in list(self._handlers.get(event, ())):
            if not sub.active:
                continue
            try:
                result = sub.handler(data)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Handler for %s failed", event)

    async def _run(self) -> None:
        attempt = 0
        while not self._closing:
            try:
                ws = await self._get_session().ws_connect(
                    self.url, heartbeat=self._heartbeat, max_msg_size=MAX_MESSAGE_BYTES,
                )
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
                attempt += 1
                logger.warning("Connection to %s failed (attempt %d): %s", self.url, attempt, exc)
                await self._dispatch("connect_error", {"detail": str(exc)})
                if not await self._wait_before_retry(attempt):
                    return
                continue

            self._ws = ws
            if attempt:
                logger.info("Reconnected to %s after %d attempts", self.url, attempt)
                await self._dispatch("reconnect", {"attempts": attempt})
            else:
                logger.info("Connected to %s", self.url)
            attempt = 0
            await self._dispatch("connect", {})

            reason = await self._read_loop(ws)
            self._ws = None
            logger.info("Disconnected from %s: %s", self.url, reason)
            await self._dispatch("disconnect", {"reason": reason})
            if self._closing:
                return
            attempt += 1
            if not await self._wait_before_retry(attempt):
                return

    async def _wait_before_retry(self, attempt: int) -> bool:
        if self._closing:
            return False
        if attempt > self._attempts:
            logger.error("Reconnection to %s failed after %d attempts", self.url, self._attempts)
            await self._dispatch("reconnect_failed", {})
            return False
        await asyncio.sleep(self.backoff(attempt))
        return not self._closing

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> str:
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                try:
                    envelope = WsOutbound.model_validate_json(msg.data)
                except pydantic.ValidationError:
                    logger.warning("Dropping malformed server event")
                    continue
                await self._dispatch(envelope.type, envelope.data)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.warning("WebSocket error: %s", ws.exception())
                return REASON_TRANSPORT
        if self._closing:
            return REASON_CLIENT
        return REASON_SERVER if ws.close_code is not None else REASON_TRANSPORT


_transport: TransportSession | None = None


def get_transport(url: str, **options: Any) -> TransportSession:
    """Return the process-wide transport, creating it on first use."""
    global _transport  # noqa: PLW0603
    if _transport is None:
        _transport = TransportSession(url, **options)
    elif _transport.url != url:
        raise ValueError(f"Transport already bound to {_transport.url}")
    return _transport


async def teardown_transport() -> None:
    global _transport  # noqa: PLW0603
    if _transport is not None:
        await _transport.disconnect()
        _transport = None
