"""Shared aiohttp session configuration."""
from __future__ import annotations

from typing import Any

import aiohttp
from aiohttp import ClientTimeout

# Judge calls run model inference and may take minutes.
JUDGE_TIMEOUT = ClientTimeout(
    total=120,
    connect=10,
    sock_read=110,
)

# Long-lived WebSocket connections: no total deadline, only the handshake.
WS_TIMEOUT = ClientTimeout(
    total=None,
    connect=20,
)


def create_client_session(timeout: ClientTimeout, **kwargs: Any) -> aiohttp.ClientSession:
    """Create an aiohttp ClientSession bound to one of the timeouts above."""
    return aiohttp.ClientSession(timeout=timeout, **kwargs)
