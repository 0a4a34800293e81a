"""Per-session participant identifier."""
from __future__ import annotations

import logging
import uuid
from collections.abc import MutableMapping

logger = logging.getLogger(__name__)

SESSION_KEY = "debateUserId"

# Session-scoped storage: lives as long as the process, never written to disk.
_session_storage: dict[str, str] = {}


class IdentityStore:
    def __init__(self, storage: MutableMapping[str, str] | None = None) -> None:
        self._storage = _session_storage if storage is None else storage

    def get_or_create(self) -> str:
        """Return the session's participant id, generating it on first use."""
        existing = self._storage.get(SESSION_KEY)
        if existing:
            return existing
        new_id = str(uuid.uuid4())
        self._storage[SESSION_KEY] = new_id
        logger.debug("Generated new participant id %s", new_id)
        return new_id
