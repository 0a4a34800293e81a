from __future__ import annotations

import uuid

from debate_room.client.identity import SESSION_KEY, IdentityStore


def test_identity_generated_once_per_session():
    storage: dict[str, str] = {}
    store = IdentityStore(storage)

    first = store.get_or_create()
    second = IdentityStore(storage).get_or_create()

    assert first == second
    assert storage[SESSION_KEY] == first
    uuid.UUID(first)


def test_separate_sessions_get_distinct_ids():
    assert IdentityStore({}).get_or_create() != IdentityStore({}).get_or_create()


def test_existing_session_value_reused():
    store = IdentityStore({SESSION_KEY: "known-id"})

    assert store.get_or_create() == "known-id"
