"""
Unit tests for the CSRF state stores.

Coverage:
* MemoryStateStore TTL expiry with a fake clock
* SessionStateStore raises when no session middleware is installed
"""

from __future__ import annotations

import pytest
from starlette.requests import Request

from graph_sdk.client.errors import ConfigurationError, StateStoreUnavailableError
from graph_sdk.login.store import CsrfStateStore, MemoryStateStore, SessionStateStore


class _MutableClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _starlette_request(with_session: bool) -> Request:
    scope = {"type": "http", "method": "GET", "path": "/", "headers": [], "query_string": b""}
    if with_session:
        scope["session"] = {}
    return Request(scope)


def test_memory_store_round_trip() -> None:
    store = MemoryStateStore()
    assert isinstance(store, CsrfStateStore)
    assert store.get("FBRLH_state") is None
    store.set("FBRLH_state", "abc")
    assert store.get("FBRLH_state") == "abc"


def test_memory_store_entries_expire() -> None:
    clock = _MutableClock(1000.0)
    store = MemoryStateStore(ttl_seconds=60, clock=clock)
    store.set("k", "v")

    clock.now = 1059.0
    assert store.get("k") == "v"
    clock.now = 1061.0
    assert store.get("k") is None


def test_session_store_round_trip() -> None:
    request = _starlette_request(with_session=True)
    store = SessionStateStore(request)
    store.set("FBRLH_state", "abc")
    assert store.get("FBRLH_state") == "abc"
    assert request.session["FBRLH_state"] == "abc"


def test_session_store_without_middleware() -> None:
    store = SessionStateStore(_starlette_request(with_session=False))
    with pytest.raises(StateStoreUnavailableError):
        store.get("FBRLH_state")
    with pytest.raises(ConfigurationError):
        store.set("FBRLH_state", "abc")
