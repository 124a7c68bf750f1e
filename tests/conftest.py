"""Shared fixtures: an in-memory Transport that records every call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import pytest

from graph_sdk.client.transport import TransportResult


@dataclass
class SentCall:
    url: str
    method: str
    params: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)


class FakeTransport:
    """Transport returning queued replies (or raising queued exceptions)."""

    def __init__(self) -> None:
        self.calls: list[SentCall] = []
        self._replies: list[TransportResult | Exception] = []
        self._pending_headers: dict[str, str] = {}

    def queue(
        self,
        body: str,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._replies.append(TransportResult(body, status_code, dict(headers or {})))

    def queue_error(self, exc: Exception) -> None:
        self._replies.append(exc)

    def add_request_header(self, name: str, value: str) -> None:
        self._pending_headers[name] = value

    def send(self, url: str, method: str, params: Mapping[str, Any]) -> TransportResult:
        self.calls.append(SentCall(url, method, dict(params), self._pending_headers))
        self._pending_headers = {}
        if not self._replies:
            raise AssertionError(f"unexpected {method} {url}")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def last(self) -> SentCall:
        return self.calls[-1]


@pytest.fixture()
def fake_transport() -> FakeTransport:
    return FakeTransport()


# --------------------------------------------------------------------------- #
# Integration gating                                                          #
# --------------------------------------------------------------------------- #
def pytest_addoption(parser):
    """Add integration option to pytest."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly requested.

    Tests marked with 'ci_safe' always run because they stub the Graph API.
    """
    if config.getoption("--integration", default=False):
        return
    skip_integration = pytest.mark.skip(reason="Need --integration option to run")
    for item in items:
        if "integration" in item.keywords and "ci_safe" not in item.keywords:
            item.add_marker(skip_integration)
