"""HTTP transport contract and the default ``requests`` implementation.

The executor only relies on the narrow :class:`Transport` protocol so tests
and applications can plug in their own HTTP stack. Timeouts, retries and
connection pooling are the transport's concern; the executor never retries.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, runtime_checkable

import requests

from graph_sdk.client.errors import TransportError

_LOG = logging.getLogger("graph-sdk.client.transport")

DEFAULT_TIMEOUT: float = 60.0


@dataclass(frozen=True, slots=True)
class TransportResult:
    """Raw HTTP reply as seen by a transport."""

    body: str
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)


@runtime_checkable
class Transport(Protocol):
    """Minimal HTTP contract used by :class:`~graph_sdk.client.executor.GraphClient`."""

    def add_request_header(self, name: str, value: str) -> None: ...

    def send(self, url: str, method: str, params: Mapping[str, Any]) -> TransportResult: ...


class RequestsTransport(Transport):
    """Blocking transport built on :class:`requests.Session`.

    Headers added with :meth:`add_request_header` apply to the next
    :meth:`send` call made by the same thread only.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self._local = threading.local()

    def _pending(self) -> dict[str, str]:
        pending = getattr(self._local, "headers", None)
        if pending is None:
            pending = self._local.headers = {}
        return pending

    def add_request_header(self, name: str, value: str) -> None:
        self._pending()[name] = value

    def send(self, url: str, method: str, params: Mapping[str, Any]) -> TransportResult:
        headers = self._pending()
        self._local.headers = {}
        try:
            resp = self.session.request(
                method,
                url,
                data=dict(params) or None,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            _LOG.debug("HTTP %s failed: %s", method, type(exc).__name__)
            raise TransportError(f"HTTP {method} request failed: {exc}") from exc

        return TransportResult(
            body=resp.text,
            status_code=resp.status_code,
            headers=dict(resp.headers),
        )
