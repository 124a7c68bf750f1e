"""Persistence for the CSRF ``state`` of the redirect-login flow.

This module introduces a *narrow* key/value interface
(:class:`CsrfStateStore`) and two implementations:

* :class:`MemoryStateStore` – process-local ``cachetools.TTLCache``; suitable
  for single-process apps and tests.
* :class:`SessionStateStore` – Starlette ``request.session`` (requires
  ``SessionMiddleware``).

Stores raise :class:`~graph_sdk.client.errors.StateStoreUnavailableError`
when they cannot be used at all (e.g. no session). That is distinct from a
missing key, which is reported as ``None``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from cachetools import TTLCache

from graph_sdk.client.models import Clock, default_clock
from graph_sdk.client.errors import StateStoreUnavailableError

if TYPE_CHECKING:  # pragma: no cover
    from starlette.requests import Request


@runtime_checkable
class CsrfStateStore(Protocol):
    """Minimal single-key persistence contract."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStateStore(CsrfStateStore):
    """In-memory store whose entries expire after *ttl_seconds*."""

    def __init__(
        self,
        *,
        maxsize: int = 1024,
        ttl_seconds: float = 900,
        clock: Clock = default_clock,
    ) -> None:
        self._cache: TTLCache[str, str] = TTLCache(
            maxsize=maxsize, ttl=ttl_seconds, timer=clock
        )

    def get(self, key: str) -> str | None:
        return self._cache.get(key)

    def set(self, key: str, value: str) -> None:
        self._cache[key] = value


class SessionStateStore(CsrfStateStore):
    """Store backed by the Starlette session of the current request."""

    def __init__(self, request: Request) -> None:
        self.request = request

    def _session(self) -> dict:
        if "session" not in self.request.scope:
            raise StateStoreUnavailableError(
                "Session not active: install starlette SessionMiddleware"
            )
        return self.request.session

    def get(self, key: str) -> str | None:
        value = self._session().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self._session()[key] = value
