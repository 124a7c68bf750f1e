"""Browser-redirect login (authorization code flow with CSRF state)."""

from __future__ import annotations

from .exchange import exchange_code_for_token  # noqa: F401
from .redirect import RedirectLoginHelper, RedirectRequest, filter_redirect_uri  # noqa: F401
from .store import CsrfStateStore, MemoryStateStore, SessionStateStore  # noqa: F401

__all__ = [
    "exchange_code_for_token",
    "RedirectLoginHelper",
    "RedirectRequest",
    "filter_redirect_uri",
    "CsrfStateStore",
    "MemoryStateStore",
    "SessionStateStore",
]
