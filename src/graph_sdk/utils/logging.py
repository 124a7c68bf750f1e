"""Logging helpers that keep secrets out of log records.

Access tokens, app secrets, ``appsecret_proof`` values, CSRF states and
authorization codes must never be logged in full. :func:`mask_sensitive`
keeps a short prefix for correlation; :func:`get_request_logger` returns an
adapter that only attaches whitelisted, non-sensitive request context:

- ``method``        – HTTP method of the Graph call
- ``endpoint``      – endpoint path (never the full URL with query string)
- ``graph_version`` – Graph API version segment

Usage
-----
>>> from graph_sdk.utils.logging import get_request_logger
>>> log = get_request_logger(method="GET", endpoint="/me", graph_version="v2.0")
>>> log.debug("dispatching")
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping


def mask_sensitive(value: str | None, keep_chars: int = 4) -> str:
    """Return *value* with everything after the first *keep_chars* masked."""
    if not value:
        return "<empty>"
    if len(value) <= keep_chars:
        return "*" * len(value)
    return f"{value[:keep_chars]}****"


class _RequestLoggerAdapter(logging.LoggerAdapter):
    """Inject whitelisted request context into log records."""

    extra_keys = ("method", "endpoint", "graph_version")

    def __init__(self, logger: logging.Logger, extra: Mapping[str, Any] | None = None):
        extra_clean: MutableMapping[str, Any] = {}
        for k in self.extra_keys:
            if extra and extra.get(k) is not None:
                value = str(extra[k])
                if k == "endpoint":
                    # query strings may carry tokens
                    value = value.split("?", 1)[0]
                extra_clean[k] = value
        super().__init__(logger, extra_clean)

    def process(self, msg: str, kwargs: MutableMapping[str, Any]):
        if "extra" not in kwargs or kwargs["extra"] is None:
            kwargs["extra"] = {}
        # merge but do not overwrite call-site provided extras
        for k, v in self.extra.items():
            kwargs["extra"].setdefault(k, v)
        return msg, kwargs


def get_request_logger(
    *,
    base_logger_name: str = "graph-sdk.client",
    method: str | None = None,
    endpoint: str | None = None,
    graph_version: str | None = None,
) -> logging.LoggerAdapter:
    """Return a LoggerAdapter pre-filled with request context."""
    logger = logging.getLogger(base_logger_name)
    return _RequestLoggerAdapter(
        logger,
        {
            "method": method,
            "endpoint": endpoint,
            "graph_version": graph_version,
        },
    )
