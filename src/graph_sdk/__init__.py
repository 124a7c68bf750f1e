"""Python SDK for the Graph API.

``graph_sdk.client`` executes signed Graph requests; ``graph_sdk.login``
implements the redirect login flow. Web integration lives in
``graph_sdk.servers``.
"""

from __future__ import annotations

from graph_sdk.client import (  # noqa: F401
    AccessToken,
    BatchRequest,
    BatchResponse,
    ConfigurationError,
    GraphClient,
    GraphSDKError,
    Request,
    Response,
    ResponseError,
    TransportError,
)
from graph_sdk.client.urls import SDK_VERSION
from graph_sdk.config import GraphConfig  # noqa: F401
from graph_sdk.login import MemoryStateStore, RedirectLoginHelper, RedirectRequest  # noqa: F401

__version__ = SDK_VERSION

__all__ = [
    "AccessToken",
    "BatchRequest",
    "BatchResponse",
    "ConfigurationError",
    "GraphClient",
    "GraphConfig",
    "GraphSDKError",
    "MemoryStateStore",
    "RedirectLoginHelper",
    "RedirectRequest",
    "Request",
    "Response",
    "ResponseError",
    "TransportError",
    "__version__",
]
