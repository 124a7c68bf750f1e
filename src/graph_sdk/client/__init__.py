"""Graph request pipeline.

This namespace hosts the **HTTP-agnostic** building blocks of the client;
the only network code lives behind the :class:`Transport` protocol.

Sub-modules
-----------
errors
    Exception hierarchy and remote error classification.
signing
    ``appsecret_proof`` HMAC and secure random helpers.
urls
    Graph hosts, version allow-list and query-string helpers.
models
    Immutable request / response records, tokens, batches and the clock type.
transport
    Transport protocol and the ``requests`` implementation.
executor
    :class:`GraphClient`, the request execution pipeline.

All public objects are re-exported here for convenience.
"""

from __future__ import annotations

from .errors import (  # noqa: F401
    AuthenticationError,
    AuthorizationError,
    ClientError,
    ConfigurationError,
    GraphSDKError,
    OtherResponseError,
    ResponseError,
    ServerError,
    StateStoreUnavailableError,
    ThrottleError,
    TransportError,
)
from .executor import GraphClient  # noqa: F401
from .models import (  # noqa: F401
    AccessToken,
    BatchRequest,
    BatchResponse,
    Clock,
    Request,
    Response,
    default_clock,
)
from .signing import appsecret_proof, random_hex  # noqa: F401
from .transport import RequestsTransport, Transport, TransportResult  # noqa: F401
from .urls import SUPPORTED_GRAPH_VERSIONS, validate_graph_version  # noqa: F401

__all__ = [
    # errors
    "GraphSDKError",
    "ConfigurationError",
    "StateStoreUnavailableError",
    "TransportError",
    "ResponseError",
    "AuthenticationError",
    "AuthorizationError",
    "ClientError",
    "ServerError",
    "ThrottleError",
    "OtherResponseError",
    # executor
    "GraphClient",
    # models
    "AccessToken",
    "Request",
    "Response",
    "BatchRequest",
    "BatchResponse",
    "Clock",
    "default_clock",
    # signing
    "appsecret_proof",
    "random_hex",
    # transport
    "Transport",
    "TransportResult",
    "RequestsTransport",
    # urls
    "SUPPORTED_GRAPH_VERSIONS",
    "validate_graph_version",
]
