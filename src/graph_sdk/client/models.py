"""Typed, immutable records used by the Graph request pipeline."""

from __future__ import annotations

import dataclasses
import json
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Final, Iterator, Mapping, Sequence, Tuple, Union
from urllib.parse import parse_qsl

from graph_sdk.client.errors import ConfigurationError, ResponseError
from graph_sdk.client.signing import appsecret_proof

HTTP_METHODS: Final[tuple[str, ...]] = ("GET", "POST", "DELETE")

# Returns seconds since the UNIX epoch; injected into expiry and TTL checks
Clock = Callable[[], float]
default_clock: Clock = time.time


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Bearer credential, optionally bound to the app secret used to sign it.

    Two tokens are equal when their values are equal.
    """

    value: str = field(repr=False)
    app_secret: str | None = field(default=None, repr=False, compare=False)
    # UNIX timestamp, None when unknown or long-lived
    expires_at: float | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.value:
            raise ConfigurationError("access token value must be a non-empty string")

    def __str__(self) -> str:
        return self.value

    @property
    def is_app_token(self) -> bool:
        """App tokens have the ``<app_id>|<app_secret>`` shape."""
        return "|" in self.value

    def secret_proof(self) -> str | None:
        """Return the ``appsecret_proof`` for this token, or None without a secret."""
        if not self.app_secret:
            return None
        return appsecret_proof(self.value, self.app_secret)

    def is_expired(self, *, clock: Clock = default_clock) -> bool:
        if self.expires_at is None:
            return False
        return clock() >= self.expires_at


@dataclass(frozen=True, slots=True)
class Request:
    """A single Graph call: method, endpoint path, parameters and credentials."""

    method: str
    endpoint: str
    params: Mapping[str, Any] = field(default_factory=dict)
    access_token: AccessToken | None = None
    etag: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        method = (self.method or "").upper()
        if method not in HTTP_METHODS:
            raise ConfigurationError(f"unsupported HTTP method {self.method!r}")
        if "://" in self.endpoint:
            raise ConfigurationError("endpoint must be a path, not a full URL")

        endpoint = self.endpoint
        if endpoint and not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"

        object.__setattr__(self, "method", method)
        object.__setattr__(self, "endpoint", endpoint)
        object.__setattr__(self, "params", dict(self.params))
        object.__setattr__(self, "headers", dict(self.headers))

    def all_headers(self) -> dict[str, str]:
        """Custom headers plus ``If-None-Match`` when an ETag is set."""
        headers = dict(self.headers)
        if self.etag:
            headers["If-None-Match"] = self.etag
        return headers

    def with_access_token(self, access_token: AccessToken | None) -> Request:
        return dataclasses.replace(self, access_token=access_token)


BatchItem = Union[Request, Tuple[str, Request]]


@dataclass(frozen=True, slots=True)
class BatchRequest:
    """Ordered sub-requests sent to Graph in a single physical call.

    Items are ``Request`` objects or ``(name, Request)`` pairs; names let later
    sub-requests reference earlier results with JSONPath expressions.
    Sub-requests without a token receive *access_token* as a fallback.
    """

    requests: Sequence[BatchItem]
    access_token: AccessToken | None = None
    names: tuple[str | None, ...] = field(init=False, default=())

    def __post_init__(self) -> None:
        names: list[str | None] = []
        normalized: list[Request] = []
        for item in self.requests:
            name, request = item if isinstance(item, tuple) else (None, item)
            if not isinstance(request, Request):
                raise ConfigurationError(
                    f"batch items must be Request instances, got {type(request).__name__}"
                )
            if request.access_token is None:
                if self.access_token is None:
                    raise ConfigurationError("Missing access token for batch sub-request")
                request = request.with_access_token(self.access_token)
            names.append(name)
            normalized.append(request)

        if not normalized:
            raise ConfigurationError("There are no batch requests to send.")

        object.__setattr__(self, "requests", tuple(normalized))
        object.__setattr__(self, "names", tuple(names))

    @property
    def batch_access_token(self) -> AccessToken:
        """Token authenticating the batch call itself."""
        return self.access_token or self.requests[0].access_token  # type: ignore[return-value]

    def __len__(self) -> int:
        return len(self.requests)


def decode_body(raw_body: str) -> Any:
    """Decode a Graph reply body.

    JSON objects and arrays are returned as-is, a JSON boolean becomes
    ``{"success": value}`` and a JSON number ``{"id": value}``. Non-JSON
    bodies are parsed as form-encoded pairs (legacy token replies).
    """
    try:
        value: Any = json.loads(raw_body)
    except ValueError:
        value = dict(parse_qsl(raw_body, keep_blank_values=True))

    if isinstance(value, bool):
        value = {"success": value}
    elif isinstance(value, (int, float)):
        value = {"id": value}

    if not isinstance(value, (dict, list)):
        return {}
    return value


@dataclass(frozen=True, slots=True)
class Response:
    """Reply to a single :class:`Request`."""

    request: Request
    raw_body: str
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    decoded: Any = field(init=False, default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", dict(self.headers))
        object.__setattr__(self, "decoded", decode_body(self.raw_body))

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def is_error(self) -> bool:
        if isinstance(self.decoded, dict) and "error" in self.decoded:
            return True
        return self.status_code >= 400

    @property
    def etag(self) -> str | None:
        return self.header("ETag")

    @property
    def etag_hit(self) -> bool:
        """True when Graph answered ``304 Not Modified`` to an ``If-None-Match``."""
        return self.status_code == 304

    @property
    def access_token(self) -> AccessToken | None:
        return self.request.access_token

    def exception(self) -> ResponseError | None:
        """Return the classified error for this reply, or None when successful."""
        if not self.is_error:
            return None
        return ResponseError.create(self.raw_body, self.decoded, self.status_code)


@dataclass(frozen=True, slots=True)
class BatchResponse:
    """Decomposes the aggregate reply of a :class:`BatchRequest`.

    ``responses[i]`` answers ``batch_request.requests[i]``; entries are None
    where Graph returned ``null`` (e.g. a dependency of that sub-request
    failed) or no entry at all. Errors in sub-responses are not raised.
    """

    batch_request: BatchRequest
    response: Response
    responses: tuple[Response | None, ...] = field(init=False, default=())

    def __post_init__(self) -> None:
        items = self.response.decoded if isinstance(self.response.decoded, list) else []
        responses: list[Response | None] = []
        # short replies leave the trailing sub-requests unanswered
        padded = list(items) + [None] * (len(self.batch_request.requests) - len(items))
        for request, item in zip(self.batch_request.requests, padded):
            if not isinstance(item, dict):
                responses.append(None)
                continue
            headers = {
                h["name"]: h["value"]
                for h in item.get("headers") or []
                if isinstance(h, dict) and "name" in h
            }
            body = item.get("body")
            responses.append(
                Response(
                    request=request,
                    raw_body=body if isinstance(body, str) else json.dumps(body or {}),
                    status_code=int(item.get("code") or 0),
                    headers=headers,
                )
            )
        object.__setattr__(self, "responses", tuple(responses))

    def __iter__(self) -> Iterator[Response | None]:
        return iter(self.responses)

    def __len__(self) -> int:
        return len(self.responses)

    def __getitem__(self, index: int) -> Response | None:
        return self.responses[index]

    def by_name(self, name: str) -> Response | None:
        """Return the sub-response of the sub-request registered as *name*."""
        for entry_name, response in zip(self.batch_request.names, self.responses):
            if entry_name == name:
                return response
        raise KeyError(name)

    @property
    def headers(self) -> Mapping[str, str]:
        return self.response.headers

    @property
    def status_code(self) -> int:
        return self.response.status_code
