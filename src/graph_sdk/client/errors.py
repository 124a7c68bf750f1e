"""Exception types raised by the Graph client and the login helper.

Only lightweight, **data-carrying** exceptions live here so that web/CLI layers
can transform them into HTTP responses or user-friendly messages.

Hierarchy
---------
GraphSDKError
    ConfigurationError      bad version, bad random size, malformed request
        StateStoreUnavailableError
    TransportError          the HTTP transport failed to produce a reply
    ResponseError           the remote replied with an error-shaped body
        AuthenticationError, AuthorizationError, ClientError,
        ServerError, ThrottleError, OtherResponseError
"""

from __future__ import annotations

from typing import Any, Final


class GraphSDKError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(GraphSDKError, ValueError):
    """Raised synchronously when the SDK is configured or called incorrectly."""


class StateStoreUnavailableError(ConfigurationError):
    """Raised when the CSRF state store (e.g. the session) cannot be used."""


class TransportError(GraphSDKError):
    """Raised by a transport when no HTTP reply could be obtained."""


# Graph error codes, see ResponseError.create
_AUTH_SUBCODES: Final[frozenset[int]] = frozenset({458, 459, 460, 463, 464, 467})
_AUTH_CODES: Final[frozenset[int]] = frozenset({100, 102, 190})
_SERVER_CODES: Final[frozenset[int]] = frozenset({1, 2})
_THROTTLE_CODES: Final[frozenset[int]] = frozenset({4, 17, 341})
_DUPLICATE_POST_CODE: Final[int] = 506


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ResponseError(GraphSDKError):
    """The Graph API answered, but with an error.

    Carries the raw body, the decoded value and the HTTP status so callers can
    branch on remote error codes.
    """

    def __init__(
        self,
        message: str,
        *,
        raw_body: str,
        decoded: Any,
        status_code: int,
    ) -> None:
        super().__init__(message)
        self.raw_body: str = raw_body
        self.decoded: Any = decoded
        self.status_code: int = status_code

        error = self._error_data(decoded)
        self.code: int | None = _as_int(error.get("code"))
        self.subcode: int | None = _as_int(error.get("error_subcode"))
        self.error_type: str | None = error.get("type")

    @staticmethod
    def _error_data(decoded: Any) -> dict[str, Any]:
        if isinstance(decoded, dict) and isinstance(decoded.get("error"), dict):
            return decoded["error"]
        return {}

    @classmethod
    def create(cls, raw_body: str, decoded: Any, status_code: int) -> "ResponseError":
        """Return the most specific ``ResponseError`` subclass for *decoded*."""
        error = cls._error_data(decoded)
        code = _as_int(error.get("code"))
        subcode = _as_int(error.get("error_subcode"))
        message = error.get("message") or (
            f"Graph returned HTTP {status_code}" if status_code >= 400
            else "Unknown error from Graph."
        )

        exc_cls: type[ResponseError]
        if subcode in _AUTH_SUBCODES or code in _AUTH_CODES:
            exc_cls = AuthenticationError
        elif code in _SERVER_CODES:
            exc_cls = ServerError
        elif code in _THROTTLE_CODES:
            exc_cls = ThrottleError
        elif code == _DUPLICATE_POST_CODE:
            exc_cls = ClientError
        elif code is not None and (code == 10 or 200 <= code <= 299):
            exc_cls = AuthorizationError
        elif error.get("type") == "OAuthException":
            exc_cls = AuthenticationError
        else:
            exc_cls = OtherResponseError

        return exc_cls(
            message, raw_body=raw_body, decoded=decoded, status_code=status_code
        )

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serialisable summary **without** the raw body."""
        return {
            "error": type(self).__name__,
            "message": str(self),
            "status_code": self.status_code,
            "code": self.code,
            "subcode": self.subcode,
            "type": self.error_type,
        }


class AuthenticationError(ResponseError):
    """Login status or token expired, revoked or invalid."""


class AuthorizationError(ResponseError):
    """Missing permissions."""


class ClientError(ResponseError):
    """Request rejected by the API, e.g. duplicate post."""


class ServerError(ResponseError):
    """Server issue, possible downtime."""


class ThrottleError(ResponseError):
    """API throttling."""


class OtherResponseError(ResponseError):
    """Any error not covered by a more specific class."""
