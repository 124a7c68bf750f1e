"""Browser-redirect login with CSRF protection.

Flow
----
1. :meth:`RedirectLoginHelper.get_login_url` issues a fresh random ``state``
   (16 bytes, 32 hex chars), stores it in the :class:`CsrfStateStore` and
   returns the login dialog URL.
2. The login dialog redirects the browser back with either ``code`` and
   ``state`` or ``state`` plus the four ``error*`` parameters.
3. :meth:`RedirectLoginHelper.get_access_token_from_redirect` accepts the
   redirect only when ``code`` is present **and** ``state`` equals the stored
   value, rebuilds the redirect URI without the login parameters and
   exchanges the code for an :class:`AccessToken`.

The helper never reads ambient request or session state: the inbound redirect
is passed in as a :class:`RedirectRequest` and the store is injected.

Result of step 3
----------------
``None`` means "no token": CSRF mismatch, missing code and a rejected
exchange all look the same to the caller. The reason is logged at WARNING.
Store unavailability is *not* folded into ``None``; it raises
:class:`~graph_sdk.client.errors.StateStoreUnavailableError`.

Logging
-------
States, codes and tokens are only ever logged masked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final, Mapping, Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit

from graph_sdk.client.errors import ResponseError, TransportError
from graph_sdk.client.executor import GraphClient
from graph_sdk.client.models import AccessToken
from graph_sdk.client.signing import STATE_BYTES, constant_time_equals, random_hex
from graph_sdk.client.urls import (
    LOGOUT_URL,
    SDK_IDENTIFIER,
    build_query,
    oauth_dialog_url,
    validate_graph_version,
)
from graph_sdk.login.exchange import exchange_code_for_token
from graph_sdk.login.store import CsrfStateStore
from graph_sdk.utils.logging import mask_sensitive

if TYPE_CHECKING:  # pragma: no cover
    from starlette.requests import Request as StarletteRequest

    from graph_sdk.config import GraphConfig

_LOG = logging.getLogger("graph-sdk.login.redirect")

DEFAULT_SESSION_PREFIX: Final[str] = "FBRLH_"

_SUCCESS_PARAMS: Final[tuple[str, ...]] = ("state", "code")
_ERROR_PARAMS: Final[tuple[str, ...]] = (
    "state",
    "error",
    "error_reason",
    "error_description",
    "error_code",
)


def filter_redirect_uri(uri: str, default_scheme: str = "http") -> str:
    """Rebuild *uri* without the parameters appended by the login dialog.

    ``state`` and ``code`` are dropped together, or the five error
    parameters are dropped together; every other query parameter is kept in
    its original order. The fragment is discarded and a non-default port is
    preserved.
    """
    parts = urlsplit(uri)
    scheme = parts.scheme or default_scheme
    # host[:port] without any userinfo
    host = parts.netloc.rpartition("@")[2]

    query = ""
    if parts.query:
        pairs = parse_qsl(parts.query, keep_blank_values=True)
        present = {k for k, _ in pairs}
        to_drop: tuple[str, ...] = ()
        if all(p in present for p in _SUCCESS_PARAMS):
            to_drop = _SUCCESS_PARAMS
        elif all(p in present for p in _ERROR_PARAMS):
            to_drop = _ERROR_PARAMS
        kept = [(k, v) for k, v in pairs if k not in to_drop]
        if kept:
            query = "?" + urlencode(kept)

    return f"{scheme}://{host}{parts.path}{query}"


@dataclass(frozen=True, slots=True)
class RedirectRequest:
    """The inbound request the login dialog redirected the browser to."""

    url: str
    query: Mapping[str, str] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "query", dict(parse_qsl(urlsplit(self.url).query, keep_blank_values=True))
        )

    @classmethod
    def from_starlette(cls, request: StarletteRequest) -> RedirectRequest:
        return cls(str(request.url))

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> RedirectRequest:
        """Build from a WSGI *environ*.

        The scheme is https when ``HTTPS`` is ``on``/``1`` or the server port
        is 443.
        """
        https = str(environ.get("HTTPS", "")).lower()
        scheme = "http"
        if https in ("on", "1") or str(environ.get("SERVER_PORT", "")) == "443":
            scheme = "https"

        host = environ.get("HTTP_HOST") or environ.get("SERVER_NAME", "")
        request_uri = environ.get("REQUEST_URI")
        if not request_uri:
            request_uri = environ.get("PATH_INFO", "") or "/"
            if environ.get("QUERY_STRING"):
                request_uri = f"{request_uri}?{environ['QUERY_STRING']}"
        return cls(f"{scheme}://{host}{request_uri}")

    @property
    def scheme(self) -> str:
        return urlsplit(self.url).scheme or "http"

    @property
    def code(self) -> str | None:
        return self.query.get("code") or None

    @property
    def state(self) -> str | None:
        return self.query.get("state") or None

    @property
    def error(self) -> str | None:
        return self.query.get("error") or None


class RedirectLoginHelper:
    """Build login/logout URLs and turn a login redirect into an access token."""

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        store: CsrfStateStore,
        *,
        client: GraphClient | None = None,
        graph_version: str | None = None,
        session_prefix: str = DEFAULT_SESSION_PREFIX,
    ) -> None:
        self.app_id = app_id
        self.app_secret = app_secret
        self.store = store
        self.client = client or GraphClient()
        self.graph_version = validate_graph_version(
            graph_version or self.client.graph_version
        )
        self.session_prefix = session_prefix

    @classmethod
    def from_config(
        cls,
        config: GraphConfig,
        store: CsrfStateStore,
        client: GraphClient | None = None,
    ) -> RedirectLoginHelper:
        return cls(
            config.app_id,
            config.app_secret,
            store,
            client=client or GraphClient.from_config(config),
            graph_version=config.graph_version,
        )

    @property
    def state_key(self) -> str:
        return f"{self.session_prefix}state"

    # ------------------------------------------------------------------ #
    # URL builders                                                       #
    # ------------------------------------------------------------------ #
    def get_login_url(
        self,
        redirect_url: str,
        scope: Sequence[str] = (),
        rerequest: bool = False,
        version: str | None = None,
    ) -> str:
        """Store a new CSRF state and return the login dialog URL.

        Parameters
        ----------
        redirect_url:
            Where the dialog sends the browser afterwards; that handler should
            call :meth:`get_access_token_from_redirect`.
        scope:
            Permissions to request.
        rerequest:
            Ask again for permissions the user previously declined.
        version:
            Graph version of the dialog; defaults to the helper's version.
        """
        version = validate_graph_version(version) if version else self.graph_version
        state = self._generate_state()
        self._store_state(state)

        params: dict[str, str] = {
            "client_id": self.app_id,
            "redirect_uri": redirect_url,
            "state": state,
            "sdk": SDK_IDENTIFIER,
            "scope": ",".join(scope),
        }
        if rerequest:
            params["auth_type"] = "rerequest"

        _LOG.debug("Issued login state=%s", mask_sensitive(state, 4))
        return oauth_dialog_url(version, params)

    def get_logout_url(self, access_token: AccessToken | str, next_url: str) -> str:
        params = {"next": next_url, "access_token": str(access_token)}
        return f"{LOGOUT_URL}?{build_query(params)}"

    # ------------------------------------------------------------------ #
    # Redirect handling                                                  #
    # ------------------------------------------------------------------ #
    def is_valid_redirect(self, redirect: RedirectRequest) -> bool:
        """True iff *redirect* has a ``code`` and the stored ``state``."""
        if not redirect.code:
            return False
        return constant_time_equals(redirect.state, self._load_state())

    def get_access_token_from_redirect(
        self, redirect: RedirectRequest
    ) -> AccessToken | None:
        """Return the access token for a valid redirect, otherwise None."""
        if not self.is_valid_redirect(redirect):
            _LOG.warning(
                "Rejected login redirect (code present=%s, state=%s)",
                bool(redirect.code),
                mask_sensitive(redirect.state, 4),
            )
            return None

        redirect_uri = filter_redirect_uri(redirect.url, redirect.scheme)
        try:
            return exchange_code_for_token(
                self.client,
                code=redirect.code or "",
                redirect_uri=redirect_uri,
                app_id=self.app_id,
                app_secret=self.app_secret,
            )
        except (ResponseError, TransportError) as exc:
            _LOG.warning("Code exchange failed: %s", type(exc).__name__)
            return None

    # ---------------- internal helpers --------------------------------- #
    def _generate_state(self) -> str:
        return random_hex(STATE_BYTES)

    def _store_state(self, state: str) -> None:
        self.store.set(self.state_key, state)

    def _load_state(self) -> str | None:
        return self.store.get(self.state_key)
