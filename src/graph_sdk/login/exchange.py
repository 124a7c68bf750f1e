"""Authorization-code → access-token exchange."""

from __future__ import annotations

import logging

from graph_sdk.client.errors import ResponseError
from graph_sdk.client.executor import GraphClient
from graph_sdk.client.models import AccessToken, Clock, default_clock
from graph_sdk.utils.logging import mask_sensitive

_LOG = logging.getLogger("graph-sdk.login.exchange")

TOKEN_ENDPOINT = "/oauth/access_token"


def app_access_token(app_id: str, app_secret: str) -> AccessToken:
    """Return the ``<app_id>|<app_secret>`` app token."""
    return AccessToken(f"{app_id}|{app_secret}", app_secret=app_secret)


def exchange_code_for_token(
    client: GraphClient,
    *,
    code: str,
    redirect_uri: str,
    app_id: str,
    app_secret: str,
    clock: Clock = default_clock,
) -> AccessToken:
    """Exchange an authorization *code* for a user :class:`AccessToken`.

    *redirect_uri* must be byte-identical to the one sent to the login dialog.

    Raises
    ------
    ResponseError
        Graph rejected the code (expired, already used, redirect mismatch...).
    TransportError
        The token endpoint could not be reached.
    """
    response = client.get(
        app_access_token(app_id, app_secret),
        TOKEN_ENDPOINT,
        params={
            "client_id": app_id,
            "redirect_uri": redirect_uri,
            "client_secret": app_secret,
            "code": code,
        },
    )

    data = response.decoded if isinstance(response.decoded, dict) else {}
    value = data.get("access_token")
    if not value:
        raise ResponseError(
            "Token response missing access_token",
            raw_body=response.raw_body,
            decoded=response.decoded,
            status_code=response.status_code,
        )

    # JSON replies use expires_in, legacy form-encoded replies use expires
    lifetime = data.get("expires_in", data.get("expires"))
    expires_at: float | None = None
    try:
        seconds = int(lifetime) if lifetime is not None else 0
    except (TypeError, ValueError):
        seconds = 0
    if seconds > 0:
        expires_at = clock() + seconds

    _LOG.info(
        "Exchanged code=%s for access token (expires in %ss)",
        mask_sensitive(code, 4),
        lifetime if lifetime is not None else "-",
    )
    return AccessToken(str(value), app_secret=app_secret, expires_at=expires_at)
