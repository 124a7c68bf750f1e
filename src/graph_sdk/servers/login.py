"""Starlette routes for the browser redirect login.

Handlers are intentionally thin:

1. Build a :class:`RedirectLoginHelper` bound to the caller's session.
2. Delegate to the helper.
3. Return an appropriate Starlette ``Response`` type.

The CSRF state lives in ``request.session``, so the application must install
``starlette.middleware.sessions.SessionMiddleware``.

SECURITY NOTE
-------------
No raw secrets (state, codes, access tokens, app secret) are ever logged.
"""

from __future__ import annotations

import html
import logging
from typing import Awaitable, Callable, Sequence, Union

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from graph_sdk.client.errors import StateStoreUnavailableError
from graph_sdk.client.executor import GraphClient
from graph_sdk.client.models import AccessToken
from graph_sdk.config import GraphConfig
from graph_sdk.login.redirect import RedirectLoginHelper, RedirectRequest
from graph_sdk.login.store import SessionStateStore

_LOG = logging.getLogger("graph-sdk.servers.login")

CALLBACK_ROUTE_NAME = "graph_login_callback"

OnLogin = Callable[[Request, AccessToken], Union[None, Awaitable[None]]]


def _html_page(title: str, body: str, status: int = 200) -> HTMLResponse:
    """Return a tiny success / error HTML page."""
    title, body = html.escape(title), html.escape(body)
    content = (
        "<!doctype html><html lang='en'>"
        "<head><meta charset='utf-8'><title>"
        f"{title}</title></head><body><h1>{title}</h1><p>{body}</p></body></html>"
    )
    return HTMLResponse(content, status_code=status)


def login_routes(
    *,
    config: GraphConfig,
    client: GraphClient | None = None,
    scope: Sequence[str] = (),
    base_path: str = "/login",
    on_login: OnLogin | None = None,
) -> list[Route]:
    """Return the ``start`` and ``callback`` routes under *base_path*."""
    graph_client = client or GraphClient.from_config(config)

    def _helper(request: Request) -> RedirectLoginHelper:
        return RedirectLoginHelper.from_config(
            config, SessionStateStore(request), client=graph_client
        )

    # ----- GET /login/start ----------------------------------------------- #
    async def _start(request: Request) -> Response:
        callback_url = str(request.url_for(CALLBACK_ROUTE_NAME))
        rerequest = request.query_params.get("rerequest") in ("1", "true")
        try:
            login_url = _helper(request).get_login_url(
                callback_url, scope=scope, rerequest=rerequest
            )
        except StateStoreUnavailableError as exc:
            _LOG.error("Cannot start login: %s", exc)
            return JSONResponse({"error": "session unavailable"}, status_code=500)

        fmt_param = request.query_params.get("format")
        accept_header = (request.headers.get("accept") or "").lower()

        if fmt_param == "json":
            return JSONResponse({"login_url": login_url})
        if fmt_param == "redirect" or "text/html" in accept_header:
            # 303 See Other for GET safety across methods
            return RedirectResponse(login_url, status_code=303)
        return JSONResponse({"login_url": login_url})

    # ----- GET /login/callback -------------------------------------------- #
    async def _callback(request: Request) -> Response:
        redirect = RedirectRequest.from_starlette(request)
        # Provider-side errors first (e.g. the user denied access)
        if redirect.error:
            description = redirect.query.get("error_description", "")
            return _html_page(
                "Login cancelled",
                f"{redirect.error}: {description}" if description else redirect.error,
                400,
            )

        try:
            token = await run_in_threadpool(
                _helper(request).get_access_token_from_redirect, redirect
            )
        except StateStoreUnavailableError as exc:
            _LOG.error("Cannot complete login: %s", exc)
            return _html_page("Login failed", "Session unavailable.", 500)

        if token is None:
            return _html_page("Login failed", "Invalid or expired login attempt.", 400)

        if on_login is not None:
            result = on_login(request, token)
            if result is not None:
                await result

        _LOG.info("Login completed for app_id=%s", config.app_id)
        return _html_page("Login successful", "You may close this window.")

    return [
        Route(f"{base_path}/start", _start, methods=["GET"], name="graph_login_start"),
        Route(f"{base_path}/callback", _callback, methods=["GET"], name=CALLBACK_ROUTE_NAME),
    ]


def register_login_routes(
    app: Starlette,
    *,
    config: GraphConfig,
    client: GraphClient | None = None,
    scope: Sequence[str] = (),
    base_path: str = "/login",
    on_login: OnLogin | None = None,
) -> None:
    """Attach the login endpoints to *app* under *base_path*."""
    app.router.routes.extend(
        login_routes(
            config=config,
            client=client,
            scope=scope,
            base_path=base_path,
            on_login=on_login,
        )
    )
