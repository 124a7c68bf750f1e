"""
Unit tests for GraphClient.handle.

Coverage:
* URL resolution (version, beta host) and version validation
* access_token injection and the appsecret_proof policy
* GET parameters moved to the query string, URL params winning on conflict
* POST / DELETE keep parameters in the body
* header / ETag propagation
* error replies raised as classified ResponseError, transport errors untouched
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlsplit

import pytest

from graph_sdk.client.errors import (
    ConfigurationError,
    ResponseError,
    ThrottleError,
    TransportError,
)
from graph_sdk.client.executor import GraphClient
from graph_sdk.client.models import AccessToken, Request, Response
from graph_sdk.client.signing import appsecret_proof
from graph_sdk.config import GraphConfig

TOKEN = AccessToken("user-token", app_secret="app-secret")


def _query(url: str) -> dict[str, str]:
    return dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))


@pytest.fixture()
def client(fake_transport) -> GraphClient:  # noqa: ANN001
    return GraphClient(transport=fake_transport)


# --------------------------------------------------------------------------- #
# Version handling                                                            #
# --------------------------------------------------------------------------- #
@pytest.mark.parametrize("version", ["v1.0", "v2.0"])
def test_supported_versions_accepted(fake_transport, version: str) -> None:  # noqa: ANN001
    assert GraphClient(transport=fake_transport, graph_version=version).graph_version == version


def test_unknown_version_rejected_at_construction(fake_transport) -> None:  # noqa: ANN001
    with pytest.raises(ConfigurationError):
        GraphClient(transport=fake_transport, graph_version="v3.0")


def test_unknown_version_rejected_on_reconfigure(client: GraphClient) -> None:
    with pytest.raises(ConfigurationError):
        client.set_graph_version("v3.0")
    assert client.graph_version == "v2.0"


def test_from_config(fake_transport) -> None:  # noqa: ANN001
    cfg = GraphConfig(app_id="1", app_secret="s", graph_version="v1.0", use_beta=True, use_secret_proof=False)
    client = GraphClient.from_config(cfg, transport=fake_transport)
    assert client.graph_version == "v1.0"
    assert client.use_beta is True
    assert client.use_secret_proof is False
    assert client.app_secret == "s"


# --------------------------------------------------------------------------- #
# URL + GET transform                                                         #
# --------------------------------------------------------------------------- #
def test_get_moves_params_to_query(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue('{"id": "42"}')

    resp = client.get(TOKEN, "/me", {"fields": "id,name"})

    sent = fake_transport.last
    assert sent.method == "GET"
    assert sent.url.startswith("https://graph.facebook.com/v2.0/me?")
    assert sent.params == {}
    query = _query(sent.url)
    assert query["fields"] == "id,name"
    assert query["access_token"] == "user-token"
    assert query["appsecret_proof"] == appsecret_proof("user-token", "app-secret")
    assert isinstance(resp, Response)
    assert resp.decoded == {"id": "42"}


def test_get_existing_url_params_win(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("{}")

    client.get(TOKEN, "/search?type=page&q=from-url", {"q": "from-params", "limit": "5"})

    query = _query(fake_transport.last.url)
    assert query["q"] == "from-url"
    assert query["type"] == "page"
    assert query["limit"] == "5"
    assert query["access_token"] == "user-token"


def test_beta_host(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("{}")
    client.enable_beta()
    client.get(None, "/me")
    assert fake_transport.last.url == "https://graph.beta.facebook.com/v2.0/me"


@pytest.mark.parametrize("method", ["POST", "DELETE"])
def test_post_and_delete_keep_params_in_body(client: GraphClient, fake_transport, method: str) -> None:  # noqa: ANN001
    fake_transport.queue('{"success": true}')

    client.request(TOKEN, "/me/feed", method, {"message": "hi"})

    sent = fake_transport.last
    assert sent.method == method
    assert sent.url == "https://graph.facebook.com/v2.0/me/feed"
    assert sent.params["message"] == "hi"
    assert sent.params["access_token"] == "user-token"
    assert "appsecret_proof" in sent.params


# --------------------------------------------------------------------------- #
# Secret proof policy                                                         #
# --------------------------------------------------------------------------- #
def test_caller_supplied_proof_is_kept(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("{}")
    client.post(TOKEN, "/me/feed", {"appsecret_proof": "caller-proof"})
    assert fake_transport.last.params["appsecret_proof"] == "caller-proof"


def test_disabled_signing_strips_caller_proof(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("{}")
    client.enable_secret_proof(False)
    client.post(TOKEN, "/me/feed", {"appsecret_proof": "caller-proof"})
    assert "appsecret_proof" not in fake_transport.last.params


def test_disabled_signing_on_get(fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("{}")
    client = GraphClient(transport=fake_transport, use_secret_proof=False)
    client.get(TOKEN, "/me")
    assert "appsecret_proof" not in _query(fake_transport.last.url)


def test_token_without_secret_is_not_signed(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("{}")
    client.post(AccessToken("plain-token"), "/me/feed")
    assert fake_transport.last.params == {"access_token": "plain-token"}


def test_client_secret_signs_unbound_token(fake_transport) -> None:  # noqa: ANN001
    cfg = GraphConfig(app_id="1", app_secret="app-secret")
    client = GraphClient.from_config(cfg, transport=fake_transport)
    fake_transport.queue("{}")

    client.post(AccessToken("plain"), "/me/feed")

    assert fake_transport.last.params == {
        "access_token": "plain",
        "appsecret_proof": appsecret_proof("plain", "app-secret"),
    }


def test_token_secret_takes_precedence_over_client_secret(fake_transport) -> None:  # noqa: ANN001
    client = GraphClient(transport=fake_transport, app_secret="client-secret")
    fake_transport.queue("{}")
    client.post(TOKEN, "/me/feed")
    assert fake_transport.last.params["appsecret_proof"] == appsecret_proof("user-token", "app-secret")


def test_no_token_no_proof(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("{}")
    client.post(None, "/123/likes", {"x": "1"})
    assert fake_transport.last.params == {"x": "1"}


def test_request_object_is_not_mutated(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("{}")
    req = Request("POST", "/me/feed", {"message": "hi"}, access_token=TOKEN)
    client.handle(req)
    assert req.params == {"message": "hi"}


# --------------------------------------------------------------------------- #
# Headers                                                                     #
# --------------------------------------------------------------------------- #
def test_headers_and_etag_forwarded(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("", 304, {"ETag": '"v1"'})

    resp = client.handle(
        Request("GET", "/me", access_token=TOKEN, etag='"v1"', headers={"X-Trace": "t"})
    )

    assert fake_transport.last.headers == {"X-Trace": "t", "If-None-Match": '"v1"'}
    assert resp.etag_hit is True


# --------------------------------------------------------------------------- #
# Errors                                                                      #
# --------------------------------------------------------------------------- #
def test_error_reply_is_raised(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    body = '{"error": {"code": 17, "message": "User request limit reached"}}'
    fake_transport.queue(body, 400)

    with pytest.raises(ThrottleError) as info:
        client.get(TOKEN, "/me")

    assert info.value.raw_body == body
    assert info.value.status_code == 400
    assert info.value.decoded["error"]["code"] == 17


def test_error_status_without_error_body_is_raised(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("Bad Gateway", 502)
    with pytest.raises(ResponseError):
        client.get(TOKEN, "/me")


def test_transport_error_propagates_unchanged(client: GraphClient, fake_transport) -> None:  # noqa: ANN001
    original = TransportError("connection reset")
    fake_transport.queue_error(original)

    with pytest.raises(TransportError) as info:
        client.get(TOKEN, "/me")

    assert info.value is original
    assert len(fake_transport.calls) == 1
