"""Unit tests for exchange_code_for_token."""

from __future__ import annotations

import pytest

from graph_sdk.client.errors import AuthenticationError, ResponseError
from graph_sdk.client.executor import GraphClient
from graph_sdk.login.exchange import app_access_token, exchange_code_for_token


def fake_clock() -> float:  # frozen at 2023-01-01T00:00:00Z
    return 1_672_531_200.0


def _exchange(transport) -> object:  # noqa: ANN001
    return exchange_code_for_token(
        GraphClient(transport=transport),
        code="the-code",
        redirect_uri="https://app.test/cb",
        app_id="123",
        app_secret="app-secret",
        clock=fake_clock,
    )


def test_app_access_token() -> None:
    token = app_access_token("123", "app-secret")
    assert str(token) == "123|app-secret"
    assert token.is_app_token


def test_json_reply(fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue('{"access_token": "user-token", "token_type": "bearer", "expires_in": 3600}')
    token = _exchange(fake_transport)
    assert str(token) == "user-token"
    assert token.expires_at == fake_clock() + 3600
    assert token.app_secret == "app-secret"


def test_legacy_form_encoded_reply(fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue("access_token=user-token&expires=5183999")
    token = _exchange(fake_transport)
    assert str(token) == "user-token"
    assert token.expires_at == fake_clock() + 5183999


def test_reply_without_expiry(fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue('{"access_token": "user-token"}')
    assert _exchange(fake_transport).expires_at is None


def test_reply_without_token_raises(fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue('{"token_type": "bearer"}')
    with pytest.raises(ResponseError):
        _exchange(fake_transport)


def test_rejected_code_raises(fake_transport) -> None:  # noqa: ANN001
    fake_transport.queue('{"error": {"code": 100, "type": "OAuthException", "message": "bad code"}}', 400)
    with pytest.raises(AuthenticationError):
        _exchange(fake_transport)
