"""Signing and entropy primitives.

``appsecret_proof``
    HMAC-SHA256 of the access token keyed with the application secret,
    hex-encoded. Graph accepts it alongside ``access_token`` to prove the
    caller knows the app secret.

``random_hex``
    Hex-encoded bytes from the operating system CSPRNG (:pymod:`secrets`).
    There is no fallback source; if the OS cannot provide entropy the
    underlying error propagates.

Neither helper logs its inputs or outputs.
"""

from __future__ import annotations

import hmac
import secrets
from hashlib import sha256
from typing import Final

from graph_sdk.client.errors import ConfigurationError

STATE_BYTES: Final[int] = 16


def appsecret_proof(token_value: str, app_secret: str) -> str:
    """Return ``hex(HMAC-SHA256(key=app_secret, msg=token_value))``."""
    return hmac.new(
        app_secret.encode("utf-8"),
        msg=token_value.encode("utf-8"),
        digestmod=sha256,
    ).hexdigest()


def random_hex(num_bytes: int) -> str:
    """Return *num_bytes* of secure randomness as ``2 * num_bytes`` hex chars.

    Raises
    ------
    ConfigurationError
        If *num_bytes* is not a positive integer.
    """
    # bool is an int subclass but never a meaningful size
    if isinstance(num_bytes, bool) or not isinstance(num_bytes, int):
        raise ConfigurationError("random_hex() expects an integer")
    if num_bytes < 1:
        raise ConfigurationError("random_hex() expects an integer greater than zero")
    return secrets.token_hex(num_bytes)


def constant_time_equals(left: str | None, right: str | None) -> bool:
    """Compare two optional strings; ``None`` on either side never matches."""
    if left is None or right is None:
        return False
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))
