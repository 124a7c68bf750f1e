"""URL constants and helpers for the Graph API and the login dialog."""

from __future__ import annotations

from typing import Final, Mapping
from urllib.parse import parse_qsl, urlencode

from graph_sdk.client.errors import ConfigurationError

SDK_VERSION: Final[str] = "0.1.0"
SDK_IDENTIFIER: Final[str] = f"python-sdk-{SDK_VERSION}"

GRAPH_BASE_URL: Final[str] = "https://graph.facebook.com"
BETA_GRAPH_BASE_URL: Final[str] = "https://graph.beta.facebook.com"
WWW_BASE_URL: Final[str] = "https://www.facebook.com"
LOGOUT_URL: Final[str] = f"{WWW_BASE_URL}/logout.php"

SUPPORTED_GRAPH_VERSIONS: Final[tuple[str, ...]] = ("v1.0", "v2.0")
DEFAULT_GRAPH_VERSION: Final[str] = "v2.0"


def validate_graph_version(graph_version: str) -> str:
    """Return *graph_version* unchanged, or raise ``ConfigurationError``."""
    if graph_version not in SUPPORTED_GRAPH_VERSIONS:
        raise ConfigurationError(
            f"Invalid Graph version {graph_version!r}; "
            f"expected one of {', '.join(SUPPORTED_GRAPH_VERSIONS)}"
        )
    return graph_version


def graph_base_url(*, use_beta: bool = False) -> str:
    return BETA_GRAPH_BASE_URL if use_beta else GRAPH_BASE_URL


def build_query(params: Mapping[str, str]) -> str:
    """Form-encode *params* with ``&`` separators."""
    return urlencode(list(params.items()))


def append_params_to_url(url: str, params: Mapping[str, str] | None = None) -> str:
    """Append *params* to *url*'s query string.

    Parameters already present in *url* take precedence over same-named
    entries in *params*.
    """
    if not params:
        return url

    if "?" not in url:
        return f"{url}?{build_query(params)}"

    path, query_string = url.split("?", 1)
    merged: dict[str, str] = dict(params)
    merged.update(parse_qsl(query_string, keep_blank_values=True))
    return f"{path}?{build_query(merged)}"


def oauth_dialog_url(graph_version: str, params: Mapping[str, str]) -> str:
    return f"{WWW_BASE_URL}/{graph_version}/dialog/oauth?{build_query(params)}"
