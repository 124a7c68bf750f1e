"""Explicit SDK configuration.

There is no process-wide default app: every component receives a
:class:`GraphConfig` (or the individual values) at construction.
"""

from __future__ import annotations

from dataclasses import dataclass

from graph_sdk.client.errors import ConfigurationError
from graph_sdk.client.transport import DEFAULT_TIMEOUT
from graph_sdk.client.urls import DEFAULT_GRAPH_VERSION, validate_graph_version
from graph_sdk.utils.environment import env_flag, env_float, env_get


@dataclass(frozen=True)
class GraphConfig:
    """Application credentials and client behaviour."""

    app_id: str
    app_secret: str
    graph_version: str = DEFAULT_GRAPH_VERSION
    use_secret_proof: bool = True
    use_beta: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.app_id or not self.app_secret:
            raise ConfigurationError("app_id and app_secret are required")
        validate_graph_version(self.graph_version)

    def __repr__(self) -> str:
        return (
            f"GraphConfig(app_id={self.app_id!r}, app_secret='****', "
            f"graph_version={self.graph_version!r}, "
            f"use_secret_proof={self.use_secret_proof}, use_beta={self.use_beta}, "
            f"timeout={self.timeout})"
        )

    @classmethod
    def from_env(cls) -> GraphConfig:
        """Create configuration from ``GRAPH_*`` environment variables.

        ``GRAPH_APP_ID`` and ``GRAPH_APP_SECRET`` are required;
        ``GRAPH_API_VERSION``, ``GRAPH_ENABLE_SECRET_PROOF``,
        ``GRAPH_USE_BETA`` and ``GRAPH_HTTP_TIMEOUT`` are optional.
        """
        app_id = env_get("APP_ID")
        app_secret = env_get("APP_SECRET")
        if not app_id or not app_secret:
            raise ConfigurationError(
                "GRAPH_APP_ID and GRAPH_APP_SECRET environment variables are required"
            )
        return cls(
            app_id=app_id,
            app_secret=app_secret,
            graph_version=env_get("API_VERSION", DEFAULT_GRAPH_VERSION) or DEFAULT_GRAPH_VERSION,
            use_secret_proof=env_flag("ENABLE_SECRET_PROOF", True),
            use_beta=env_flag("USE_BETA", False),
            timeout=env_float("HTTP_TIMEOUT", DEFAULT_TIMEOUT),
        )
