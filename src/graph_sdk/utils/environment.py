"""Utility functions for reading SDK settings from the environment."""

import logging
import os
from typing import Final, Tuple

logger = logging.getLogger("graph-sdk.utils.environment")

ENV_PREFIX: Final[str] = "GRAPH_"

_TRUTHY: Final[Tuple[str, ...]] = ("true", "1", "yes", "y", "on")
_FALSY: Final[Tuple[str, ...]] = ("false", "0", "no", "n", "off")


def env_get(key: str, default: str | None = None) -> str | None:
    """Return ``GRAPH_<key>``, treating blank values as unset."""
    value = os.getenv(f"{ENV_PREFIX}{key}")
    if value is None or not value.strip():
        return default
    return value.strip()


def env_flag(key: str, default: bool) -> bool:
    """
    Return the boolean ``GRAPH_<key>`` flag.

    Unset or unrecognised values fall back to *default*; an unrecognised value
    is logged so typos do not silently flip security settings.
    """
    raw = env_get(key)
    if raw is None:
        return default
    if raw.lower() in _TRUTHY:
        return True
    if raw.lower() in _FALSY:
        return False
    logger.warning("Ignoring unrecognised value for %s%s; using %s", ENV_PREFIX, key, default)
    return default


def env_float(key: str, default: float) -> float:
    raw = env_get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s%s; using %s", ENV_PREFIX, key, default)
        return default
