"""
Slow-query threshold resolution.
"""

from __future__ import annotations

import os

from ..exceptions import ConfigurationError

SLOW_QUERY_ENV = "SQLBRIDGE_SLOW_QUERY_MS"


def resolve_slow_query_ms(default: int = 100, override: int | None = None) -> int:
    """
    Pick the slow-query threshold: explicit override, then environment, then default.
    """

    if override is not None:
        if override < 0:
            raise ConfigurationError(f"Slow query threshold must be >= 0, got {override}.")
        return int(override)
    raw = os.getenv(SLOW_QUERY_ENV)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid integer value for {SLOW_QUERY_ENV}: {raw!r}", previous=exc
        ) from exc
    if value < 0:
        raise ConfigurationError(f"{SLOW_QUERY_ENV} must be >= 0, got {value}.")
    return value
