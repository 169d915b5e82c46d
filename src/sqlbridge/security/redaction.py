"""Redaction helpers for DSNs, adapter options and logged parameters."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

REDACTED_VALUE = "***"

_SENSITIVE_KEY_TOKENS = (
    "password",
    "passwd",
    "pwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "access_key",
    "private_key",
    "sslkey",
    "ssl_key",
)

_SENSITIVE_VALUE_TOKENS = (
    "password",
    "passwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "private_key",
    "bearer",
    "authorization",
)


def _compact(value: str) -> str:
    return "".join(ch for ch in value if ch.isalnum())


def is_sensitive_key(key: str) -> bool:
    normalized = key.lower()
    compact = _compact(normalized)
    return any(token in normalized or _compact(token) in compact for token in _SENSITIVE_KEY_TOKENS)


def is_sensitive_value(value: str) -> bool:
    normalized = value.lower()
    return any(token in normalized for token in _SENSITIVE_VALUE_TOKENS)


def redact_query_params(query: Mapping[str, str]) -> dict[str, str]:
    return {key: REDACTED_VALUE if is_sensitive_key(key) else val for key, val in query.items()}


def redact_value(value: Any, *, key: str | None = None) -> Any:
    if key is not None and is_sensitive_key(str(key)):
        return REDACTED_VALUE
    if isinstance(value, Mapping):
        return {k: redact_value(v, key=str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(redact_value(item) for item in value)
    if isinstance(value, bytes):
        decoded = value.decode("utf-8", errors="ignore")
        if decoded and is_sensitive_value(decoded):
            return REDACTED_VALUE
        return value
    if isinstance(value, str) and is_sensitive_value(value):
        return REDACTED_VALUE
    return value


def redact_params(params: Iterable[Any] | Mapping[str, Any] | None) -> Any:
    """
    Redact a positional sequence or a name -> value mapping of bound parameters.
    """

    if params is None:
        return None
    if isinstance(params, Mapping):
        return redact_value(params)
    return [redact_value(value) for value in params]
