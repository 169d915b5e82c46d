"""
MySQL platform: backtick identifiers, backslash-aware string literals.
"""

from __future__ import annotations

from .base import Platform

_ESCAPE_TABLE = {
    "\0": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\x1a": "\\Z",
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
}


class MySqlPlatform(Platform):
    """
    Shared by the ``mysql``, ``mysqli`` and ``mysql-pdo`` adapters; only the
    parameter style differs between them.
    """

    identifier_open = "`"
    identifier_close = "`"

    def _quote_string(self, value: str) -> str:
        escaped = "".join(_ESCAPE_TABLE.get(ch, ch) for ch in value)
        return f"'{escaped}'"

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset is not None:
            if limit is None:
                parts.append("LIMIT 18446744073709551615")
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)
