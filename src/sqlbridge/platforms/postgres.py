"""
PostgreSQL platform.
"""

from __future__ import annotations

from .base import Platform


class PostgresPlatform(Platform):
    """
    Double-quoted identifiers. Without a native identifier primitive an
    embedded double quote is backslash-escaped.
    """

    def _escape_identifier(self, identifier: str) -> str:
        escaped = identifier.replace('"', '\\"')
        return f'"{escaped}"'

    def _format_bool(self, value: bool) -> str:
        return "TRUE" if value else "FALSE"

    def _quote_bytes(self, value: bytes) -> str:
        return f"'\\x{value.hex()}'::bytea"
