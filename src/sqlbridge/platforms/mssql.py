"""
SQL Server platform: bracket identifiers and OFFSET/FETCH paging.
"""

from __future__ import annotations

from .base import Platform


class MsSqlPlatform(Platform):
    identifier_open = "["
    identifier_close = "]"

    def _quote_bytes(self, value: bytes) -> str:
        return f"0x{value.hex()}"

    def _quote_string(self, value: str) -> str:
        escaped = value.replace("'", "''")
        return f"N'{escaped}'"

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        # OFFSET/FETCH is only valid after ORDER BY; the select builder guarantees one.
        if limit is None and offset is None:
            return ""
        parts = [f"OFFSET {offset or 0} ROWS"]
        if limit is not None:
            parts.append(f"FETCH NEXT {limit} ROWS ONLY")
        return " ".join(parts)
