"""
SQLite platform.
"""

from __future__ import annotations

from .base import Platform


class SQLitePlatform(Platform):
    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset is not None:
            if limit is None:
                parts.append("LIMIT -1")
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)
