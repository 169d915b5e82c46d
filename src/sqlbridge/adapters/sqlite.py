"""
SQLite adapter over the standard library ``sqlite3`` module.
"""

from __future__ import annotations

import sqlite3
from typing import Any

from ..paramstyle import QMARK
from ..platforms.base import DialectCapabilities, ParameterType
from ..platforms.sqlite import SQLitePlatform
from .base import AdapterBase


def _load_driver():
    return sqlite3


class SqliteAdapter(AdapterBase):
    """
    ``server`` (or ``db_name``) names the database file; ``:memory:`` opens a
    private in-memory database.
    """

    driver_name = "sqlite"
    driver_library = "sqlite3"
    capabilities = DialectCapabilities(
        name="sqlite",
        parameter_type=ParameterType.POSITION,
        supports_change_db=False,
    )
    platform_class = SQLitePlatform
    paramstyle = QMARK

    def _load(self) -> Any:
        return _load_driver()

    def _connect(self, driver: Any) -> Any:
        path = self.config.server or self.config.db_name
        timeout = self.config.options.connect_timeout
        arguments: dict[str, Any] = {
            "timeout": float(timeout) if timeout is not None else 5.0,
            # transactions are controlled with explicit BEGIN/COMMIT
            "isolation_level": None,
            "check_same_thread": False,
        }
        arguments.update(self.config.options.init)
        connection = driver.connect(path, **arguments)
        connection.execute("PRAGMA foreign_keys = ON")
        return connection

    def last_insert_id(self, sequence_name: str | None = None) -> Any:
        return self._scalar("SELECT last_insert_rowid()", "get last insert id")

    def _column_names_query(self, table: str) -> tuple[str, str]:
        schema, _, name = table.rpartition(".")
        prefix = f"{self._platform.quote_identifier(schema)}." if schema else ""
        return f"PRAGMA {prefix}table_info({self._platform.quote_identifier(name)})", "name"
