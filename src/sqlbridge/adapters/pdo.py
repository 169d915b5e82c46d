"""
Base class for the PDO-style adapters.

PDO-style adapters share three traits: named ``:name`` placeholders, native
transaction control through the connection object instead of SQL statements,
and SQLSTATE reporting next to the native error code.
"""

from __future__ import annotations

from typing import Any

from ..exceptions import DbException, UnsupportedOperationError
from .base import AdapterBase


class PdoAdapterBase(AdapterBase):
    dsn_prefix = ""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._sql_state: str | None = None

    def generate_dsn(self) -> str:
        """
        PDO-style DSN (``mysql:host=...;port=...;dbname=...``) describing the
        connection target, used for diagnostics.
        """

        options = self.config.options
        parts = []
        if options.socket:
            parts.append(f"unix_socket={options.socket}")
        else:
            parts.append(f"host={self.config.server}")
            port = options.port or self.default_port
            if port:
                parts.append(f"port={port}")
        if self.config.db_name:
            parts.append(f"dbname={self.config.db_name}")
        return f"{self.dsn_prefix}:{';'.join(parts)}"

    def get_sql_state(self) -> str | None:
        return self._sql_state

    def _reset_error(self) -> None:
        super()._reset_error()
        self._sql_state = None

    def _set_error(self, error: DbException) -> None:
        super()._set_error(error)
        self._sql_state = error.sql_state

    # Native transaction API -------------------------------------------
    def _begin_native(self) -> None:
        self._connection.autocommit = False

    def _commit_native(self) -> None:
        self._connection.commit()
        self._connection.autocommit = True

    def _rollback_native(self) -> None:
        self._connection.rollback()
        self._connection.autocommit = True

    def call_native_function(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """
        Invoke a method of the native connection object by name.
        """

        connection = self.get_native_connector()
        method = getattr(connection, name, None)
        if method is None or not callable(method):
            raise UnsupportedOperationError(
                f"Native connection of '{self.driver_name}' has no method '{name}'.", driver=self.driver_name
            )
        return method(*args, **kwargs)
