"""
MySQL adapter over mysqlclient (``MySQLdb``) with ``?`` placeholders.
"""

from __future__ import annotations

from typing import Any

from ..paramstyle import FORMAT
from ..platforms.base import DialectCapabilities, ParameterType, Platform
from ..platforms.mysql import MySqlPlatform
from .base import AdapterBase
from .mysql import mysql_connect_arguments


def _load_driver():
    try:
        import MySQLdb  # type: ignore[import-untyped]

        return MySQLdb
    except ImportError:
        return None


class MySqliAdapter(AdapterBase):
    driver_name = "mysqli"
    driver_library = "mysqlclient"
    capabilities = DialectCapabilities(
        name="mysqli",
        parameter_type=ParameterType.POSITION,
        supports_full_join=False,
    )
    platform_class = MySqlPlatform
    paramstyle = FORMAT
    default_port = 3306

    def _load(self) -> Any:
        return _load_driver()

    def _connect(self, driver: Any) -> Any:
        arguments = mysql_connect_arguments(self.config, self.default_port)
        if self.config.options.ssl_mode:
            arguments.setdefault("ssl_mode", self.config.options.ssl_mode.upper())
        connection = driver.connect(**arguments)
        connection.autocommit(True)
        return connection

    def _create_platform(self) -> Platform:
        connection = self._connection

        def literal(value: Any) -> str:
            quoted = connection.literal(value)
            if isinstance(quoted, bytes):
                return quoted.decode(getattr(connection, "encoding", None) or "utf-8")
            return quoted

        return self.platform_class(self.capabilities, literal_quoter=literal)

    def _begin_native(self) -> None:
        self._connection.autocommit(False)

    def _commit_native(self) -> None:
        self._connection.commit()
        self._connection.autocommit(True)

    def _rollback_native(self) -> None:
        self._connection.rollback()
        self._connection.autocommit(True)

    def change_db(self, db_name: str) -> bool:
        self._ensure_open()
        self._reset_error()
        try:
            self._connection.select_db(db_name)
        except self.native_errors() as exc:
            self._record_error(exc, f"USE {db_name}")
            return False
        return True

    def last_insert_id(self, sequence_name: str | None = None) -> Any:
        self._require_open("get last insert id")
        return self._connection.insert_id()

    def _column_names_query(self, table: str) -> tuple[str, str]:
        return f"DESCRIBE {self._platform.format_table(table)}", "Field"
