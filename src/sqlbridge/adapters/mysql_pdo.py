"""
PDO-style MySQL adapter over PyMySQL with ``:name`` placeholders.
"""

from __future__ import annotations

from typing import Any

from ..paramstyle import PYFORMAT
from ..platforms.base import DialectCapabilities, ParameterType, Platform
from ..platforms.mysql import MySqlPlatform
from .mysql import _load_driver as _load_pymysql
from .mysql import mysql_connect_arguments
from .pdo import PdoAdapterBase


def _load_driver():
    return _load_pymysql()


class MySqlPdoAdapter(PdoAdapterBase):
    driver_name = "mysql-pdo"
    driver_library = "PyMySQL"
    dsn_prefix = "mysql"
    capabilities = DialectCapabilities(
        name="mysql-pdo",
        parameter_type=ParameterType.NAMED,
        supports_full_join=False,
    )
    platform_class = MySqlPlatform
    paramstyle = PYFORMAT
    default_port = 3306

    def _load(self) -> Any:
        return _load_driver()

    def _connect(self, driver: Any) -> Any:
        arguments = mysql_connect_arguments(self.config, self.default_port)
        arguments.setdefault("autocommit", True)
        return driver.connect(**arguments)

    def _create_platform(self) -> Platform:
        return self.platform_class(self.capabilities, literal_quoter=self._connection.escape)

    # PyMySQL's autocommit is a method, the connection opens transactions itself
    def _begin_native(self) -> None:
        self._connection.begin()

    def _commit_native(self) -> None:
        self._connection.commit()

    def _rollback_native(self) -> None:
        self._connection.rollback()

    def last_insert_id(self, sequence_name: str | None = None) -> Any:
        self._require_open("get last insert id")
        return self._connection.insert_id()

    def _column_names_query(self, table: str) -> tuple[str, str]:
        return f"DESCRIBE {self._platform.format_table(table)}", "Field"
