"""
PDO-style PostgreSQL adapter over psycopg 3 with ``:name`` placeholders.
"""

from __future__ import annotations

from typing import Any

from ..paramstyle import PYFORMAT
from ..platforms.base import DialectCapabilities, ParameterType, Platform
from ..platforms.postgres import PostgresPlatform
from .pdo import PdoAdapterBase
from .postgres import (
    _load_driver as _load_psycopg,
    describe_postgres_error,
    postgres_columns_query,
    postgres_connect_arguments,
    postgres_platform,
)


def _load_driver():
    return _load_psycopg()


class PostgresPdoAdapter(PdoAdapterBase):
    driver_name = "pgsql-pdo"
    driver_library = "psycopg"
    dsn_prefix = "pgsql"
    capabilities = DialectCapabilities(
        name="pgsql-pdo",
        parameter_type=ParameterType.NAMED,
        supports_sequences=True,
        supports_change_db=False,
    )
    platform_class = PostgresPlatform
    paramstyle = PYFORMAT
    default_port = 5432

    def _load(self) -> Any:
        return _load_driver()

    def _connect(self, driver: Any) -> Any:
        arguments = postgres_connect_arguments(self.config, self.default_port)
        arguments["autocommit"] = True
        return driver.connect(**arguments)

    def _create_platform(self) -> Platform:
        return postgres_platform(self)

    def _describe_error(self, exc: BaseException) -> tuple[Any, str, str | None]:
        return describe_postgres_error(exc)

    def _execute_native(self, cursor: Any, sql: str, params: Any = None, *, prepared: bool = False) -> None:
        if params is None:
            cursor.execute(sql)
        else:
            cursor.execute(sql, params, prepare=prepared or None)

    def last_insert_id(self, sequence_name: str | None = None) -> Any:
        self._require_open("get last insert id")
        if sequence_name:
            return self._scalar(f"SELECT currval({self._platform.quote_value(sequence_name)})", "get last insert id")
        return self._scalar("SELECT lastval()", "get last insert id")

    def _column_names_query(self, table: str) -> tuple[str, str]:
        return postgres_columns_query(self._platform, table)
