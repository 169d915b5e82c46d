"""
PostgreSQL adapter over psycopg 3 with ``$n`` placeholders.
"""

from __future__ import annotations

from typing import Any

from ..config import AdapterConfig
from ..paramstyle import FORMAT
from ..platforms.base import DialectCapabilities, ParameterType, Platform
from ..platforms.postgres import PostgresPlatform
from .base import AdapterBase


def _load_driver():
    try:
        import psycopg
        import psycopg.sql  # noqa: F401

        return psycopg
    except ImportError:
        return None


def postgres_connect_arguments(config: AdapterConfig, default_port: int) -> dict[str, Any]:
    options = config.options
    arguments: dict[str, Any] = {
        # a unix socket directory is passed as the host
        "host": options.socket or config.server,
        "port": options.port or default_port,
        "user": config.username,
        "password": config.password,
        "dbname": config.db_name,
    }
    for key, value in (
        ("connect_timeout", options.connect_timeout),
        ("sslmode", options.ssl_mode),
        ("sslrootcert", options.ssl_ca),
        ("sslcert", options.ssl_cert),
        ("sslkey", options.ssl_key),
        ("client_encoding", options.charset),
    ):
        if value is not None:
            arguments[key] = value
    arguments = {key: value for key, value in arguments.items() if value is not None}
    arguments.update(options.init)
    return arguments


def postgres_platform(adapter: AdapterBase) -> Platform:
    connection = adapter._connection
    sql = getattr(adapter._driver, "sql", None)
    if sql is None:
        return adapter.platform_class(adapter.capabilities)
    return adapter.platform_class(
        adapter.capabilities,
        literal_quoter=lambda value: sql.Literal(value).as_string(connection),
        identifier_quoter=lambda name: sql.Identifier(name).as_string(connection),
    )


def describe_postgres_error(exc: BaseException) -> tuple[Any, str, str | None]:
    sql_state = getattr(exc, "sqlstate", None)
    diag = getattr(exc, "diag", None)
    message = getattr(diag, "message_primary", None) or str(exc)
    return sql_state or 0, message, sql_state


def postgres_columns_query(platform: Platform, table: str) -> tuple[str, str]:
    schema, _, name = table.rpartition(".")
    sql = (
        "SELECT column_name FROM information_schema.columns"
        f" WHERE table_schema = {platform.quote_value(schema or 'public')}"
        f" AND table_name = {platform.quote_value(name)}"
        " ORDER BY ordinal_position"
    )
    return sql, "column_name"


class PostgresAdapter(AdapterBase):
    """
    Transactions are driven by ``BEGIN``/``COMMIT``/``ROLLBACK`` statements on
    an autocommit connection.
    """

    driver_name = "pgsql"
    driver_library = "psycopg"
    capabilities = DialectCapabilities(
        name="pgsql",
        parameter_type=ParameterType.INDEX,
        supports_sequences=True,
        supports_change_db=False,
    )
    platform_class = PostgresPlatform
    paramstyle = FORMAT
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
