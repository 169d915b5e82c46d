"""
Legacy MySQL adapter over PyMySQL.

This driver exposes no prepared statements: ``prepare_query()`` returns
``None`` and callers fall back to ``query()`` with inlined literals.
"""

from __future__ import annotations

from typing import Any

from ..config import AdapterConfig
from ..paramstyle import FORMAT
from ..platforms.base import DialectCapabilities, ParameterType, Platform
from ..platforms.mysql import MySqlPlatform
from .base import AdapterBase


def _load_driver():
    try:
        import pymysql  # type: ignore[import-untyped]

        return pymysql
    except ImportError:
        return None


def mysql_connect_arguments(config: AdapterConfig, default_port: int) -> dict[str, Any]:
    """
    Keyword arguments shared by PyMySQL and mysqlclient ``connect()``.
    """

    options = config.options
    arguments: dict[str, Any] = {
        "user": config.username,
        "password": config.password or "",
    }
    if options.socket:
        arguments["unix_socket"] = options.socket
    else:
        arguments["host"] = config.server
        arguments["port"] = options.port or default_port
    if config.db_name:
        arguments["database"] = config.db_name
    if options.connect_timeout is not None:
        arguments["connect_timeout"] = options.connect_timeout
    if options.charset:
        arguments["charset"] = options.charset
    ssl = {
        key: value
        for key, value in (("ca", options.ssl_ca), ("cert", options.ssl_cert), ("key", options.ssl_key))
        if value
    }
    if ssl:
        arguments["ssl"] = ssl
    arguments.update(options.init)
    return arguments


class MySqlAdapter(AdapterBase):
    driver_name = "mysql"
    driver_library = "PyMySQL"
    capabilities = DialectCapabilities(
        name="mysql",
        parameter_type=ParameterType.NONE,
        supports_prepared=False,
        supports_full_join=False,
    )
    platform_class = MySqlPlatform
    paramstyle = FORMAT
    default_port = 3306
    begin_sql = "START TRANSACTION"

    def _load(self) -> Any:
        return _load_driver()

    def _connect(self, driver: Any) -> Any:
        arguments = mysql_connect_arguments(self.config, self.default_port)
        if self.config.options.pooled:
            self.logger.debug("Option 'pooled' has no effect for the %s driver.", self.driver_name)
        arguments.setdefault("autocommit", True)
        return driver.connect(**arguments)

    def _create_platform(self) -> Platform:
        return self.platform_class(self.capabilities, literal_quoter=self._connection.escape)

    def last_insert_id(self, sequence_name: str | None = None) -> Any:
        # MySQL has no sequences; the name is ignored
        self._require_open("get last insert id")
        return self._connection.insert_id()

    def _column_names_query(self, table: str) -> tuple[str, str]:
        return f"DESCRIBE {self._platform.format_table(table)}", "Field"
