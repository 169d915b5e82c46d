"""
PDO-style SQL Server adapter over pyodbc with ``:name`` placeholders.
"""

from __future__ import annotations

from typing import Any

from ..paramstyle import QMARK
from ..platforms.base import DialectCapabilities, ParameterType
from ..platforms.mssql import MsSqlPlatform
from .pdo import PdoAdapterBase

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"


def _load_driver():
    try:
        import pyodbc  # type: ignore[import-untyped]

        return pyodbc
    except ImportError:
        return None


class MsSqlPdoAdapter(PdoAdapterBase):
    """
    Connection attributes not understood here (``init`` entries) are appended
    to the ODBC connection string; ``odbc_driver`` selects the ODBC driver.
    """

    driver_name = "mssql-pdo"
    driver_library = "pyodbc"
    dsn_prefix = "sqlsrv"
    capabilities = DialectCapabilities(
        name="mssql-pdo",
        parameter_type=ParameterType.NAMED,
        supports_sequences=True,
        limit_requires_order=True,
    )
    platform_class = MsSqlPlatform
    paramstyle = QMARK
    default_port = 1433

    def _load(self) -> Any:
        return _load_driver()

    def connection_string(self) -> str:
        config = self.config
        options = config.options
        extras = dict(options.init)
        odbc_driver = extras.pop("odbc_driver", None) or DEFAULT_ODBC_DRIVER
        parts = [
            f"DRIVER={{{odbc_driver}}}",
            f"SERVER={config.server},{options.port or self.default_port}",
        ]
        if config.db_name:
            parts.append(f"DATABASE={config.db_name}")
        if config.username:
            parts.append(f"UID={config.username}")
        if config.password:
            parts.append(f"PWD={config.password}")
        if options.encrypted:
            parts.append("Encrypt=yes")
        for key, value in extras.items():
            parts.append(f"{key}={value}")
        if not any(key.lower() == "trustservercertificate" for key in extras):
            parts.append("TrustServerCertificate=yes")
        return ";".join(parts) + ";"

    def generate_dsn(self) -> str:
        options = self.config.options
        dsn = f"{self.dsn_prefix}:Server={self.config.server},{options.port or self.default_port}"
        if self.config.db_name:
            dsn += f";Database={self.config.db_name}"
        return dsn

    def _connect(self, driver: Any) -> Any:
        # pooling is a module-wide switch read when the first connection opens
        driver.pooling = bool(self.config.options.pooled)
        kwargs: dict[str, Any] = {"autocommit": True}
        if self.config.options.connect_timeout is not None:
            kwargs["timeout"] = self.config.options.connect_timeout
        return driver.connect(self.connection_string(), **kwargs)

    def _describe_error(self, exc: BaseException) -> tuple[Any, str, str | None]:
        args = getattr(exc, "args", ())
        if len(args) >= 2 and isinstance(args[0], str):
            return args[0], str(args[1]), args[0]
        return super()._describe_error(exc)

    def last_insert_id(self, sequence_name: str | None = None) -> Any:
        self._require_open("get last insert id")
        if sequence_name:
            sql = (
                "SELECT current_value FROM sys.sequences"
                f" WHERE name = {self._platform.quote_value(sequence_name)}"
            )
            return self._scalar(sql, "get last insert id")
        return self._scalar("SELECT @@IDENTITY", "get last insert id")

    def _column_names_query(self, table: str) -> tuple[str, str]:
        name = table.rsplit(".", 1)[-1]
        return f"EXEC sp_columns @table_name = {self._platform.quote_value(name)}", "COLUMN_NAME"
