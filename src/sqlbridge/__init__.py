"""
sqlbridge public package initialization.

Adapters wrap one native DB-API driver each behind a common contract;
builders produce dialect-correct SQL through the adapter's platform.
"""

from .adapters import (  # noqa: F401
    AdapterBase,
    AdapterState,
    MsSqlPdoAdapter,
    MySqlAdapter,
    MySqlPdoAdapter,
    MySqliAdapter,
    PostgresAdapter,
    PostgresPdoAdapter,
    SqliteAdapter,
)
from .builders import BuilderFactory, Delete, Insert, Select, Update  # noqa: F401
from .config import AdapterConfig, AdapterOptions  # noqa: F401
from .exceptions import (  # noqa: F401
    ConfigurationError,
    ConnectionError,
    DbException,
    IntegrityError,
    InvalidStateError,
    QueryError,
    UnsupportedOperationError,
)
from .manager import DbManager, OverridePolicy  # noqa: F401
from .platforms import ParameterType, Platform  # noqa: F401
from .query import FetchMode, Query, ResultSet  # noqa: F401
from .scaffolding import GenericRow, Table  # noqa: F401
from .statement import BindType, Statement  # noqa: F401

__all__ = [
    "AdapterBase",
    "AdapterConfig",
    "AdapterOptions",
    "AdapterState",
    "BindType",
    "BuilderFactory",
    "ConfigurationError",
    "ConnectionError",
    "DbException",
    "DbManager",
    "Delete",
    "FetchMode",
    "GenericRow",
    "Insert",
    "IntegrityError",
    "InvalidStateError",
    "MsSqlPdoAdapter",
    "MySqlAdapter",
    "MySqlPdoAdapter",
    "MySqliAdapter",
    "OverridePolicy",
    "ParameterType",
    "Platform",
    "PostgresAdapter",
    "PostgresPdoAdapter",
    "Query",
    "QueryError",
    "ResultSet",
    "Select",
    "SqliteAdapter",
    "Statement",
    "Table",
    "UnsupportedOperationError",
    "Update",
]
