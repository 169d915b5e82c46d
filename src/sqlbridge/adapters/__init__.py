"""
Database adapters, one per native driver.
"""

from __future__ import annotations

import importlib

from ..exceptions import ConfigurationError
from .base import AdapterBase, AdapterState
from .mssql_pdo import MsSqlPdoAdapter
from .mysql import MySqlAdapter
from .mysql_pdo import MySqlPdoAdapter
from .mysqli import MySqliAdapter
from .pdo import PdoAdapterBase
from .postgres import PostgresAdapter
from .postgres_pdo import PostgresPdoAdapter
from .sqlite import SqliteAdapter

DRIVER_CLASSES: dict[str, type[AdapterBase]] = {
    "mysql": MySqlAdapter,
    "mysqli": MySqliAdapter,
    "mysql-pdo": MySqlPdoAdapter,
    "pgsql": PostgresAdapter,
    "pgsql-pdo": PostgresPdoAdapter,
    "mssql-pdo": MsSqlPdoAdapter,
    "sqlite": SqliteAdapter,
}


def adapter_class_for(driver: str) -> type[AdapterBase]:
    """
    Resolve a normalized driver name, or a ``package.module:ClassName`` path
    to a custom ``AdapterBase`` subclass.
    """

    if driver in DRIVER_CLASSES:
        return DRIVER_CLASSES[driver]
    module_name, _, class_name = driver.partition(":")
    if not module_name or not class_name:
        raise ConfigurationError(f"Unknown driver '{driver}'.")
    try:
        module = importlib.import_module(module_name)
        adapter_class = getattr(module, class_name)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"Unable to import adapter class '{driver}'.", previous=exc) from exc
    if not isinstance(adapter_class, type) or not issubclass(adapter_class, AdapterBase):
        raise ConfigurationError(f"'{driver}' is not an AdapterBase subclass.")
    return adapter_class


__all__ = [
    "AdapterBase",
    "AdapterState",
    "DRIVER_CLASSES",
    "MsSqlPdoAdapter",
    "MySqlAdapter",
    "MySqlPdoAdapter",
    "MySqliAdapter",
    "PdoAdapterBase",
    "PostgresAdapter",
    "PostgresPdoAdapter",
    "SqliteAdapter",
    "adapter_class_for",
]
