"""
Platform strategy registry.
"""

from .base import DialectCapabilities, ParameterType, Platform
from .mssql import MsSqlPlatform
from .mysql import MySqlPlatform
from .postgres import PostgresPlatform
from .sqlite import SQLitePlatform

__all__ = [
    "DialectCapabilities",
    "MsSqlPlatform",
    "MySqlPlatform",
    "ParameterType",
    "Platform",
    "PostgresPlatform",
    "SQLitePlatform",
]
