"""
Builder factory bound to one adapter's platform.
"""

from __future__ import annotations

from typing import Any

from ..platforms.base import Platform
from .base import SqlFunction, SqlLiteral
from .delete import Delete
from .insert import Insert
from .select import Select
from .update import Update


class BuilderFactory:
    def __init__(self, platform: Platform) -> None:
        self.platform = platform

    def select(self, columns: Any = None) -> Select:
        return Select(self.platform, columns)

    def insert(self, table: str | None = None) -> Insert:
        return Insert(self.platform, table)

    def update(self, table: str | None = None) -> Update:
        return Update(self.platform, table)

    def delete(self, table: str | None = None) -> Delete:
        return Delete(self.platform, table)

    def function(self, name: str, *identifiers: str) -> SqlFunction:
        function = SqlFunction(self.platform, name)
        for identifier in identifiers:
            function.identifier(identifier)
        return function

    def literal(self, expression: str) -> SqlLiteral:
        return SqlLiteral(expression)
