"""
DELETE statement builder.
"""

from __future__ import annotations

from typing import Any

from ..exceptions import InvalidStateError
from ..platforms.base import Platform
from .base import ParameterContainer, SqlBuilder, SqlExpression, Where


class Delete(SqlBuilder):
    def __init__(self, platform: Platform, table: str | None = None) -> None:
        super().__init__(platform)
        self._table = table
        self._wheres: list[Where] = []

    def from_(self, table: str) -> "Delete":
        self._table = table
        return self

    def where(self, field: str | SqlExpression, value: Any, operator: str = "=") -> "Delete":
        self._wheres.append(Where(self.platform, field, value, operator))
        return self

    def _validate(self) -> None:
        if not self._table:
            raise InvalidStateError("There is no table in DELETE statement.", driver=self.platform.name)

    def _compile(self, container: ParameterContainer | None) -> str:
        fragments = [f"DELETE FROM {self.platform.format_table(self._table)}"]
        fragments.extend(self._render_conditions("WHERE", self._wheres, container))
        return " ".join(fragments)
