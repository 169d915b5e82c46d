"""
UPDATE statement builder.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..exceptions import InvalidStateError
from ..platforms.base import Platform
from .base import ParameterContainer, SqlBuilder, SqlExpression, Where, bind_parameter


class Update(SqlBuilder):
    def __init__(self, platform: Platform, table: str | None = None) -> None:
        super().__init__(platform)
        self._table = table
        self._fields: list[str] = []
        self._values: list[Any] = []
        self._wheres: list[Where] = []

    def table(self, table: str) -> "Update":
        self._table = table
        return self

    def sets(self, sets: Mapping[str, Any]) -> "Update":
        if not isinstance(sets, Mapping):
            raise TypeError("Sets must be a mapping of column name to value.")
        self._fields = []
        self._values = []
        for field, value in sets.items():
            if not isinstance(field, str):
                raise TypeError(f"Column name must be a string, got {field!r}.")
            self.set(field, value)
        return self

    def set(self, field: str, value: Any) -> "Update":
        if not field or not field.strip():
            raise ValueError("Column name must not be empty.")
        self._fields.append(field.strip())
        self._values.append(value)
        return self

    def where(self, field: str | SqlExpression, value: Any, operator: str = "=") -> "Update":
        self._wheres.append(Where(self.platform, field, value, operator))
        return self

    def _validate(self) -> None:
        if not self._table:
            raise InvalidStateError("There is no table in UPDATE statement.", driver=self.platform.name)
        if not self._fields:
            raise InvalidStateError("There are no columns in UPDATE statement.", driver=self.platform.name)

    def _compile(self, container: ParameterContainer | None) -> str:
        platform = self.platform
        assignments: list[str] = []
        for field, value in zip(self._fields, self._values):
            if isinstance(value, SqlExpression):
                rendered = value.to_string(container)
            elif container is not None:
                rendered = bind_parameter(platform, container, "update", value)
            else:
                rendered = platform.quote_value(value)
            assignments.append(f"{platform.quote_identifier_list(field)} = {rendered}")
        fragments = [f"UPDATE {platform.format_table(self._table)}", f"SET {', '.join(assignments)}"]
        fragments.extend(self._render_conditions("WHERE", self._wheres, container))
        return " ".join(fragments)
