"""
INSERT statement builder.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..exceptions import IntegrityError, InvalidStateError
from ..platforms.base import Platform
from .base import ParameterContainer, SqlBuilder, SqlExpression, bind_parameter
from .select import Select


class Insert(SqlBuilder):
    def __init__(self, platform: Platform, table: str | None = None) -> None:
        super().__init__(platform)
        self._table = table
        self._fields: list[str] = []
        self._values: list[Any] = []
        self._select: Select | None = None

    def into(self, table: str) -> "Insert":
        self._table = table
        return self

    def values(self, values: Mapping[str, Any]) -> "Insert":
        """Replace the column/value pairs (and any ``from_select`` source)."""
        if not isinstance(values, Mapping):
            raise TypeError("Values must be a mapping of column name to value.")
        self._fields = []
        self._values = []
        self._select = None
        for field, value in values.items():
            if not isinstance(field, str):
                raise TypeError(f"Column name must be a string, got {field!r}.")
            self.value(field, value)
        return self

    def value(self, field: str, value: Any) -> "Insert":
        if not field or not field.strip():
            raise ValueError("Column name must not be empty.")
        self._fields.append(field.strip())
        self._values.append(value)
        return self

    def from_select(self, fields: Iterable[str], select: Select) -> "Insert":
        fields = [field.strip() for field in fields]
        if len(fields) != select.column_count():
            raise IntegrityError(
                "Number of INSERT columns doesn't match the number of selected columns.",
                driver=self.platform.name,
            )
        self._fields = fields
        self._values = []
        self._select = select
        return self

    def _validate(self) -> None:
        if not self._table:
            raise InvalidStateError("There is no table in INSERT statement.", driver=self.platform.name)
        if not self._fields:
            raise InvalidStateError("There are no columns in INSERT statement.", driver=self.platform.name)

    def _compile(self, container: ParameterContainer | None) -> str:
        platform = self.platform
        columns = ", ".join(platform.quote_identifier(field) for field in self._fields)
        fragments = [f"INSERT INTO {platform.format_table(self._table)}", f"({columns})"]
        if self._select is not None:
            fragments.append(self._select.compile_subquery(container))
        else:
            rendered: list[str] = []
            for value in self._values:
                if isinstance(value, SqlExpression):
                    rendered.append(value.to_string(container))
                elif container is not None:
                    rendered.append(bind_parameter(platform, container, "insert", value))
                else:
                    rendered.append(platform.quote_value(value))
            fragments.append(f"VALUES ({', '.join(rendered)})")
        return " ".join(fragments)
