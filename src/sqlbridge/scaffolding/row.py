"""
Row objects bound to a table's column list.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

from ..exceptions import InvalidStateError


class GenericRow:
    """
    Column values of one table row, reachable as attributes or by key.

    The column list is fixed once set; unknown columns raise ``AttributeError``
    or ``KeyError``.
    """

    __slots__ = ("_table_name", "_columns", "_values")

    def __init__(self, table_name: str, row: Mapping[str, Any] | None = None) -> None:
        object.__setattr__(self, "_table_name", table_name)
        object.__setattr__(self, "_columns", ())
        object.__setattr__(self, "_values", {})
        if row:
            self.set_columns(row.keys())
            self.exchange_array(row)

    @property
    def table_name(self) -> str:
        return self._table_name

    def get_columns(self) -> tuple[str, ...]:
        return self._columns

    def set_columns(self, columns: Iterable[str]) -> None:
        if self._columns:
            raise InvalidStateError("Unable to set columns when column(s) already defined.")
        columns = tuple(columns)
        object.__setattr__(self, "_columns", columns)
        object.__setattr__(self, "_values", dict.fromkeys(columns))

    def exchange_array(self, values: Mapping[str, Any]) -> None:
        if not self._columns:
            raise InvalidStateError("Unable to exchange values: columns are not loaded yet.")
        object.__setattr__(self, "_values", {column: values.get(column) for column in self._columns})

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __copy__(self) -> "GenericRow":
        clone = GenericRow(self._table_name)
        object.__setattr__(clone, "_columns", self._columns)
        object.__setattr__(clone, "_values", dict(self._values))
        return clone

    def __getattr__(self, name: str) -> Any:
        values = object.__getattribute__(self, "_values")
        if name not in values:
            raise AttributeError(f"Table '{self._table_name}' has no '{name}' column.")
        return values[name]

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self._values:
            raise AttributeError(f"Table '{self._table_name}' has no '{name}' column.")
        self._values[name] = value

    def __delattr__(self, name: str) -> None:
        raise InvalidStateError("Columns can't be removed from a row; set the value to None instead.")

    def __getitem__(self, name: str) -> Any:
        if name not in self._values:
            raise KeyError(name)
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        if name not in self._values:
            raise KeyError(name)
        self._values[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GenericRow):
            return NotImplemented
        return self._table_name == other._table_name and self._values == other._values

    def __repr__(self) -> str:
        return f"<GenericRow {self._table_name} {self._values!r}>"
