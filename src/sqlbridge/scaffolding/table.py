"""
Table gateway: row-level CRUD helpers built on the adapter's builders.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Mapping

from ..query import FetchMode, Prototype, check_prototype
from .row import GenericRow

if TYPE_CHECKING:
    from ..adapters.base import AdapterBase


def _as_values(values: Any, action: str) -> Mapping[str, Any]:
    if isinstance(values, Mapping):
        return values
    to_dict = getattr(values, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"{action} accepts a mapping or a row object providing to_dict().")


class Table:
    """
    Gateway over one table.

    Rows are ``GenericRow`` instances whose columns are read from the database
    on first use, unless a prototype is set with ``set_prototype()``. Values
    are inlined as literals so every driver, including those without prepared
    statements, can be used.
    """

    def __init__(self, name: str, adapter: "AdapterBase") -> None:
        self.name = name
        self.adapter = adapter
        self._prototype: Prototype = None
        self._generic = GenericRow(name)

    def get_prototype(self) -> Prototype:
        return self._prototype

    def set_prototype(self, prototype: Prototype) -> None:
        self._prototype = check_prototype(prototype)

    def _generic_prototype(self) -> GenericRow:
        if not self._generic.get_columns():
            self._generic.set_columns(self.adapter.get_column_names(self.name))
        return self._generic

    def create_row(self) -> Any:
        if self._prototype is None:
            return copy.copy(self._generic_prototype())
        if isinstance(self._prototype, type) or not hasattr(self._prototype, "exchange_array"):
            return self._prototype({})
        return copy.copy(self._prototype)

    def select_rows(
        self,
        wheres: Mapping[str, Any] | None = None,
        operators: Mapping[str, str] | None = None,
        order_by: str | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[Any] | None:
        """
        Rows matching every ``wheres`` entry (``=`` unless ``operators``
        names another operator for the field). ``None`` when the driver
        rejects the query.
        """

        factory = self.adapter.get_builder_factory()
        select = factory.select("*").from_(self.name)
        self._apply_wheres(select, wheres, operators)
        if order_by is not None:
            select.order_by(order_by)
        if limit > 0:
            select.limit(limit)
        if offset > 0:
            select.offset(offset)
        prototype = self._prototype if self._prototype is not None else self._generic_prototype()
        query = self.adapter.query(select)
        if query is None:
            return None
        try:
            query.set_prototype(prototype)
            return query.fetch_all(FetchMode.CUSTOM_CLASS)
        finally:
            query.close()

    def insert_row(self, values: Any) -> bool:
        insert = self.adapter.get_builder_factory().insert(self.name)
        insert.values(_as_values(values, "insert_row()"))
        query = self.adapter.query(insert)
        if query is None:
            return False
        try:
            return query.get_num_rows() == 1
        finally:
            query.close()

    def update_rows(
        self,
        sets: Any,
        wheres: Mapping[str, Any] | None = None,
        operators: Mapping[str, str] | None = None,
    ) -> int:
        """Number of updated rows, or -1 when the driver rejects the statement."""
        update = self.adapter.get_builder_factory().update(self.name)
        update.sets(_as_values(sets, "update_rows()"))
        self._apply_wheres(update, wheres, operators)
        return self._affected(self.adapter.query(update))

    def delete_rows(self, wheres: Mapping[str, Any] | None = None, operators: Mapping[str, str] | None = None) -> int:
        delete = self.adapter.get_builder_factory().delete(self.name)
        self._apply_wheres(delete, wheres, operators)
        return self._affected(self.adapter.query(delete))

    def last_insert_id(self, sequence_name: str | None = None) -> Any:
        return self.adapter.last_insert_id(sequence_name)

    @staticmethod
    def _apply_wheres(builder: Any, wheres: Mapping[str, Any] | None, operators: Mapping[str, str] | None) -> None:
        operators = operators or {}
        for field, value in (wheres or {}).items():
            builder.where(field, value, operators.get(field, "="))

    @staticmethod
    def _affected(query: Any) -> int:
        if query is None:
            return -1
        try:
            return query.get_num_rows()
        finally:
            query.close()
