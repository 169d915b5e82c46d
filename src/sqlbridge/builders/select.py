"""
SELECT statement builder.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..exceptions import IntegrityError, InvalidStateError, UnsupportedOperationError
from ..platforms.base import Platform
from .base import (
    Having,
    Join,
    ParameterContainer,
    SqlBuilder,
    SqlExpression,
    Where,
    split_names,
)

ORDER_ASC = "ASC"
ORDER_DESC = "DESC"

# aggregate names allowed in plain column strings without a SqlFunction
_SAFE_KEYWORDS = ("AVG", "COUNT", "FIRST", "LAST", "MAX", "MIN", "SUM", "(", ")")


class Select(SqlBuilder):
    """
    Fluent SELECT builder.

    >>> factory.select(["id", "name"]).from_("user").where("username", "bob")
    """

    def __init__(self, platform: Platform, columns: Any = None) -> None:
        super().__init__(platform)
        self._distinct = False
        self._fields: list[tuple[str | SqlExpression, str | None]] = []
        self._table: str | Select | None = None
        self._alias: str | None = None
        self._joins: list[Join] = []
        self._wheres: list[Where] = []
        self._groups: list[str] = []
        self._having: list[Having] = []
        self._orders: list[tuple[str, str]] = []
        self._limit: int | None = None
        self._offset: int | None = None
        self._unions: list[tuple[Select, bool]] = []
        if columns is not None:
            self.columns(columns)

    # Columns ----------------------------------------------------------
    def columns(self, columns: Any = "*", clear_existing: bool = True) -> "Select":
        if clear_existing:
            self.reset_columns()
        if isinstance(columns, str):
            for token in split_names(columns):
                self.column(token)
        elif isinstance(columns, SqlExpression):
            self.column(columns)
        elif isinstance(columns, Mapping):
            for alias, column in columns.items():
                self.column(column, alias if isinstance(alias, str) else None)
        elif isinstance(columns, Iterable):
            for column in columns:
                self.column(column)
        else:
            raise TypeError("Columns must be a string, a mapping, an iterable or a SqlExpression.")
        return self

    def column(self, field: str | SqlExpression, alias: str | None = None) -> "Select":
        if not isinstance(field, (str, SqlExpression)):
            raise TypeError("Select.column() only accepts a string or a SqlExpression as field.")
        if alias is not None and not isinstance(alias, str):
            raise TypeError("Column alias must be a string.")
        self._fields.append((field.strip() if isinstance(field, str) else field, alias))
        return self

    def column_count(self) -> int:
        return len(self._fields)

    def distinct(self, flag: bool = True) -> "Select":
        self._distinct = flag
        return self

    # Sources ----------------------------------------------------------
    def from_(self, table: "str | Select", alias: str | None = None) -> "Select":
        if isinstance(table, Select) and not alias:
            raise ValueError("An alias must be given when selecting from a sub-select.")
        if not isinstance(table, (str, Select)):
            raise TypeError("FROM source must be a table name or a Select.")
        self._table = table
        self._alias = alias or None
        return self

    def join(self, table: "str | Select", condition: Any = None, alias: str | None = None) -> "Select":
        return self._add_join("INNER", table, condition, alias)

    def left_join(self, table: "str | Select", condition: Any = None, alias: str | None = None) -> "Select":
        return self._add_join("LEFT", table, condition, alias)

    def right_join(self, table: "str | Select", condition: Any = None, alias: str | None = None) -> "Select":
        return self._add_join("RIGHT", table, condition, alias)

    def full_join(self, table: "str | Select", condition: Any = None, alias: str | None = None) -> "Select":
        if not self.platform.capabilities.supports_full_join:
            raise UnsupportedOperationError(
                f"{self.platform.name} doesn't support FULL JOIN.", driver=self.platform.name
            )
        return self._add_join("FULL", table, condition, alias)

    def cross_join(self, table: "str | Select", condition: Any = None, alias: str | None = None) -> "Select":
        return self._add_join("CROSS", table, condition, alias)

    def _add_join(self, join_type: str, table: Any, condition: Any, alias: str | None) -> "Select":
        self._joins.append(Join(self.platform, join_type, table, alias, condition))
        return self

    # Filters ----------------------------------------------------------
    def where(self, field: str | SqlExpression, value: Any, operator: str = "=") -> "Select":
        self._wheres.append(Where(self.platform, field, value, operator))
        return self

    def group_by(self, group: str | Iterable[str]) -> "Select":
        self._groups.extend(split_names(group))
        return self

    def having(self, field: str | SqlExpression, value: Any, operator: str = "=") -> "Select":
        self._having.append(Having(self.platform, field, value, operator))
        return self

    def order_by(self, order: str | Iterable[str], direction: str = ORDER_ASC) -> "Select":
        direction = direction.upper()
        if direction not in (ORDER_ASC, ORDER_DESC):
            raise ValueError(f"Order direction must be ASC or DESC, got {direction!r}.")
        for field in split_names(order):
            self._orders.append((field, direction))
        return self

    def limit(self, limit: int, offset: int | None = None) -> "Select":
        if limit < 0:
            raise ValueError("LIMIT should be greater or equal to zero.")
        self._limit = int(limit)
        if offset is not None:
            self.offset(offset)
        return self

    def offset(self, offset: int) -> "Select":
        if offset < 0:
            raise ValueError("OFFSET should be greater or equal to zero.")
        self._offset = int(offset) if offset > 0 else None
        return self

    def union(self, select: "Select", all_rows: bool = False) -> "Select":
        if not isinstance(select, Select):
            raise TypeError("UNION requires a Select.")
        if self.column_count() != select.column_count():
            raise IntegrityError(
                "Unable to perform UNION when the number of columns differs.", driver=self.platform.name
            )
        self._unions.append((select, all_rows))
        return self

    # Resets -----------------------------------------------------------
    def reset_columns(self) -> "Select":
        self._fields = []
        return self

    def reset_distinct(self) -> "Select":
        self._distinct = False
        return self

    def reset_from(self) -> "Select":
        self._table = None
        self._alias = None
        return self

    def reset_join(self) -> "Select":
        self._joins = []
        return self

    def reset_where(self) -> "Select":
        self._wheres = []
        return self

    def reset_group(self) -> "Select":
        self._groups = []
        return self

    def reset_having(self) -> "Select":
        self._having = []
        return self

    def reset_order(self) -> "Select":
        self._orders = []
        return self

    def reset_limit(self) -> "Select":
        self._limit = None
        self._offset = None
        return self

    def reset_offset(self) -> "Select":
        self._offset = None
        return self

    # Compilation ------------------------------------------------------
    def _validate(self) -> None:
        if self._table is None:
            raise InvalidStateError(
                "FROM clause is missing, call Select.from_() before compiling.", driver=self.platform.name
            )

    def _compile(self, container: ParameterContainer | None) -> str:
        platform = self.platform
        columns: list[str] = []
        for field, alias in self._fields:
            if isinstance(field, SqlExpression):
                rendered = field.to_string(container)
            else:
                rendered = platform.quote_identifier_list(field, _SAFE_KEYWORDS)
            if alias:
                rendered = f"{rendered} AS {platform.quote_identifier(alias)}"
            columns.append(rendered)

        keyword = "SELECT DISTINCT" if self._distinct else "SELECT"
        fragments = [f"{keyword} {', '.join(columns) or '*'}"]

        if isinstance(self._table, Select):
            fragments.append(f"FROM ({self._table.compile_subquery(container)})")
        else:
            fragments.append(f"FROM {platform.format_table(self._table)}")
        if self._alias is not None:
            fragments.append(f"AS {platform.quote_identifier(self._alias)}")

        for join in self._joins:
            fragments.append(join.to_string(container))

        fragments.extend(self._render_conditions("WHERE", self._wheres, container))

        if self._groups:
            groups = ", ".join(platform.quote_identifier_list(group) for group in self._groups)
            fragments.append(f"GROUP BY {groups}")

        fragments.extend(self._render_conditions("HAVING", self._having, container))

        paged = self._limit is not None or self._offset is not None
        if self._orders:
            orders = ", ".join(
                f"{platform.quote_identifier_list(field)} {direction}" for field, direction in self._orders
            )
            fragments.append(f"ORDER BY {orders}")
        elif paged and platform.capabilities.limit_requires_order:
            fragments.append("ORDER BY (SELECT NULL)")

        if paged:
            fragments.append(platform.limit_clause(self._limit, self._offset))

        for select, all_rows in self._unions:
            keyword = "UNION ALL" if all_rows else "UNION"
            fragments.append(f"{keyword} {select.compile_subquery(container)}")

        return " ".join(fragments)
