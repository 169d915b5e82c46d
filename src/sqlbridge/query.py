"""
Result abstraction over a DB-API cursor or an affected-row count.
"""

from __future__ import annotations

import copy
from collections import deque
from enum import IntEnum
from types import SimpleNamespace
from typing import Any, Iterator, Sequence

from .exceptions import InvalidStateError, QueryError


class FetchMode(IntEnum):
    NONE = 0
    ASSOC = 1
    NUM = 2
    ROW = 2
    BOTH = 3
    OBJECT = 4
    CUSTOM_CLASS = 5


Prototype = Any


def check_prototype(prototype: Prototype) -> Prototype:
    """
    A prototype is either an object exposing ``exchange_array(row)`` (copied
    for every row) or a callable receiving the row as a dict.
    """

    if callable(getattr(prototype, "exchange_array", None)) and not isinstance(prototype, type):
        return prototype
    if callable(prototype):
        return prototype
    raise TypeError("Prototype must be callable or provide an 'exchange_array' method.")


def convert_row(
    columns: Sequence[str],
    row: Sequence[Any],
    mode: FetchMode,
    prototype: Prototype = None,
    *,
    driver: str | None = None,
) -> Any:
    mode = FetchMode(mode)
    if mode is FetchMode.NONE:
        return None
    if mode is FetchMode.NUM:
        return tuple(row)
    assoc = dict(zip(columns, row))
    if mode is FetchMode.ASSOC:
        return assoc
    if mode is FetchMode.BOTH:
        both: dict[Any, Any] = dict(enumerate(row))
        both.update(assoc)
        return both
    if mode is FetchMode.OBJECT:
        return SimpleNamespace(**assoc)
    if prototype is None:
        raise InvalidStateError(
            "Fetching as custom class requires a prototype; call set_prototype() first.", driver=driver
        )
    exchange = getattr(prototype, "exchange_array", None)
    if callable(exchange) and not isinstance(prototype, type):
        clone = copy.copy(prototype)
        clone.exchange_array(assoc)
        return clone
    return prototype(assoc)


class Query:
    """
    Forward-only reader over one statement's result.

    ``cursor`` is the native DB-API cursor; a query built from a bare
    affected-row count has no cursor and yields no rows.
    """

    def __init__(
        self,
        cursor: Any = None,
        *,
        affected_rows: int = 0,
        fetch_mode: FetchMode = FetchMode.ASSOC,
        driver: str | None = None,
        prototype: Prototype = None,
        native_errors: tuple[type[BaseException], ...] = (),
    ) -> None:
        self._cursor = cursor
        self._affected_rows = affected_rows
        self._fetch_mode = FetchMode(fetch_mode)
        self._driver = driver
        self._native_errors = native_errors
        self._prototype = check_prototype(prototype) if prototype is not None else None
        self._buffer: deque[Sequence[Any]] = deque()
        self._consumed = 0
        self._exhausted = cursor is None
        self._num_rows: int | None = None
        description = getattr(cursor, "description", None) if cursor is not None else None
        self._columns = [column[0] for column in description] if description else []
        self._has_result_set = bool(description)

    # Accessors ---------------------------------------------------------
    def get_native_reader(self) -> Any:
        return self._cursor

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    def get_fetch_mode(self) -> FetchMode:
        return self._fetch_mode

    def set_fetch_mode(self, fetch_mode: FetchMode) -> None:
        self._fetch_mode = FetchMode(fetch_mode)

    def get_prototype(self) -> Prototype:
        return self._prototype

    def set_prototype(self, prototype: Prototype) -> None:
        self._prototype = check_prototype(prototype)

    def get_num_rows(self) -> int:
        """
        Selected rows for a read statement, affected rows for a write.
        """

        if self._num_rows is not None:
            return self._num_rows
        if self._cursor is None:
            self._num_rows = self._affected_rows
            return self._num_rows
        rowcount = getattr(self._cursor, "rowcount", -1)
        if rowcount is None:
            rowcount = -1
        if not self._has_result_set:
            self._num_rows = max(rowcount, 0)
        elif rowcount >= 0:
            self._num_rows = rowcount
        else:
            # drivers such as sqlite3 and pyodbc report -1 for SELECT
            self._drain_into_buffer()
            self._num_rows = self._consumed + len(self._buffer)
        return self._num_rows

    # Fetching ----------------------------------------------------------
    def fetch(self, mode: FetchMode | None = None) -> Any:
        mode = self._fetch_mode if mode is None else FetchMode(mode)
        if mode is FetchMode.NONE:
            return None
        row = self._next_row()
        if row is None:
            return None
        return convert_row(self._columns, row, mode, self._prototype, driver=self._driver)

    def fetch_assoc(self) -> dict[str, Any] | None:
        return self.fetch(FetchMode.ASSOC)

    def fetch_row(self) -> tuple[Any, ...] | None:
        return self.fetch(FetchMode.NUM)

    def fetch_both(self) -> dict[Any, Any] | None:
        return self.fetch(FetchMode.BOTH)

    def fetch_object(self) -> SimpleNamespace | None:
        return self.fetch(FetchMode.OBJECT)

    def fetch_custom(self, prototype: Prototype = None) -> Any:
        if prototype is not None:
            self.set_prototype(prototype)
        return self.fetch(FetchMode.CUSTOM_CLASS)

    def fetch_all(self, mode: FetchMode | None = None) -> list[Any]:
        mode = self._fetch_mode if mode is None else FetchMode(mode)
        if mode is FetchMode.NONE:
            return []
        rows = []
        while True:
            row = self.fetch(mode)
            if row is None:
                break
            rows.append(row)
        return rows

    def to_result_set(self, fetch_mode: FetchMode | None = None) -> "ResultSet":
        rows: list[Sequence[Any]] = []
        while True:
            row = self._next_row()
            if row is None:
                break
            rows.append(row)
        mode = self._fetch_mode if fetch_mode is None else fetch_mode
        return ResultSet(self._columns, rows, fetch_mode=mode, prototype=self._prototype, driver=self._driver)

    def close(self) -> None:
        cursor, self._cursor = self._cursor, None
        self._buffer.clear()
        self._exhausted = True
        if cursor is not None and hasattr(cursor, "close"):
            self._call_cursor(cursor.close, "close the result")

    def __iter__(self) -> Iterator[Any]:
        while True:
            row = self.fetch()
            if row is None:
                return
            yield row

    # Internals ---------------------------------------------------------
    def _next_row(self) -> Sequence[Any] | None:
        if self._buffer:
            self._consumed += 1
            return self._buffer.popleft()
        if self._exhausted or not self._has_result_set:
            return None
        row = self._call_cursor(self._cursor.fetchone, "fetch a row")
        if row is None:
            self._exhausted = True
            return None
        self._consumed += 1
        return row

    def _drain_into_buffer(self) -> None:
        if self._exhausted or not self._has_result_set:
            return
        self._buffer.extend(self._call_cursor(self._cursor.fetchall, "fetch the remaining rows"))
        self._exhausted = True

    def _call_cursor(self, method: Any, action: str) -> Any:
        try:
            return method()
        except self._native_errors as exc:
            self._exhausted = True
            args = getattr(exc, "args", ())
            code = args[0] if len(args) >= 2 and isinstance(args[0], (int, str)) else 0
            raise QueryError(f"Unable to {action}: {exc}", code, exc, driver=self._driver) from exc


class ResultSet:
    """
    Read-only, fully materialized view over a query's rows with a movable
    cursor (``first``/``previous``/``current``/``next``/``last``).
    """

    def __init__(
        self,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        fetch_mode: FetchMode = FetchMode.ASSOC,
        prototype: Prototype = None,
        driver: str | None = None,
    ) -> None:
        self._columns = tuple(columns)
        self._rows = tuple(tuple(row) for row in rows)
        self._fetch_mode = FetchMode(fetch_mode)
        self._prototype = check_prototype(prototype) if prototype is not None else None
        self._driver = driver
        self._index = 0

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    def get_fetch_mode(self) -> FetchMode:
        return self._fetch_mode

    def set_fetch_mode(self, fetch_mode: FetchMode) -> None:
        self._fetch_mode = FetchMode(fetch_mode)

    def set_prototype(self, prototype: Prototype) -> None:
        self._prototype = check_prototype(prototype)

    def get_all(self, fetch_mode: FetchMode | None = None) -> list[Any]:
        return [self._convert(row, fetch_mode) for row in self._rows]

    def get(self, index: int, fetch_mode: FetchMode | None = None) -> Any:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError("ResultSet can only be accessed by integer index.")
        if index < 0 or index >= len(self._rows):
            raise IndexError("Index must be less than the number of rows in the result.")
        return self._convert(self._rows[index], fetch_mode)

    def first(self, fetch_mode: FetchMode | None = None) -> Any:
        self._index = 0
        return self.get(0, fetch_mode)

    def previous(self, fetch_mode: FetchMode | None = None) -> Any:
        if self._index == 0:
            return None
        self._index -= 1
        return self.get(self._index, fetch_mode)

    def current(self, fetch_mode: FetchMode | None = None) -> Any:
        return self.get(self._index, fetch_mode)

    def next(self, fetch_mode: FetchMode | None = None) -> Any:
        if self._index >= len(self._rows) - 1:
            return None
        self._index += 1
        return self.get(self._index, fetch_mode)

    def last(self, fetch_mode: FetchMode | None = None) -> Any:
        self._index = max(len(self._rows) - 1, 0)
        return self.get(self._index, fetch_mode)

    def count(self) -> int:
        return len(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, index: int) -> Any:
        return self.get(index, self._fetch_mode)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.get_all(self._fetch_mode))

    def _convert(self, row: Sequence[Any], fetch_mode: FetchMode | None) -> Any:
        mode = self._fetch_mode if fetch_mode is None else fetch_mode
        return convert_row(self._columns, row, mode, self._prototype, driver=self._driver)
