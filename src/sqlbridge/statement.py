"""
Prepared statement: parameter binding and execution through the owning adapter.
"""

from __future__ import annotations

import numbers
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from .exceptions import IntegrityError, InvalidStateError, QueryError
from .paramstyle import count_placeholders, normalize_name, placeholder_names, translate
from .platforms.base import ParameterType
from .query import FetchMode, Query
from .security.redaction import redact_params
from .utils import time_call

if TYPE_CHECKING:
    from .adapters.base import AdapterBase


class BindType(IntEnum):
    AUTO = 1
    STRING = 2
    INTEGER = 3
    DOUBLE = 4
    BOOL = 5
    NULL = 6
    BLOB = 7


def infer_bind_type(value: Any) -> BindType:
    if value is None:
        return BindType.NULL
    if isinstance(value, bool):
        return BindType.BOOL
    if isinstance(value, numbers.Number):
        return BindType.DOUBLE
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BindType.BLOB
    return BindType.STRING


def coerce_value(value: Any, bind_type: BindType) -> Any:
    if bind_type is BindType.NULL or value is None:
        return None
    if bind_type is BindType.INTEGER:
        return int(value)
    if bind_type is BindType.DOUBLE:
        return value if isinstance(value, numbers.Number) and not isinstance(value, bool) else float(value)
    if bind_type is BindType.BOOL:
        return bool(value)
    if bind_type is BindType.BLOB:
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)
    return value if isinstance(value, str) else str(value)


class Statement:
    """
    Prepared handle owned by one adapter.

    ``sql`` is kept in the platform's placeholder style; it is rewritten to
    the driver's paramstyle on every ``execute()`` from the ordered bindings.
    """

    def __init__(self, adapter: "AdapterBase", cursor: Any, sql: str) -> None:
        self._adapter = adapter
        self._cursor = cursor
        self._sql = sql
        self._parameters: dict[str, tuple[Any, BindType]] = {}
        self._closed = False
        self._error_code: Any = 0
        self._error_message: str | None = None
        self._last_exception: QueryError | None = None

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def closed(self) -> bool:
        return self._closed

    def get_native_statement(self) -> Any:
        return self._cursor

    def get_parameters(self) -> dict[str, Any]:
        return {name: value for name, (value, _) in self._parameters.items()}

    def get_bind_types(self) -> dict[str, BindType]:
        return {name: bind_type for name, (_, bind_type) in self._parameters.items()}

    def get_error_code(self) -> Any:
        return self._error_code

    def get_error_message(self) -> str | None:
        return self._error_message

    def get_last_exception(self) -> QueryError | None:
        return self._last_exception

    def bind_value(self, name: str, value: Any, bind_type: BindType = BindType.AUTO) -> "Statement":
        """
        Bind ``value`` under ``name``. Re-binding a name keeps its original
        position; ``None`` is always stored as NULL.
        """

        self._ensure_usable()
        if not name:
            raise ValueError("Parameter name can't be empty.")
        bind_type = BindType(bind_type)
        if bind_type is BindType.AUTO:
            bind_type = infer_bind_type(value)
        if value is None:
            bind_type = BindType.NULL
        try:
            value = coerce_value(value, bind_type)
        except (TypeError, ValueError) as exc:
            raise IntegrityError(
                f"Unable to bind {name!r} as {bind_type.name}: {exc}",
                previous=exc,
                driver=self._adapter.driver_name,
            ) from exc
        self._parameters[name] = (value, bind_type)
        return self

    def clear_binds(self) -> None:
        self._parameters.clear()

    def execute(self, fetch_mode: FetchMode = FetchMode.ASSOC) -> Query | None:
        self._ensure_usable()
        adapter = self._adapter
        parameter_type = adapter.capabilities.parameter_type
        self._check_bindings(parameter_type)

        values: dict[str, Any] = {}
        for name, (value, _) in self._parameters.items():
            values[name] = value
        native_sql, native_params = translate(self._sql, parameter_type, adapter.paramstyle, values)

        self._reset_error()
        try:
            with time_call(
                f"{adapter.driver_name}.execute",
                adapter.logger,
                sql=native_sql,
                params=redact_params(native_params),
                threshold_ms=adapter.slow_query_ms,
            ):
                adapter._execute_native(self._cursor, native_sql, native_params, prepared=True)
        except adapter.native_errors() as exc:
            self._last_exception = adapter._record_error(exc, native_sql)
            self._error_code = self._last_exception.code
            self._error_message = self._last_exception.message
            return None
        return Query(
            self._cursor, fetch_mode=fetch_mode, driver=adapter.driver_name, native_errors=adapter.native_errors()
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        cursor, self._cursor = self._cursor, None
        self._parameters.clear()
        if cursor is None:
            return
        try:
            cursor.close()
        except self._adapter.native_errors() as exc:
            self._last_exception = self._adapter._record_error(exc)
            self._error_code = self._last_exception.code
            self._error_message = self._last_exception.message
            raise self._last_exception from exc

    def _ensure_usable(self) -> None:
        if self._closed:
            raise InvalidStateError(
                "Statement has been closed and can't be reused.", driver=self._adapter.driver_name
            )

    def _check_bindings(self, parameter_type: ParameterType) -> None:
        expected = count_placeholders(self._sql, parameter_type)
        if expected != len(self._parameters):
            raise IntegrityError(
                f"Statement expects {expected} parameter(s) but {len(self._parameters)} bound.",
                driver=self._adapter.driver_name,
            )
        if parameter_type is ParameterType.NAMED:
            bound = {normalize_name(name) for name in self._parameters}
            missing = [name for name in placeholder_names(self._sql) if name not in bound]
            if missing:
                raise IntegrityError(
                    f"No value bound for placeholder(s): {', '.join(missing)}.",
                    driver=self._adapter.driver_name,
                )

    def _reset_error(self) -> None:
        self._error_code = 0
        self._error_message = None
        self._last_exception = None

    def __enter__(self) -> "Statement":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
