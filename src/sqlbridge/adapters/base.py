"""
Adapter base class: connection lifecycle, dispatch and error bookkeeping.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, ClassVar, Generator, Sequence

from ..builders import BuilderFactory, ParameterContainer, SqlBuilder
from ..config import AdapterConfig
from ..exceptions import (
    ConfigurationError,
    ConnectionError,
    DbException,
    InvalidStateError,
    QueryError,
    UnsupportedOperationError,
)
from ..paramstyle import QMARK
from ..platforms.base import DialectCapabilities, Platform
from ..query import FetchMode, Query
from ..statement import Statement
from ..utils import get_logger, resolve_slow_query_ms, time_call


class AdapterState(Enum):
    CLOSED = "closed"
    OPENED = "opened"
    IN_TRANSACTION = "in_transaction"


class AdapterBase:
    """
    Owns exactly one native DB-API connection.

    Subclasses describe their driver through class attributes and implement
    the ``_load``/``_connect`` hooks; everything else is shared. Not safe for
    concurrent use: obtain one adapter per unit of work.
    """

    driver_name: ClassVar[str] = ""
    driver_library: ClassVar[str] = ""
    capabilities: ClassVar[DialectCapabilities]
    platform_class: ClassVar[type[Platform]] = Platform
    paramstyle: ClassVar[str] = QMARK
    default_port: ClassVar[int | None] = None

    begin_sql: ClassVar[str] = "BEGIN"
    commit_sql: ClassVar[str] = "COMMIT"
    rollback_sql: ClassVar[str] = "ROLLBACK"

    def __init__(self, config: AdapterConfig, slow_query_ms: int | None = None) -> None:
        self.config = config
        self.logger = get_logger(f"adapters.{self.driver_name}")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)
        self._driver: Any = None
        self._connection: Any = None
        self._state = AdapterState.CLOSED
        self._platform: Platform | None = None
        self._factory: BuilderFactory | None = None
        self._last_statement: Statement | None = None
        self._error_code: Any = 0
        self._error_message: str | None = None
        self._last_exception: DbException | None = None

    # ------------------------------------------------------------------ #
    # Driver hooks
    # ------------------------------------------------------------------ #
    def _load(self) -> Any:
        """Return the native driver module, or ``None`` when it is not installed."""
        raise NotImplementedError

    def _connect(self, driver: Any) -> Any:
        raise NotImplementedError

    def _create_platform(self) -> Platform:
        return self.platform_class(self.capabilities)

    def _describe_error(self, exc: BaseException) -> tuple[Any, str, str | None]:
        """
        Split a native error into ``(code, message, sqlstate)``.
        """

        args = getattr(exc, "args", ())
        if len(args) >= 2 and isinstance(args[0], int):
            return args[0], str(args[1]), None
        return 0, str(exc), None

    def _execute_native(self, cursor: Any, sql: str, params: Any = None, *, prepared: bool = False) -> None:
        if params is None:
            cursor.execute(sql)
        else:
            cursor.execute(sql, params)

    def _prepare_native(self, sql: str) -> Any:
        return self._connection.cursor()

    def _begin_native(self) -> None:
        self._run_control(self.begin_sql)

    def _commit_native(self) -> None:
        self._run_control(self.commit_sql)

    def _rollback_native(self) -> None:
        self._run_control(self.rollback_sql)

    def _run_control(self, sql: str) -> None:
        cursor = self._connection.cursor()
        try:
            with time_call(f"{self.driver_name}.{sql.split()[0].lower()}", self.logger, sql=sql,
                           threshold_ms=self.slow_query_ms):
                cursor.execute(sql)
        finally:
            cursor.close()

    def native_errors(self) -> tuple[type[BaseException], ...]:
        error = getattr(self._driver, "Error", None)
        if isinstance(error, type) and issubclass(error, BaseException):
            return (error,)
        return (Exception,)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> AdapterState:
        return self._state

    def get_name(self) -> str:
        return self.config.name

    def is_opened(self) -> bool:
        return self._state is not AdapterState.CLOSED

    def open(self) -> bool:
        if self.is_opened():
            return True
        driver = self._load()
        if driver is None:
            raise ConfigurationError(
                f"{self.driver_library} is required to use the '{self.driver_name}' adapter.",
                driver=self.driver_name,
            )
        self._reset_error()
        self.logger.info("Opening %s connection %s", self.driver_name, self.config.descriptive_label())
        try:
            connection = self._connect(driver)
        except Exception as exc:
            code, message, sql_state = self._describe_error(exc)
            error = ConnectionError(
                f"Unable to connect to {self.config.descriptive_label()}: {message}",
                code,
                exc,
                driver=self.driver_name,
                sql_state=sql_state,
            )
            self._set_error(error)
            raise error from exc
        self._driver = driver
        self._connection = connection
        self._state = AdapterState.OPENED
        self._platform = self._create_platform()
        self._factory = BuilderFactory(self._platform)
        return True

    def close(self) -> bool:
        if not self.is_opened():
            return False
        self._close_last_statement()
        connection, self._connection = self._connection, None
        self._state = AdapterState.CLOSED
        self._platform = None
        self._factory = None
        self.logger.info("Closing %s connection %s", self.driver_name, self.config.descriptive_label())
        if connection is not None:
            try:
                connection.close()
            except self.native_errors() as exc:
                self._record_error(exc)
        return True

    def __enter__(self) -> "AdapterBase":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if not self.is_opened():
            self.open()

    def _require_open(self, action: str) -> None:
        if not self.is_opened():
            raise InvalidStateError(f"Unable to {action}: there is no open connection.", driver=self.driver_name)

    def get_native_connector(self) -> Any:
        self._ensure_open()
        return self._connection

    def get_platform(self) -> Platform:
        self._ensure_open()
        return self._platform

    def get_builder_factory(self) -> BuilderFactory:
        self._ensure_open()
        return self._factory

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #
    def query(self, sql: str | SqlBuilder, fetch_mode: FetchMode = FetchMode.ASSOC) -> Query | None:
        """
        Execute ``sql`` (a string or a builder compiled with inlined values).

        Returns ``None`` when the driver rejects the statement; inspect
        ``get_error_code()``/``get_error_message()`` for the reason.
        """

        self._ensure_open()
        if isinstance(sql, SqlBuilder):
            sql = sql.compile()
        elif not isinstance(sql, str):
            raise TypeError(f"Expecting a SQL string or a builder, got {type(sql).__name__}.")
        self._reset_error()
        cursor = None
        try:
            cursor = self._connection.cursor()
            with time_call(f"{self.driver_name}.query", self.logger, sql=sql, threshold_ms=self.slow_query_ms):
                self._execute_native(cursor, sql)
        except self.native_errors() as exc:
            self._record_error(exc, sql)
            if cursor is not None:
                self._close_cursor(cursor)
            return None
        return Query(cursor, fetch_mode=fetch_mode, driver=self.driver_name, native_errors=self.native_errors())

    def prepare_query(self, sql: str | SqlBuilder) -> Statement | None:
        """
        Prepare ``sql``. Builders are compiled with placeholders and their
        values are bound onto the returned statement.

        Returns ``None`` when the driver has no prepared statements.
        """

        if not self.capabilities.supports_prepared:
            return None
        self._ensure_open()
        self._close_last_statement()
        container = ParameterContainer()
        if isinstance(sql, SqlBuilder):
            sql = sql.compile_with_parameters(container)
        elif not isinstance(sql, str):
            raise TypeError(f"Expecting a SQL string or a builder, got {type(sql).__name__}.")
        self._reset_error()
        try:
            cursor = self._prepare_native(sql)
        except self.native_errors() as exc:
            self._record_error(exc, sql)
            return None
        statement = Statement(self, cursor, sql)
        for name, value in container.items():
            statement.bind_value(name, value)
        self._last_statement = statement
        return statement

    def execute(
        self, sql: str | SqlBuilder, params: Sequence[Any] | dict[str, Any] | None = None,
        fetch_mode: FetchMode = FetchMode.ASSOC,
    ) -> Query:
        """
        Prepare, bind and execute in one call, raising ``QueryError`` on failure.

        ``params`` is a sequence for positional/indexed placeholders or a
        mapping for named ones.
        """

        statement = self.prepare_query(sql)
        if statement is None:
            raise UnsupportedOperationError(
                f"The '{self.driver_name}' driver doesn't support prepared statements.", driver=self.driver_name
            )
        if isinstance(params, dict):
            for name, value in params.items():
                statement.bind_value(name, value)
        elif params is not None:
            for position, value in enumerate(params, start=1):
                statement.bind_value(f"param{position}", value)
        result = statement.execute(fetch_mode)
        if result is None:
            raise self._error_from_last("Statement execution failed")
        return result

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def begin_transaction(self) -> bool:
        if self._state is AdapterState.IN_TRANSACTION:
            raise InvalidStateError("A transaction is already active; nesting is not supported.",
                                    driver=self.driver_name)
        self._ensure_open()
        self._reset_error()
        try:
            self._begin_native()
        except self.native_errors() as exc:
            self._record_error(exc, self.begin_sql)
            return False
        self._state = AdapterState.IN_TRANSACTION
        return True

    def commit(self) -> bool:
        if self._state is not AdapterState.IN_TRANSACTION:
            raise InvalidStateError("No active transaction to commit.", driver=self.driver_name)
        self._reset_error()
        try:
            self._commit_native()
        except self.native_errors() as exc:
            self._record_error(exc, self.commit_sql)
            return False
        self._state = AdapterState.OPENED
        return True

    def rollback(self) -> bool:
        if self._state is not AdapterState.IN_TRANSACTION:
            raise InvalidStateError("No active transaction to roll back.", driver=self.driver_name)
        self._reset_error()
        try:
            self._rollback_native()
        except self.native_errors() as exc:
            self._record_error(exc, self.rollback_sql)
            return False
        self._state = AdapterState.OPENED
        return True

    @contextmanager
    def transaction(self) -> Generator["AdapterBase", None, None]:
        if not self.begin_transaction():
            raise self._error_from_last("Unable to begin transaction")
        try:
            yield self
        except BaseException:
            if not self.rollback():
                self.logger.warning("Rollback failed on %s: %s", self.driver_name, self._error_message)
            raise
        if not self.commit():
            raise self._error_from_last("Unable to commit transaction")

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    def last_insert_id(self, sequence_name: str | None = None) -> Any:
        raise NotImplementedError

    def _column_names_query(self, table: str) -> tuple[str, str]:
        """Return ``(sql, column key)`` listing the columns of ``table``."""
        raise NotImplementedError

    def get_column_names(self, table: str) -> list[str]:
        self._ensure_open()
        sql, key = self._column_names_query(table)
        result = self.query(sql)
        if result is None:
            raise self._error_from_last(f"Unable to read columns of '{table}'")
        try:
            names = [row[key] for row in result.fetch_all(FetchMode.ASSOC)]
        finally:
            result.close()
        if not names:
            raise QueryError(f"Table '{table}' doesn't exist or has no columns.", driver=self.driver_name)
        return names

    def _scalar(self, sql: str, description: str) -> Any:
        self._require_open(description)
        result = self.query(sql, FetchMode.NUM)
        if result is None:
            raise self._error_from_last(f"Unable to {description}")
        try:
            row = result.fetch_row()
        finally:
            result.close()
        return row[0] if row else None

    def change_db(self, db_name: str) -> bool:
        if not self.capabilities.supports_change_db:
            raise UnsupportedOperationError(
                f"The '{self.driver_name}' driver can't switch databases on an open connection.",
                driver=self.driver_name,
            )
        self._ensure_open()
        result = self.query(f"USE {self._platform.quote_identifier(db_name)}", FetchMode.NONE)
        if result is None:
            return False
        result.close()
        return True

    # ------------------------------------------------------------------ #
    # Errors
    # ------------------------------------------------------------------ #
    def get_error_code(self) -> Any:
        return self._error_code

    def get_error_message(self) -> str | None:
        return self._error_message

    def get_last_exception(self) -> DbException | None:
        return self._last_exception

    def _reset_error(self) -> None:
        self._error_code = 0
        self._error_message = None
        self._last_exception = None

    def _set_error(self, error: DbException) -> None:
        self._error_code = error.code
        self._error_message = error.message
        self._last_exception = error

    def _record_error(self, exc: BaseException, sql: str | None = None) -> QueryError:
        code, message, sql_state = self._describe_error(exc)
        error = QueryError(message, code, exc, driver=self.driver_name, sql_state=sql_state)
        self._set_error(error)
        self.logger.warning("%s error %s: %s", self.driver_name, code, message, extra={"sql": sql})
        return error

    def _error_from_last(self, message: str) -> DbException:
        previous = self._last_exception
        if previous is None:
            return QueryError(message, driver=self.driver_name)
        return QueryError(
            f"{message}: {previous.message}",
            previous.code,
            previous,
            driver=self.driver_name,
            sql_state=previous.sql_state,
        )

    def _close_cursor(self, cursor: Any) -> None:
        try:
            cursor.close()
        except self.native_errors() as exc:
            self.logger.debug("Ignoring %s error while closing a failed cursor: %s", self.driver_name, exc)

    def _close_last_statement(self) -> None:
        statement, self._last_statement = self._last_statement, None
        if statement is None or statement.closed:
            return
        try:
            statement.close()
        except QueryError as error:
            self._set_error(error)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.config.name!r} state={self._state.value}>"
