"""
Exception hierarchy shared by every adapter, statement and builder.

Native driver errors never cross the adapter boundary unwrapped: each one is
converted into one of the classes below, stamped with the tag of the driver
that produced it and chained to the original error.
"""

from __future__ import annotations

from typing import Any


class DbException(Exception):
    """
    Base error for the database layer.

    ``code`` is the native (driver specific) error code, ``sql_state`` the
    SQLSTATE where the driver reports one, ``previous`` the exception that
    caused this one.
    """

    kind = "database"

    def __init__(
        self,
        message: str,
        code: Any = 0,
        previous: BaseException | None = None,
        *,
        driver: str | None = None,
        sql_state: str | None = None,
    ) -> None:
        super().__init__(message)
        self._message = message
        self._code = code if code is not None else 0
        self._previous = previous
        self._driver = driver
        self._sql_state = sql_state
        if previous is not None:
            self.__cause__ = previous

    @property
    def message(self) -> str:
        return self._message

    @property
    def code(self) -> Any:
        return self._code

    @property
    def previous(self) -> BaseException | None:
        return self._previous

    @property
    def driver(self) -> str | None:
        return self._driver

    @property
    def sql_state(self) -> str | None:
        return self._sql_state

    def __str__(self) -> str:
        if self._driver:
            return f"[{self._driver}] {self._message}"
        return self._message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self._message!r}, code={self._code!r}, "
            f"driver={self._driver!r})"
        )


class ConnectionError(DbException):  # noqa: A001
    """Raised when opening the native connection fails."""

    kind = "connection"


class ConfigurationError(DbException):
    """Raised for missing or duplicate adapters and invalid options."""

    kind = "configuration"


class QueryError(DbException):
    """Raised when the native driver rejects a statement."""

    kind = "query"


class UnsupportedOperationError(DbException):
    """Raised when a dialect or driver cannot provide a capability."""

    kind = "unsupported"


class IntegrityError(DbException):
    """Raised when the parameter binding contract is violated."""

    kind = "integrity"


class InvalidStateError(DbException):
    """Raised when an operation is invoked out of sequence."""

    kind = "invalid_state"


__all__ = [
    "DbException",
    "ConnectionError",
    "ConfigurationError",
    "QueryError",
    "UnsupportedOperationError",
    "IntegrityError",
    "InvalidStateError",
]
