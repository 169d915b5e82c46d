"""
Platform strategy base: per-dialect quoting and parameter-style rules.
"""

from __future__ import annotations

import datetime
import decimal
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Iterable

from ..exceptions import IntegrityError

LiteralQuoter = Callable[[Any], str]
IdentifierQuoter = Callable[[str], str]


class ParameterType(IntEnum):
    """
    Placeholder style understood by a driver.
    """

    NONE = 0
    POSITION = 1
    NAMED = 2
    INDEX = 3


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing what a driver/dialect pair can express.
    """

    name: str
    parameter_type: ParameterType
    supports_prepared: bool = True
    supports_full_join: bool = True
    supports_sequences: bool = False
    supports_change_db: bool = True
    limit_requires_order: bool = False


_DELIMITER_RE = re.compile(r"([^\w$])")
_PASSTHROUGH_KEYWORDS = frozenset({"AS"})


class Platform:
    """
    Stateless quoting rules for one dialect.

    Adapters may hand in the native driver's quoting primitives; when they do,
    those are preferred over the manual escaping implemented here.
    """

    identifier_open = '"'
    identifier_close = '"'
    value_quote = "'"

    def __init__(
        self,
        capabilities: DialectCapabilities,
        *,
        literal_quoter: LiteralQuoter | None = None,
        identifier_quoter: IdentifierQuoter | None = None,
    ) -> None:
        self.capabilities = capabilities
        self._literal_quoter = literal_quoter
        self._identifier_quoter = identifier_quoter

    @property
    def name(self) -> str:
        return self.capabilities.name

    # ------------------------------------------------------------------ #
    # Identifiers
    # ------------------------------------------------------------------ #
    def get_quote_identifier_symbol(self) -> str | tuple[str, str]:
        if self.identifier_open == self.identifier_close:
            return self.identifier_open
        return (self.identifier_open, self.identifier_close)

    def get_quote_value_symbol(self) -> str:
        return self.value_quote

    def quote_identifier(self, identifier: str) -> str:
        if self._identifier_quoter is not None:
            return self._identifier_quoter(identifier)
        return self._escape_identifier(identifier)

    def _escape_identifier(self, identifier: str) -> str:
        escaped = identifier.replace(self.identifier_close, self.identifier_close * 2)
        return f"{self.identifier_open}{escaped}{self.identifier_close}"

    def format_table(self, table_name: str) -> str:
        return ".".join(self.quote_identifier(part) for part in table_name.split("."))

    def quote_identifier_list(self, identifiers: str, skipped: Iterable[str] | None = None) -> str:
        """
        Quote every identifier inside an expression such as ``t.col AS alias``.

        Delimiters, numbers, the ``AS`` keyword and any token listed in
        ``skipped`` (compared case-insensitively) are emitted unchanged.
        """

        skip = {token.upper() for token in skipped} if skipped else set()
        parts = [part for part in _DELIMITER_RE.split(identifiers) if part]
        quoted: list[str] = []
        for part in parts:
            upper = part.upper()
            if _DELIMITER_RE.fullmatch(part) or part.isdigit():
                quoted.append(part)
            elif upper in _PASSTHROUGH_KEYWORDS or upper in skip:
                quoted.append(part)
            else:
                quoted.append(self.quote_identifier(part))
        return "".join(quoted)

    # ------------------------------------------------------------------ #
    # Values
    # ------------------------------------------------------------------ #
    def quote_value(self, value: Any) -> str:
        if value is None:
            return "NULL"
        if self._literal_quoter is not None:
            return self._literal_quoter(value)
        if isinstance(value, bool):
            return self._format_bool(value)
        if isinstance(value, (int, float, decimal.Decimal)):
            return str(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return self._quote_bytes(bytes(value))
        if isinstance(value, (datetime.date, datetime.time)):
            return self._quote_string(value.isoformat(sep=" ") if isinstance(value, datetime.datetime) else value.isoformat())
        return self._quote_string(str(value))

    def _format_bool(self, value: bool) -> str:
        return "1" if value else "0"

    def _quote_bytes(self, value: bytes) -> str:
        return f"X'{value.hex()}'"

    def _quote_string(self, value: str) -> str:
        escaped = value.replace(self.value_quote, self.value_quote * 2)
        return f"{self.value_quote}{escaped}{self.value_quote}"

    # ------------------------------------------------------------------ #
    # Parameters
    # ------------------------------------------------------------------ #
    def get_parameter_type(self) -> ParameterType:
        return self.capabilities.parameter_type

    def format_parameter_name(self, name: str, index: int | None = None) -> str | None:
        """
        Render the placeholder for parameter ``name``.

        ``index`` is the 1-based position of the parameter inside the
        statement being compiled; index-based dialects require it.
        """

        parameter_type = self.get_parameter_type()
        if parameter_type is ParameterType.NONE:
            return None
        if parameter_type is ParameterType.POSITION:
            return "?"
        if parameter_type is ParameterType.INDEX:
            if index is None or index < 1:
                raise IntegrityError(
                    f"Index-based placeholder for '{name}' requires a positive position.",
                    driver=self.name,
                )
            return f"${index}"
        return ":" + name.rsplit(".", 1)[-1].lstrip(":")

    # ------------------------------------------------------------------ #
    # Clauses
    # ------------------------------------------------------------------ #
    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset is not None:
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)
