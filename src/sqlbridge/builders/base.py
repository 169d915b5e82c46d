"""
Shared AST nodes for the SQL builders.

Every node renders itself in one of two modes: literal (values inlined through
``Platform.quote_value``) or parameterized (values collected into a
``ParameterContainer`` and replaced by ``Platform.format_parameter_name``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Iterator, Sequence

from ..exceptions import InvalidStateError
from ..platforms.base import Platform

if TYPE_CHECKING:
    from .select import Select


class ParameterContainer:
    """
    Ordered name -> value map filled while compiling a single statement.

    A fresh container is created for every compilation; generated names are
    ``<prefix><n>`` where ``n`` is the 1-based position of the value, which is
    also the ``$n`` index used by index-based dialects.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def add(self, prefix: str, value: Any) -> tuple[str, int]:
        index = len(self._values) + 1
        name = f"{prefix}{index}"
        self._values[name] = value
        return name, index

    def items(self):
        return self._values.items()

    def names(self) -> list[str]:
        return list(self._values)

    def values(self) -> list[Any]:
        return list(self._values.values())

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"ParameterContainer({self._values!r})"


def bind_parameter(
    platform: Platform, container: ParameterContainer, prefix: str, value: Any
) -> str:
    name, index = container.add(prefix, value)
    placeholder = platform.format_parameter_name(name, index)
    if placeholder is None:
        raise InvalidStateError(
            f"Platform '{platform.name}' has no parameter placeholders; compile literally instead.",
            driver=platform.name,
        )
    return placeholder


class SqlExpression:
    """
    Node rendered verbatim (or nearly so) into the statement.
    """

    def to_string(self, container: ParameterContainer | None = None) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_string()


class SqlLiteral(SqlExpression):
    """Raw SQL fragment, never quoted or parameterized."""

    def __init__(self, expression: str) -> None:
        self.expression = expression

    def to_string(self, container: ParameterContainer | None = None) -> str:
        return self.expression

    def __repr__(self) -> str:
        return f"SqlLiteral({self.expression!r})"


_FUNCTION_SKIP = ("^", "*", "/", "+", "-", "DISTINCT")


class SqlFunction(SqlExpression):
    """
    ``NAME(arg, ...)`` call. Identifier arguments are quoted, value arguments
    are inlined or bound depending on the compile mode.
    """

    def __init__(self, platform: Platform, name: str) -> None:
        self.platform = platform
        self.name = name.upper()
        self.parameters: list[tuple[Any, bool]] = []

    def add_parameter(self, parameter: Any, is_identifier: bool = True) -> "SqlFunction":
        self.parameters.append((parameter, is_identifier))
        return self

    def identifier(self, name: str) -> "SqlFunction":
        return self.add_parameter(name, True)

    def value(self, value: Any) -> "SqlFunction":
        return self.add_parameter(value, False)

    def to_string(self, container: ParameterContainer | None = None) -> str:
        rendered: list[str] = []
        for parameter, is_identifier in self.parameters:
            if isinstance(parameter, SqlExpression):
                rendered.append(parameter.to_string(container))
            elif is_identifier:
                rendered.append(self.platform.quote_identifier_list(str(parameter), _FUNCTION_SKIP))
            elif container is not None:
                rendered.append(bind_parameter(self.platform, container, "param", parameter))
            else:
                rendered.append(self.platform.quote_value(parameter))
        return f"{self.name}({', '.join(rendered)})"


_COMPARISON_OPERATORS = frozenset(
    {"=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE", "IS", "IS NOT", "IN", "NOT IN"}
)
_NULL_OPERATORS = frozenset({"=", "!=", "<>", "IS", "IS NOT"})
_SET_OPERATORS = frozenset({"=", "!=", "<>", "IN", "NOT IN"})


class Predicate(SqlExpression):
    """
    ``field <op> value`` condition used by WHERE and HAVING clauses.

    ``None`` renders ``IS [NOT] NULL``, a list or tuple renders ``IN (...)``
    and a sub-select renders ``IN (SELECT ...)``.
    """

    prefix = "where"

    def __init__(self, platform: Platform, field: Any, value: Any, operator: str = "=") -> None:
        if not field:
            raise ValueError(f"Field can't be empty for a {self.prefix.upper()} condition.")
        if not isinstance(field, (str, SqlExpression)):
            raise TypeError("Condition field must be a string or a SqlExpression.")
        operator = " ".join(operator.split()).upper()
        if operator not in _COMPARISON_OPERATORS:
            raise ValueError(f"Unsupported comparison operator '{operator}'.")
        if value is None and operator not in _NULL_OPERATORS:
            raise ValueError("Operator for NULL value is limited to '=', '!=', '<>', 'IS' or 'IS NOT'.")
        if _is_sequence(value) or _is_select(value):
            if operator not in _SET_OPERATORS:
                raise ValueError(
                    "Operator for a list or sub-select is limited to '=', '!=', '<>', 'IN' or 'NOT IN'."
                )
            if _is_sequence(value) and not value:
                raise ValueError("IN list must contain at least one value.")
        self.platform = platform
        self.field = field.strip() if isinstance(field, str) else field
        self.value = value
        self.operator = operator

    def to_string(self, container: ParameterContainer | None = None) -> str:
        if isinstance(self.field, SqlExpression):
            field = self.field.to_string(container)
        else:
            field = self.platform.quote_identifier_list(self.field)

        value = self.value
        if value is None:
            operator = "IS" if self.operator in ("=", "IS") else "IS NOT"
            return f"{field} {operator} NULL"

        if _is_sequence(value):
            operator = "IN" if self.operator in ("=", "IN") else "NOT IN"
            rendered = [self._render_value(item, container) for item in value]
            return f"{field} {operator} ({', '.join(rendered)})"

        if _is_select(value):
            operator = "IN" if self.operator in ("=", "IN") else "NOT IN"
            return f"{field} {operator} ({value.compile_subquery(container)})"

        return f"{field} {self.operator} {self._render_value(value, container)}"

    def _render_value(self, value: Any, container: ParameterContainer | None) -> str:
        if isinstance(value, SqlExpression):
            return value.to_string(container)
        if container is not None:
            return bind_parameter(self.platform, container, self.prefix, value)
        return self.platform.quote_value(value)


class Having(Predicate):
    prefix = "having"


Where = Predicate


JOIN_TYPES = ("INNER", "LEFT", "RIGHT", "FULL", "CROSS")
_JOIN_CONDITION_SKIP = ("=", "AND", "OR", "NOT", "IS", "NULL", "IN", "LIKE")


class Join(SqlExpression):
    """
    ``<TYPE> JOIN target [AS alias] [ON cond AND cond ...]``.
    """

    def __init__(
        self,
        platform: Platform,
        join_type: str,
        table: "str | Select",
        alias: str | None = None,
        conditions: Any = None,
    ) -> None:
        join_type = join_type.upper()
        if join_type not in JOIN_TYPES:
            raise ValueError(f"Invalid JOIN type, unknown join: {join_type}")
        if not isinstance(table, str) and not _is_select(table):
            raise TypeError("JOIN target must be a table name or a Select.")
        if _is_select(table) and not alias:
            raise ValueError("Joining a sub-select requires a table alias.")
        if conditions is None:
            conditions = []
        elif isinstance(conditions, (str, SqlExpression)):
            conditions = [conditions]
        for condition in conditions:
            if not isinstance(condition, (str, SqlExpression)):
                raise TypeError("JOIN conditions must be strings or SqlExpression objects.")
        self.platform = platform
        self.join_type = join_type
        self.table = table
        self.alias = alias or None
        self.conditions: list[str | SqlExpression] = list(conditions)

    def to_string(self, container: ParameterContainer | None = None) -> str:
        fragments = [f"{self.join_type} JOIN"]
        if isinstance(self.table, str):
            fragments.append(self.platform.format_table(self.table))
        else:
            fragments.append(f"({self.table.compile_subquery(container)})")
        if self.alias is not None:
            fragments.append(f"AS {self.platform.quote_identifier(self.alias)}")
        for position, condition in enumerate(self.conditions):
            keyword = "ON" if position == 0 else "AND"
            if isinstance(condition, SqlExpression):
                fragments.append(f"{keyword} {condition.to_string(container)}")
            else:
                fragments.append(
                    f"{keyword} {self.platform.quote_identifier_list(condition, _JOIN_CONDITION_SKIP)}"
                )
        return " ".join(fragments)


class SqlBuilder:
    """
    Base class for statement builders.

    Subclasses implement ``_validate`` (raise ``InvalidStateError`` when the
    statement is incomplete) and ``_compile``.
    """

    def __init__(self, platform: Platform) -> None:
        self.platform = platform

    def compile(self) -> str:
        """Render the statement with every value inlined."""
        self._validate()
        return self._compile(None)

    def compile_with_parameters(self, container: ParameterContainer) -> str:
        """Render the statement with placeholders, collecting values into ``container``."""
        self._validate()
        return self._compile(container)

    def compile_subquery(self, container: ParameterContainer | None) -> str:
        self._validate()
        return self._compile(container)

    def _validate(self) -> None:
        raise NotImplementedError

    def _compile(self, container: ParameterContainer | None) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.compile()

    @staticmethod
    def _render_conditions(
        keyword: str, predicates: Sequence[Predicate], container: ParameterContainer | None
    ) -> list[str]:
        fragments: list[str] = []
        for position, predicate in enumerate(predicates):
            prefix = keyword if position == 0 else "AND"
            fragments.append(f"{prefix} {predicate.to_string(container)}")
        return fragments


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _is_select(value: Any) -> bool:
    return isinstance(value, SqlBuilder) and hasattr(value, "column_count")


def split_names(value: str | Iterable[str]) -> list[str]:
    if isinstance(value, str):
        return [token.strip() for token in value.split(",") if token.strip()]
    names: list[str] = []
    for item in value:
        names.extend(split_names(item))
    return names
