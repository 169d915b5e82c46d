"""
Placeholder discovery and translation between platform and driver styles.

Builders emit placeholders in the platform style (``?``, ``$n`` or ``:name``);
DB-API drivers expect their own ``paramstyle`` (``qmark``, ``format`` or
``pyformat``). Quoted strings, quoted identifiers, comments and ``::`` casts
are never treated as placeholders.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .exceptions import IntegrityError
from .platforms.base import ParameterType

QMARK = "qmark"
FORMAT = "format"
PYFORMAT = "pyformat"

_PLACEHOLDER_RE = re.compile(
    r"""
    (?P<dquote>"(?:[^"\\]|\\.)*") |
    (?P<squote>'(?:[^'\\]|\\.)*') |
    (?P<bquote>`[^`]*`) |
    (?P<bracket>\[[^\]]*\]) |
    (?P<line_comment>--[^\r\n]*) |
    (?P<block_comment>/\*(?:[^*]|\*(?!/))*\*/) |
    (?P<pg_cast>::\w+) |
    (?P<numeric>\$(?P<numeric_num>\d+)) |
    (?P<named>:(?P<name>[A-Za-z_]\w*)) |
    (?P<qmark>\?) |
    (?P<percent>%)
    """,
    re.VERBOSE,
)

_SKIP_GROUPS = ("dquote", "squote", "bquote", "bracket", "line_comment", "block_comment", "pg_cast")


@dataclass(frozen=True)
class Placeholder:
    style: ParameterType
    start: int
    end: int
    name: str | None = None
    index: int | None = None


def normalize_name(name: str) -> str:
    """
    Strip the ``:`` prefix and any ``table.`` qualifier from a bound name.
    """

    return name.rsplit(".", 1)[-1].lstrip(":")


def scan_placeholders(sql: str) -> list[Placeholder]:
    found: list[Placeholder] = []
    for match in _PLACEHOLDER_RE.finditer(sql):
        if any(match.group(group) for group in _SKIP_GROUPS) or match.group("percent"):
            continue
        if match.group("numeric"):
            found.append(
                Placeholder(ParameterType.INDEX, match.start(), match.end(), index=int(match.group("numeric_num")))
            )
        elif match.group("named"):
            found.append(Placeholder(ParameterType.NAMED, match.start(), match.end(), name=match.group("name")))
        elif match.group("qmark"):
            found.append(Placeholder(ParameterType.POSITION, match.start(), match.end()))
    return found


def count_placeholders(sql: str, parameter_type: ParameterType) -> int:
    """
    Number of distinct parameters the statement expects.

    Positional markers count once per occurrence; indexed and named markers
    count once per distinct index or name.
    """

    if parameter_type is ParameterType.NONE:
        return 0
    placeholders = [p for p in scan_placeholders(sql) if p.style is parameter_type]
    if parameter_type is ParameterType.POSITION:
        return len(placeholders)
    if parameter_type is ParameterType.INDEX:
        return len({p.index for p in placeholders})
    return len({p.name for p in placeholders})


def placeholder_names(sql: str) -> list[str]:
    names: list[str] = []
    for placeholder in scan_placeholders(sql):
        if placeholder.style is ParameterType.NAMED and placeholder.name not in names:
            names.append(placeholder.name)
    return names


def translate(
    sql: str,
    parameter_type: ParameterType,
    paramstyle: str,
    parameters: Mapping[str, Any],
) -> tuple[str, Sequence[Any] | dict[str, Any]]:
    """
    Rewrite ``sql`` into the driver's ``paramstyle`` and shape ``parameters``
    (an ordered name -> value mapping) to match.

    ``%`` is doubled for ``format``/``pyformat`` drivers since they always
    receive a parameter container.
    """

    if paramstyle not in (QMARK, FORMAT, PYFORMAT):
        raise IntegrityError(f"Unsupported driver paramstyle '{paramstyle}'.")

    ordered = list(parameters.values())
    by_name = {normalize_name(name): value for name, value in parameters.items()}
    escape_percent = paramstyle in (FORMAT, PYFORMAT)
    positional_marker = "?" if paramstyle == QMARK else "%s"

    pieces: list[str] = []
    positional: list[Any] = []
    named: dict[str, Any] = {}
    cursor = 0

    for match in _PLACEHOLDER_RE.finditer(sql):
        pieces.append(sql[cursor : match.start()])
        cursor = match.end()
        token = match.group(0)

        if any(match.group(group) for group in _SKIP_GROUPS):
            # format drivers interpolate the whole string, literals included
            pieces.append(token.replace("%", "%%") if escape_percent else token)
        elif match.group("percent"):
            pieces.append("%%" if escape_percent else "%")
        elif match.group("qmark") and parameter_type is ParameterType.POSITION:
            pieces.append(positional_marker)
        elif match.group("numeric") and parameter_type is ParameterType.INDEX:
            index = int(match.group("numeric_num"))
            if index < 1 or index > len(ordered):
                raise IntegrityError(f"Placeholder ${index} has no bound value.")
            pieces.append(positional_marker)
            positional.append(ordered[index - 1])
        elif match.group("named") and parameter_type is ParameterType.NAMED:
            name = match.group("name")
            if name not in by_name:
                raise IntegrityError(f"Placeholder :{name} has no bound value.")
            if paramstyle == PYFORMAT:
                pieces.append(f"%({name})s")
                named[name] = by_name[name]
            else:
                pieces.append(positional_marker)
                positional.append(by_name[name])
        else:
            pieces.append(token)
    pieces.append(sql[cursor:])
    native_sql = "".join(pieces)

    if parameter_type is ParameterType.POSITION:
        return native_sql, ordered
    if parameter_type is ParameterType.NAMED and paramstyle == PYFORMAT:
        return native_sql, named
    return native_sql, positional
