"""
Jinja2 filters and the ``finalize`` auto-escape for mapping templates.

Values are normally passed to the database as ``:name`` binds. When a template
prints a value directly (``{{ value }}``) it is rendered as a SQL literal:
strings are quoted and escaped, ``None`` becomes ``NULL``. Helpers and filters
that already produce SQL return ``SqlSafe`` and are printed unchanged.
"""

from typing import Any

_SQL_QUOTE_ESCAPE = str.maketrans({"'": "''"})

_EMPTY_IN = "(SELECT 1 WHERE 1=0)"


class SqlSafe(str):
    """String that is already valid SQL and must not be escaped again."""


def _quote(value: Any) -> str:
    return "'" + str(value).translate(_SQL_QUOTE_ESCAPE) + "'"


def _literal(value: Any) -> str:
    if isinstance(value, SqlSafe):
        return str(value)
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    return _quote(value)


def sql_string(value: Any) -> SqlSafe:
    return SqlSafe("NULL" if value is None else _quote(value))


def sql_int(value: Any) -> SqlSafe:
    """Integer literal, or NULL when *value* is missing or not numeric."""
    try:
        return SqlSafe(str(int(value)))
    except (TypeError, ValueError):
        return SqlSafe("NULL")


def sql_float(value: Any) -> SqlSafe:
    try:
        return SqlSafe(str(float(value)))
    except (TypeError, ValueError):
        return SqlSafe("NULL")


def sql_bool(value: Any) -> SqlSafe:
    if value is None:
        return SqlSafe("NULL")
    return SqlSafe("TRUE" if value else "FALSE")


def in_list(value: Any) -> SqlSafe:
    """``[1, 'a']`` -> ``(1, 'a')``. Empty or missing -> a subquery matching nothing."""
    if value is None or isinstance(value, (str, bytes)):
        return SqlSafe(_EMPTY_IN)
    try:
        items = list(value)
    except TypeError:
        return SqlSafe(_EMPTY_IN)
    if not items:
        return SqlSafe(_EMPTY_IN)
    return SqlSafe("(" + ", ".join(_literal(v) for v in items) + ")")


def sql_like_start(value: Any) -> SqlSafe:
    """Prefix LIKE pattern with ``%`` and ``_`` in the user value escaped."""
    if value is None:
        return SqlSafe("NULL")
    s = str(value).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return SqlSafe(_quote(s + "%"))


def sql_raw(value: Any) -> SqlSafe:
    """Trusted SQL (identifiers, fragments). Never apply to user input."""
    if value is None:
        return SqlSafe("NULL")
    return SqlSafe(str(value))


def sql_finalize(value: Any) -> str:
    """``finalize`` callback: escape every ``{{ }}`` output not already ``SqlSafe``."""
    if isinstance(value, (list, tuple, set, frozenset)):
        return in_list(value)
    return _literal(value)


SQL_FILTERS: dict[str, Any] = {
    "sql_string": sql_string,
    "sql_int": sql_int,
    "sql_float": sql_float,
    "sql_bool": sql_bool,
    "in_list": in_list,
    "sql_like_start": sql_like_start,
    "sql_raw": sql_raw,
    "safe": sql_raw,
}
