"""
Execute rendered SQL through the relational engine.

Before a statement is sent it is normalized to a single line: whitespace runs
collapse to one space and spaces around parentheses are removed. Quoted
literals and block comments are copied untouched; ``--`` line comments are
dropped because collapsing their newline would comment out the rest of the
statement. The normalized text is what gets executed and logged.
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqldao.core.config import settings
from sqldao.core.engine import QueryTypeEnum, SqlEngine, coerce_query_type
from sqldao.exceptions import UnsupportedQueryTypeError

_log = logging.getLogger(__name__)


def _read_quoted(sql: str, i: int) -> int:
    """Return the index just past the literal that starts at ``sql[i]``."""
    quote = sql[i]
    length = len(sql)
    i += 1
    while i < length:
        c = sql[i]
        if c == quote:
            if i + 1 < length and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        if c == "\\" and i + 1 < length:
            i += 2
            continue
        i += 1
    return length


def normalize_sql(sql: str) -> str:
    out: list[str] = []
    pending_space = False
    i = 0
    length = len(sql)

    def emit(chunk: str) -> None:
        nonlocal pending_space
        if pending_space and out and chunk[0] not in "()" and out[-1][-1:] != "(":
            out.append(" ")
        pending_space = False
        out.append(chunk)

    while i < length:
        ch = sql[i]

        if ch.isspace():
            pending_space = True
            i += 1
            continue

        if ch in ("'", '"', "`"):
            end = _read_quoted(sql, i)
            emit(sql[i:end])
            i = end
            continue

        if ch == "-" and sql.startswith("--", i):
            end = sql.find("\n", i)
            i = length if end == -1 else end
            pending_space = True
            continue

        if ch == "/" and sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = length if end == -1 else end + 2
            emit(sql[i:end])
            i = end
            continue

        if ch == "(":
            # no space before or after an opening parenthesis
            pending_space = False
            out.append(ch)
            i += 1
            continue

        emit(ch)
        i += 1

    return "".join(out)


async def execute_sql(
    engine: SqlEngine,
    sql: str,
    query_type: QueryTypeEnum | str,
    params: Mapping[str, Any] | None = None,
    *,
    model: type | None = None,
) -> Any:
    """Validate *query_type*, normalize *sql* and run it with *params* bound."""
    kind = coerce_query_type(query_type)
    if kind not in engine.query_types:
        raise UnsupportedQueryTypeError(query_type)
    sql = normalize_sql(sql)
    _log.log(logging.INFO if settings.LOG_SQL else logging.DEBUG, "exec %s", sql)
    return await engine.query(sql, replacements=params or {}, query_type=kind, model=model)
