"""
Paginate an arbitrary SELECT: run a derived COUNT query, then fetch one window.

``derive_count_sql`` is plain text rewriting. It is correct for single-level
SELECT statements; a subquery whose own ``from`` or ``order by`` appears before
the outer clause will be cut at the wrong place.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from sqldao.core.engine import QueryTypeEnum, SqlEngine
from sqldao.engines.sql.executor import execute_sql
from sqldao.schemas import Paging

_log = logging.getLogger(__name__)

_SELECT_LIST = re.compile(r"\bselect\b.*?\bfrom\b", re.IGNORECASE | re.DOTALL)
_ORDER_BY = re.compile(r"\border\s+by\b", re.IGNORECASE)
# ``:name`` bind (not a ``::`` cast) or a positional ``?``
_PLACEHOLDER = re.compile(r"(?<![:\w]):[A-Za-z_]\w*|\?")

COUNT_SELECT = "select count(1) as count from"


def derive_count_sql(sql: str) -> str:
    """Rewrite *sql* into ``select count(1) as count from ...``.

    The select list up to the first ``from`` is replaced. A trailing
    ``order by`` is dropped unless a placeholder follows it, in which case the
    clause may feed a bound expression and is kept.
    """
    count_sql = _SELECT_LIST.sub(COUNT_SELECT, sql, count=1)
    m = _ORDER_BY.search(count_sql)
    if m is not None and _PLACEHOLDER.search(count_sql, m.start()) is None:
        count_sql = count_sql[: m.start()]
    return count_sql


def window_sql(sql: str, index: int, size: int) -> str:
    # new line: *sql* may end in a -- comment
    return f"{sql}\nlimit {int(index)},{int(size)}"


async def paginate(
    engine: SqlEngine,
    sql: str,
    paging: Paging,
    params: Mapping[str, Any] | None = None,
) -> Paging:
    """Fill ``paging.count`` and, when it is positive, ``paging.items``.

    *paging* is updated in place and returned.
    """
    rows = await execute_sql(engine, derive_count_sql(sql), QueryTypeEnum.SELECT, params)
    count = int(rows[0]["count"]) if rows else 0
    paging.count = count
    if count > 0:
        paging.items = await execute_sql(
            engine,
            window_sql(sql, paging.index, paging.size),
            QueryTypeEnum.SELECT,
            params,
        )
    _log.debug("page index=%s size=%s count=%s", paging.index, paging.size, count)
    return paging
