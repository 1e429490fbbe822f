"""
Block tags for dynamic SQL in mapping templates.

{% where %}...{% endwhere %}
    Leading AND/OR is stripped and the block is prefixed with ``WHERE``;
    an empty block renders nothing.

{% setclause %}...{% endsetclause %}
    Trailing commas are stripped and the block is prefixed with ``SET``;
    an empty block renders nothing.
"""

import re
from collections.abc import Callable

from jinja2 import nodes
from jinja2.ext import Extension

from sqldao.engines.sql.filters import SqlSafe

_LEADING_CONJUNCTION = re.compile(r"^(?:AND|OR)\b\s*", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r"\s*,\s*$")


class _ClauseExtension(Extension):
    """Wraps a block body in a keyword after trimming it."""

    keyword: str = ""

    def parse(self, parser) -> nodes.CallBlock:
        token = next(parser.stream)
        body = parser.parse_statements((f"name:end{token.value}",), drop_needle=True)
        return nodes.CallBlock(
            self.call_method("_render_clause", [], [], []),
            [],
            [],
            body,
        ).set_lineno(token.lineno)

    def trim(self, inner: str) -> str:
        return inner

    def _render_clause(self, caller: Callable[[], str]) -> str:
        inner = self.trim((caller() or "").strip()).strip()
        if not inner:
            return SqlSafe("")
        return SqlSafe(f"{self.keyword} {inner}")


class WhereExtension(_ClauseExtension):
    tags = {"where"}
    keyword = "WHERE"

    def trim(self, inner: str) -> str:
        return _LEADING_CONJUNCTION.sub("", inner)


class SetClauseExtension(_ClauseExtension):
    tags = {"setclause"}
    keyword = "SET"

    def trim(self, inner: str) -> str:
        return _TRAILING_COMMA.sub("", inner)


SQL_EXTENSIONS: list[type[Extension]] = [WhereExtension, SetClauseExtension]
